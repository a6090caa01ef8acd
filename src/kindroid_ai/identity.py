"""
User identity from the API key.

The key is treated as an opaque carrier of the user id: the JWT is decoded
without verifying its signature.
"""

import jwt

from kindroid_ai.errors import IdentityError

USER_ID_CLAIM = "user_id"


def strip_bearer(api_key: str) -> str:
    if api_key.startswith("Bearer "):
        return api_key[len("Bearer "):]
    return api_key


def extract_user_id(api_key: str) -> str:
    """Return the ``user_id`` claim of an unverified JWT api key."""
    token = strip_bearer(api_key)
    try:
        claims = jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError as e:
        raise IdentityError(f"failed to parse JWT: {e}") from e

    user_id = claims.get(USER_ID_CLAIM)
    if not isinstance(user_id, str) or not user_id:
        raise IdentityError("user_id not found or not a string in JWT claims")
    return user_id

"""
Kindroid AI error types.

Every error except a per-field decryption failure propagates to the caller.
"""

from typing import Any, Optional


class KindroidAIError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class TransportError(KindroidAIError):
    """Network-level failure (DNS, connect, read). Never retried."""

    def __init__(self, message: str):
        super().__init__("transport_error", message)


class HttpError(KindroidAIError):
    """Non-200 response. The body is deliberately not parsed."""

    def __init__(self, status_code: int, status_text: str):
        super().__init__("http_error", f"HTTP error: {status_code} {status_text}".rstrip(),
                         {"status_code": status_code})
        self.status_code = status_code
        self.status_text = status_text


class ResponseDecodeError(KindroidAIError):
    def __init__(self, message: str):
        super().__init__("decode_error", message)


class IdentityError(KindroidAIError):
    def __init__(self, message: str):
        super().__init__("identity_error", message)


class StoreError(KindroidAIError):
    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__("store_error", message, details)


class DecryptionError(KindroidAIError):
    def __init__(self, message: str):
        super().__init__("decryption_error", message)


class AudioNotAvailableError(KindroidAIError):
    def __init__(self, message_id: str):
        super().__init__(
            "audio_not_available",
            f"no audio available for message {message_id} after inference",
            {"message_id": message_id},
        )

"""
Decrypt-on-read codec for stored chat fields.

Encrypted values look like ``!enc:<base64>`` where the base64 payload is
OpenSSL's salted format: ``Salted__`` + 8-byte salt + AES-256-CBC ciphertext.
Key and IV come from ``EVP_BytesToKey`` with MD5 and a single iteration,
password = the owning user's id. The producer owns this format.
"""

import base64
import binascii
import hashlib
import os
from typing import Any, Optional

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from loguru import logger

from kindroid_ai.errors import DecryptionError

ENCRYPTION_PREFIX = "!enc:"
DECRYPTION_FAILED = "[DECRYPTION FAILED]"

SALT_HEADER = b"Salted__"
SALT_LEN = 8
KEY_LEN = 32
IV_LEN = 16

# Stored document fields subject to decrypt-on-read.
ENCRYPTED_FIELDS = ("message", "audioUrl")


def is_encrypted(value: str) -> bool:
    return value.startswith(ENCRYPTION_PREFIX)


def bytes_to_key_md5(password: bytes, salt: bytes, key_len: int = KEY_LEN, iv_len: int = IV_LEN) -> tuple[bytes, bytes]:
    """OpenSSL EVP_BytesToKey(MD5, count=1)."""
    derived = b""
    block = b""
    while len(derived) < key_len + iv_len:
        block = hashlib.md5(block + password + salt).digest()
        derived += block
    return derived[:key_len], derived[key_len:key_len + iv_len]


def openssl_decrypt(password: str, data: bytes) -> bytes:
    # `openssl enc -a` wraps at 64 columns; line breaks are not part of the payload.
    data = b"".join(data.split())
    try:
        raw = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecryptionError(f"ciphertext is not valid base64: {e}") from e

    if not raw.startswith(SALT_HEADER) or len(raw) < len(SALT_HEADER) + SALT_LEN:
        raise DecryptionError("ciphertext is missing the salt header")
    salt = raw[len(SALT_HEADER):len(SALT_HEADER) + SALT_LEN]
    body = raw[len(SALT_HEADER) + SALT_LEN:]
    if not body or len(body) % (algorithms.AES.block_size // 8):
        raise DecryptionError("ciphertext length is not a multiple of the block size")

    key, iv = bytes_to_key_md5(password.encode("utf-8"), salt)
    decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
    padded = decryptor.update(body) + decryptor.finalize()

    unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
    try:
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as e:
        raise DecryptionError("bad padding (wrong password?)") from e


def openssl_encrypt(password: str, plaintext: bytes, salt: Optional[bytes] = None) -> bytes:
    """Inverse of :func:`openssl_decrypt`, returns base64 bytes."""
    salt = salt if salt is not None else os.urandom(SALT_LEN)
    if len(salt) != SALT_LEN:
        raise ValueError(f"salt must be {SALT_LEN} bytes")
    key, iv = bytes_to_key_md5(password.encode("utf-8"), salt)

    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(plaintext) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    body = encryptor.update(padded) + encryptor.finalize()
    return base64.b64encode(SALT_HEADER + salt + body)


def decrypt_message(value: str, password: str) -> str:
    """Decrypt a ``!enc:``-prefixed value; unmarked values pass through."""
    if not is_encrypted(value):
        return value
    trimmed = value[len(ENCRYPTION_PREFIX):]
    plaintext = openssl_decrypt(password, trimmed.encode("ascii", errors="replace"))
    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecryptionError("decrypted bytes are not valid UTF-8") from e


def encrypt_message(plaintext: str, password: str, salt: Optional[bytes] = None) -> str:
    return ENCRYPTION_PREFIX + openssl_encrypt(password, plaintext.encode("utf-8"), salt).decode("ascii")


def decrypt_fields(record: dict[str, Any], password: str, record_id: Optional[str] = None) -> dict[str, Any]:
    """Decrypt every encrypted field of ``record`` in place.

    A field that fails to decrypt is replaced with :data:`DECRYPTION_FAILED`
    and the rest of the record is still returned.
    """
    for name in ENCRYPTED_FIELDS:
        value = record.get(name)
        if not isinstance(value, str):
            continue
        try:
            record[name] = decrypt_message(value, password)
        except DecryptionError as e:
            logger.warning("Failed to decrypt {} for doc {}: {}", name, record_id or record.get("id"), e)
            record[name] = DECRYPTION_FAILED
    return record

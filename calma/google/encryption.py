"""AES-256-GCM encryption for OAuth tokens stored in the database.

Ciphertext format is ``iv:tag:ciphertext`` with each part hex encoded.
"""

import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from calma.config import get_settings

_IV_BYTES = 16
_TAG_BYTES = 16


class EncryptionError(Exception):
    pass


def _key() -> bytes:
    key_hex = get_settings().google.encryption_key
    if not key_hex:
        raise EncryptionError("ENCRYPTION_KEY is not set")
    try:
        key = bytes.fromhex(key_hex)
    except ValueError as e:
        raise EncryptionError("ENCRYPTION_KEY must be hex encoded") from e
    if len(key) != 32:
        raise EncryptionError("ENCRYPTION_KEY must be 32 bytes (64 hex characters)")
    return key


def encrypt(plaintext: str) -> str:
    iv = os.urandom(_IV_BYTES)
    sealed = AESGCM(_key()).encrypt(iv, plaintext.encode("utf-8"), None)
    ciphertext, tag = sealed[:-_TAG_BYTES], sealed[-_TAG_BYTES:]
    return f"{iv.hex()}:{tag.hex()}:{ciphertext.hex()}"


def decrypt(token: str) -> str:
    parts = token.split(":")
    if len(parts) != 3 or not all(parts):
        raise EncryptionError("Invalid encrypted data format")
    try:
        iv, tag, ciphertext = (bytes.fromhex(p) for p in parts)
        return AESGCM(_key()).decrypt(iv, ciphertext + tag, None).decode("utf-8")
    except (ValueError, InvalidTag) as e:
        raise EncryptionError("Encrypted data could not be decrypted") from e

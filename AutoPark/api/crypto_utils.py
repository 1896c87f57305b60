import os
import base64
from typing import Optional
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

KEY_ENV = "AUTOPARK_AES_KEY"


def is_enabled() -> bool:
    return bool(os.environ.get(KEY_ENV))


def _load_key() -> bytes:
    b64 = os.environ.get(KEY_ENV)
    if not b64:
        raise RuntimeError(f"{KEY_ENV} not set. Provide base64-encoded 32-byte key.")
    try:
        key = base64.b64decode(b64, validate=True)
    except ValueError:
        raise RuntimeError(f"{KEY_ENV} is not valid base64")
    if len(key) not in (16, 24, 32):
        raise RuntimeError("Invalid AES key length. Use 16/24/32 bytes (base64-encoded).")
    return key


def encrypt_str(plaintext: str, associated_data: Optional[bytes] = None) -> str:
    if plaintext is None:
        return None
    aesgcm = AESGCM(_load_key())
    nonce = os.urandom(12)
    ct = aesgcm.encrypt(nonce, plaintext.encode("utf-8"), associated_data)
    return base64.b64encode(nonce + ct).decode("ascii")


def decrypt_str(b64payload: str, associated_data: Optional[bytes] = None) -> str:
    if b64payload is None:
        return None
    aesgcm = AESGCM(_load_key())
    try:
        data = base64.b64decode(b64payload, validate=True)
    except ValueError:
        raise ValueError("Payload is not valid base64-encoded encrypted data")
    if len(data) < 13:
        raise ValueError("Payload is too short to be valid encrypted data")
    nonce, ct = data[:12], data[12:]
    return aesgcm.decrypt(nonce, ct, associated_data).decode("utf-8")


def protect(value: str) -> str:
    """Encrypt a PII field when a key is configured, otherwise store it as-is."""
    return encrypt_str(value) if is_enabled() else value


def reveal(value: str) -> str:
    return decrypt_str(value) if is_enabled() else value


def mask_value(value: str, keep: int = 1) -> str:
    if value is None:
        return None
    if len(value) <= keep + 1:
        return "*" * len(value)
    return value[:keep] + "*" * (len(value) - keep)

"""
AES-128-CBC message encryption compatible with the Pincho mobile app.

Only the message body (or NotifAI input text) is encrypted. Title, type,
tags and URLs are always sent in cleartext so the server can filter on them.
The password never leaves the process: it is only used to derive the key.

The key derivation (first 16 bytes of SHA-1 over the UTF-8 password) is
dictated by the app's decryption routine, not chosen for security margin.
"""

from __future__ import annotations

import base64
import hashlib
import secrets
from dataclasses import dataclass

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from pincho.exceptions import InvalidArgumentError

IV_LENGTH = 16
KEY_LENGTH = 16

_CUSTOM_BASE64 = str.maketrans({"+": "-", "/": ".", "=": "_"})


@dataclass(frozen=True)
class IVResult:
    """Initialization vector as raw bytes plus its lowercase hex form."""

    iv_bytes: bytes
    iv_hex: str


def custom_base64_encode(data: bytes) -> str:
    """
    Base64-encode bytes using the app's alphabet.

    Standard Base64 output with ``+`` -> ``-``, ``/`` -> ``.`` and ``=`` -> ``_``.
    """
    return base64.b64encode(data).decode("ascii").translate(_CUSTOM_BASE64)


def derive_encryption_key(password: str) -> bytes:
    """
    Derive the 16-byte AES key from a password.

    Args:
        password: Encryption password

    Returns:
        First 32 hex characters of SHA-1(password), decoded to 16 bytes
    """
    if password is None:
        raise InvalidArgumentError("Password is required", context={"field": "password"})

    hash_hex = hashlib.sha1(password.encode("utf-8")).hexdigest()
    return bytes.fromhex(hash_hex[: KEY_LENGTH * 2])


def generate_iv() -> IVResult:
    """Generate a cryptographically secure random 16-byte IV."""
    iv = secrets.token_bytes(IV_LENGTH)
    return IVResult(iv_bytes=iv, iv_hex=iv.hex())


def encrypt_message(plaintext: str, password: str, iv: bytes) -> str:
    """
    Encrypt a message with AES-128-CBC and PKCS#7 padding.

    Args:
        plaintext: Message to encrypt
        password: Encryption password (must match the type configured in the app)
        iv: 16-byte initialization vector

    Returns:
        Ciphertext encoded with the custom Base64 alphabet

    Raises:
        InvalidArgumentError: If an argument is missing or the IV is not 16 bytes
    """
    for field, value in (("plaintext", plaintext), ("password", password), ("iv", iv)):
        if value is None:
            raise InvalidArgumentError(f"{field} is required", context={"field": field})

    if len(iv) != IV_LENGTH:
        raise InvalidArgumentError(
            f"IV must be {IV_LENGTH} bytes",
            context={"field": "iv", "length": len(iv)},
        )

    key = derive_encryption_key(password)

    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()

    encryptor = Cipher(algorithms.AES(key), modes.CBC(bytes(iv))).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()

    return custom_base64_encode(ciphertext)

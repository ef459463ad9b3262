"""
Encryption helpers for credentials kept in configuration.

Credentials are Fernet tokens encrypted with the key in CREDENTIALS_SECRET.
"""

import os

from cryptography.fernet import Fernet, InvalidToken


class CredentialError(Exception):
    """Raised when a stored credential cannot be decrypted."""


def get_fernet() -> Fernet:
    secret = os.getenv("CREDENTIALS_SECRET")
    if not secret:
        msg = "CREDENTIALS_SECRET not set in environment"
        raise RuntimeError(msg)
    return Fernet(secret.encode())


def encrypt(value: str) -> str:
    return get_fernet().encrypt(value.encode()).decode()


def decrypt(token: str) -> str | None:
    """
    Decrypt a stored credential. Empty tokens decrypt to None so the AWS SDK
    can fall back to its default credential chain.
    """
    if not token:
        return None
    try:
        return get_fernet().decrypt(token.encode()).decode()
    except InvalidToken as exc:
        error_message = "Stored credential could not be decrypted"
        raise CredentialError(error_message) from exc

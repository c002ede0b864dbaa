"""Password hashing helpers (passlib, PBKDF2-SHA256)."""

import secrets

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    if not isinstance(password, str):
        raise TypeError("Password must be a string.")
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    try:
        return pwd_context.verify(plain_password, password_hash)
    except ValueError:
        # Unrecognised or malformed hash: treat as a mismatch
        return False


def unusable_password() -> str:
    """Hash of a random secret nobody knows; used for invited (pending) accounts."""
    return hash_password(secrets.token_urlsafe(32))

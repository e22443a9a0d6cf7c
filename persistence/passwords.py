from __future__ import annotations

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    if not isinstance(password, str):
        raise TypeError("Password must be a string.")
    return pwd_context.hash(password)


def is_hashed(stored: str) -> bool:
    return bool(stored) and pwd_context.identify(stored) is not None


def verify_password(plain_password: str, stored: str) -> bool:
    """
    Check a password against a stored hash.

    Records written before hashing hold the password in cleartext; those are
    compared directly so the caller can upgrade them after a successful login.
    """
    if not stored:
        return False
    if not is_hashed(stored):
        return plain_password == stored
    return pwd_context.verify(plain_password, stored)

"""
Actor authentication.

There is a single shared password; a successful login makes the caller act
with the configured role. Roles themselves are enforced by the permission gate.
The password can be configured as an Argon2 hash (``auth.password_hash``)
instead of plain text.
"""

import hmac

from pwdlib import PasswordHash
from pwdlib.hashers.argon2 import Argon2Hasher
from pydantic import BaseModel

from .config import settings
from .logger import logger

password_hash = PasswordHash((Argon2Hasher(),))


class InvalidCredentials(Exception):
    pass


class User(BaseModel):
    username: str
    role: str


def get_password_hash(password: str) -> str:
    return password_hash.hash(password)


def verify_password(plain_password: str) -> bool:
    """Check a password against the configured hash, or the plain password if no hash is set."""
    if settings.auth.password_hash:
        return password_hash.verify(plain_password, settings.auth.password_hash)
    return hmac.compare_digest(plain_password.encode(), settings.auth.password.encode())


def authenticate(username: str, password: str) -> User:
    """Return the user for valid credentials.

    Raises:
        InvalidCredentials: If the username is blank or the password is wrong
    """
    if not username.strip():
        raise InvalidCredentials("Username must not be empty")
    if not verify_password(password):
        logger.info(f"Failed login attempt for user '{username}'")
        raise InvalidCredentials("Invalid credentials. Please try again.")

    logger.info(f"User '{username}' logged in with role '{settings.auth.role}'")
    return User(username=username, role=settings.auth.role)

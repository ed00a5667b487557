"""Password hashing helpers backed by passlib's bcrypt scheme."""

from __future__ import annotations

import logging

from passlib.context import CryptContext

# passlib logs a bcrypt version warning on newer bcrypt releases
logging.getLogger("passlib").setLevel(logging.ERROR)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# bcrypt only reads the first 72 bytes of a password
MAX_PASSWORD_LENGTH = 72


def hash_password(password: str) -> str:
    """Hash a password with a random salt."""
    return pwd_context.hash(password)


def verify_password(password: str, stored: str) -> bool:
    """Check a password against a stored hash; malformed hashes never match."""
    try:
        return pwd_context.verify(password, stored)
    except ValueError:
        return False

"""User registration and login backed by bcrypt password hashes."""

from __future__ import annotations

import logging
from typing import Optional

import bcrypt

from .config import MIN_PASSWORD_LENGTH
from .db import RecordStore
from .models import User

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # stored value is not a bcrypt hash
        return False


def register_user(store: RecordStore, username: str, password: str) -> User:
    """Create a user with a hashed password.

    Raises:
        ValueError: If the password is shorter than MIN_PASSWORD_LENGTH
        DuplicateUsernameError: If the username is taken
    """
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    user = store.create_user(username.strip(), hash_password(password))
    logger.info("Registered user %s", user.username)
    return user


def authenticate(store: RecordStore, username: str, password: str) -> Optional[User]:
    """Return the user when the credentials match, otherwise None."""
    user = store.get_user_by_username(username.strip())
    if user is None or not verify_password(password, user.password_hash):
        logger.info("Failed login for %s", username)
        return None
    return user

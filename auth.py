"""
Accounts, password hashing and role checks.

The caller of an operation is an optional ``User``: ``None`` means nobody is
logged in.
"""

import hashlib
import hmac
import logging
import secrets
from typing import Optional

from database import Storage
from errors import AlreadyExists, Forbidden, Unauthorized
from schemas import User, UserInDB

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    salt = secrets.token_hex(16)
    digest = hashlib.scrypt(password.encode(), salt=salt.encode(), n=16384, r=8, p=1, dklen=64)
    return f"{digest.hex()}.{salt}"


def verify_password(password: str, stored: str) -> bool:
    try:
        hashed, salt = stored.split(".")
    except ValueError:
        return False
    digest = hashlib.scrypt(password.encode(), salt=salt.encode(), n=16384, r=8, p=1, dklen=64)
    return hmac.compare_digest(digest.hex(), hashed)


def public(user: UserInDB) -> User:
    return User(**user.model_dump(exclude={"password"}))


def register(storage: Storage, username: str, password: str, role: str = "customer") -> User:
    if storage.get_user_by_username(username):
        raise AlreadyExists("Username already exists")
    user = storage.create_user(username, hash_password(password), role)
    logger.info("Registered %s user %s", role, username)
    return public(user)


def authenticate(storage: Storage, username: str, password: str) -> User:
    user = storage.get_user_by_username(username)
    if not user or not verify_password(password, user.password):
        raise Unauthorized("Invalid credentials")
    logger.info("User %s logged in", username)
    return public(user)


def ensure_admin(storage: Storage, username: str, password: str) -> Optional[User]:
    """Create the bootstrap admin account unless the username is taken."""
    if storage.get_user_by_username(username):
        return None
    return register(storage, username, password, role="admin")


def require_user(caller: Optional[User]) -> User:
    if caller is None:
        raise Unauthorized()
    return caller


def require_role(role: Optional[str], *allowed: str) -> None:
    if role not in allowed:
        raise Forbidden()

"""User accounts and credentials."""

from __future__ import annotations

from argon2 import PasswordHasher

from ..domain.repositories.user import UserRepository
from ..errors import ConflictError, NotFoundError, RequestValidationError
from ..logging_config import get_logger
from ..models.user import User

_hasher = PasswordHasher()
MIN_PASSWORD_LENGTH = 8

logger = get_logger("users")


def create_user(
    *,
    username: str,
    password: str,
    display_name: str = "",
    repository: UserRepository,
) -> User:
    """Create a new user with hashed password."""

    username = username.strip()
    if not username:
        raise RequestValidationError("Username is required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise RequestValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )
    if repository.get_by_username(username) is not None:
        raise ConflictError("Username already exists")

    user = repository.save(
        User(
            username=username,
            display_name=display_name.strip(),
            password_hash=_hasher.hash(password),
        )
    )
    logger.info("User created", extra={"user_id": user.id, "username": username})
    return user


def require_user(user_id: int, repository: UserRepository, message: str = "User not found") -> User:
    user = repository.get_by_id(user_id)
    if user is None:
        raise NotFoundError(message)
    return user


__all__ = ["MIN_PASSWORD_LENGTH", "create_user", "require_user"]

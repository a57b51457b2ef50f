"""Repository interfaces (Ports) for the domain layer."""

from .user_repository import UserRepository

__all__ = [
    "UserRepository",
]

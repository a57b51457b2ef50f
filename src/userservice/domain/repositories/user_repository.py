"""User repository interface (Port)."""

from abc import ABC, abstractmethod
from typing import List

from ..models.user import User


class UserRepository(ABC):
    """
    Port for user persistence.

    Implementations own the stored representation of users and must
    enforce email uniqueness among live users themselves (a unique index
    or equivalent); the service layer's lookup before create is only a
    fast path. Deletes are logical: a deleted user disappears from every
    lookup, listing and uniqueness check.

    Driver failures are reported as ``StoreError``.
    """

    @abstractmethod
    async def create(self, user: User) -> None:
        """
        Persist a new user.

        Raises:
            DuplicateEmailError: If a live user already has this email
            StoreError: On persistence failure
        """
        pass

    @abstractmethod
    async def get_by_id(self, user_id: str) -> User:
        """
        Retrieve a live user by id.

        Raises:
            UserNotFoundError: If no live user has this id
            StoreError: On persistence failure
        """
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> User:
        """
        Retrieve a live user by email.

        Raises:
            UserNotFoundError: If no live user has this email
            StoreError: On persistence failure
        """
        pass

    @abstractmethod
    async def update(self, user: User) -> None:
        """
        Replace the mutable fields of an existing live user, matched by id.

        Raises:
            UserNotFoundError: If no live user has this id
            StoreError: On persistence failure
        """
        pass

    @abstractmethod
    async def delete(self, user_id: str) -> None:
        """
        Soft-delete a user by id.

        Raises:
            UserNotFoundError: If no live user has this id
            StoreError: On persistence failure
        """
        pass

    @abstractmethod
    async def list(self, limit: int, offset: int) -> List[User]:
        """
        List live users ordered by creation time, newest first.

        Args:
            limit: Maximum number of users to return
            offset: Number of users to skip

        Raises:
            StoreError: On persistence failure
        """
        pass

    async def check_health(self) -> None:
        """
        Verify the backing store is reachable.

        Raises:
            StoreError: If the store cannot serve requests
        """
        return None

"""User use cases."""

import asyncio
from typing import Awaitable, List, Optional, TypeVar

from ...domain.exceptions import (
    DuplicateEmailError,
    StoreTimeoutError,
    UserNotFoundError,
)
from ...domain.models.user import User
from ...domain.repositories.user_repository import UserRepository

T = TypeVar("T")


class UserService:
    """
    Orchestrates the user use cases on top of a ``UserRepository``.

    The service is stateless: every call is independent, so one instance
    can be shared across concurrent requests. Each store call is bounded
    by a deadline (``timeout`` argument, falling back to the default given
    at construction); an expired deadline raises ``StoreTimeoutError``.
    """

    def __init__(
        self,
        repository: UserRepository,
        default_timeout: Optional[float] = None,
    ):
        """
        Initialize service.

        Args:
            repository: User persistence port
            default_timeout: Seconds allowed per store call (None = unbounded)
        """
        self.repository = repository
        self.default_timeout = default_timeout

    async def _store(self, call: Awaitable[T], timeout: Optional[float]) -> T:
        if timeout is None:
            timeout = self.default_timeout
        try:
            return await asyncio.wait_for(call, timeout)
        except asyncio.TimeoutError as e:
            raise StoreTimeoutError(
                f"store call exceeded deadline of {timeout}s"
            ) from e

    async def create_user(
        self,
        email: str,
        name: str,
        timeout: Optional[float] = None,
    ) -> User:
        """
        Create a user with a unique email.

        The lookup before create rejects most duplicates early; a duplicate
        that slips in concurrently is caught by the store's own unique
        constraint and raised as ``DuplicateEmailError`` as well.

        Raises:
            DuplicateEmailError: If a live user already has this email
            InvalidEmailError: If the email is malformed
            InvalidNameError: If the name is invalid
            StoreError: On persistence failure
        """
        try:
            await self._store(self.repository.get_by_email(email), timeout)
        except UserNotFoundError:
            pass
        else:
            raise DuplicateEmailError()

        user = User.create(email, name)
        await self._store(self.repository.create(user), timeout)
        return user

    async def get_user(self, user_id: str, timeout: Optional[float] = None) -> User:
        """Retrieve a user by id."""
        return await self._store(self.repository.get_by_id(user_id), timeout)

    async def get_user_by_email(
        self,
        email: str,
        timeout: Optional[float] = None,
    ) -> User:
        """Retrieve a user by email."""
        return await self._store(self.repository.get_by_email(email), timeout)

    async def update_user(
        self,
        user_id: str,
        name: str,
        timeout: Optional[float] = None,
    ) -> User:
        """
        Rename a user.

        Nothing is persisted when the new name is invalid.

        Raises:
            UserNotFoundError: If no live user has this id
            InvalidNameError: If the name is invalid
            StoreError: On persistence failure
        """
        user = await self._store(self.repository.get_by_id(user_id), timeout)
        user.rename(name)
        await self._store(self.repository.update(user), timeout)
        return user

    async def delete_user(self, user_id: str, timeout: Optional[float] = None) -> None:
        """Soft-delete a user by id."""
        await self._store(self.repository.delete(user_id), timeout)

    async def list_users(
        self,
        limit: int,
        offset: int,
        timeout: Optional[float] = None,
    ) -> List[User]:
        """List users newest first. Bounds are the caller's concern."""
        return await self._store(self.repository.list(limit, offset), timeout)

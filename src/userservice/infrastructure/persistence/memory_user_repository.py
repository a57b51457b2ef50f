"""In-memory implementation of the UserRepository port."""

import threading
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Dict, List, Optional

from ...domain.exceptions import DuplicateEmailError, UserNotFoundError
from ...domain.models.user import User
from ...domain.repositories.user_repository import UserRepository


@dataclass
class _StoredUser:
    user: User
    sequence: int
    deleted_at: Optional[datetime] = None


class InMemoryUserRepository(UserRepository):
    """
    Dictionary-backed user store.

    Used by tests and by the ``memory`` storage provider. Records are
    copied on the way in and out, so callers never share instances with
    the store. Deleted users keep their record with ``deleted_at`` set.
    """

    def __init__(self):
        self._records: Dict[str, _StoredUser] = {}
        self._lock = threading.Lock()
        self._sequence = 0

    def _live(self, record: Optional[_StoredUser]) -> Optional[_StoredUser]:
        if record is None or record.deleted_at is not None:
            return None
        return record

    def _find_by_email(self, email: str) -> Optional[_StoredUser]:
        for record in self._records.values():
            if record.deleted_at is None and record.user.email == email:
                return record
        return None

    async def create(self, user: User) -> None:
        with self._lock:
            if self._find_by_email(user.email) is not None:
                raise DuplicateEmailError()
            self._sequence += 1
            self._records[user.id] = _StoredUser(replace(user), self._sequence)

    async def get_by_id(self, user_id: str) -> User:
        with self._lock:
            record = self._live(self._records.get(user_id))
            if record is None:
                raise UserNotFoundError()
            return replace(record.user)

    async def get_by_email(self, email: str) -> User:
        with self._lock:
            record = self._find_by_email(email)
            if record is None:
                raise UserNotFoundError()
            return replace(record.user)

    async def update(self, user: User) -> None:
        with self._lock:
            record = self._live(self._records.get(user.id))
            if record is None:
                raise UserNotFoundError()
            record.user = replace(record.user, name=user.name, updated_at=user.updated_at)

    async def delete(self, user_id: str) -> None:
        with self._lock:
            record = self._live(self._records.get(user_id))
            if record is None:
                raise UserNotFoundError()
            record.deleted_at = datetime.now(timezone.utc)

    async def list(self, limit: int, offset: int) -> List[User]:
        with self._lock:
            live = [r for r in self._records.values() if r.deleted_at is None]
        live.sort(key=lambda r: (r.user.created_at, r.sequence), reverse=True)
        return [replace(r.user) for r in live[offset:offset + limit]]

    def __len__(self) -> int:
        """Number of live users."""
        with self._lock:
            return sum(1 for r in self._records.values() if r.deleted_at is None)

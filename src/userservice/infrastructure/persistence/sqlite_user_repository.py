"""SQLite implementation of the UserRepository port."""

import asyncio
import sqlite3
import threading
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, List, Optional, TypeVar

from ...domain.exceptions import DuplicateEmailError, StoreError, UserNotFoundError
from ...domain.models.user import User
from ...domain.repositories.user_repository import UserRepository
from ..logging import ServiceLogger
from ..resilience import RetryConfig, retry_with_backoff

T = TypeVar("T")

_SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    email TEXT NOT NULL CHECK (length(email) <= 254),
    name TEXT NOT NULL CHECK (length(name) <= 255),
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    deleted_at TEXT
);

CREATE UNIQUE INDEX IF NOT EXISTS idx_users_email_live
    ON users(email) WHERE deleted_at IS NULL;
CREATE INDEX IF NOT EXISTS idx_users_created_at ON users(created_at);
CREATE INDEX IF NOT EXISTS idx_users_deleted_at ON users(deleted_at);
"""

_COLUMNS = "id, email, name, created_at, updated_at"


def _serialize_datetime(value: datetime) -> str:
    # Fixed-width UTC text keeps lexical order equal to time order
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _parse_datetime(value: str) -> datetime:
    return datetime.fromisoformat(value)


def _is_duplicate_email(error: sqlite3.IntegrityError) -> bool:
    message = str(error)
    return "UNIQUE constraint failed" in message and "email" in message


class _CallAbandoned(Exception):
    """Raised in the worker thread once the awaiting caller has gone away."""


class _Call:
    """
    Shared state between an awaiting caller and its worker thread.

    When the caller is cancelled (deadline expired or task cancelled) the
    worker stops before its next attempt, interrupts the running
    statement and never commits.
    """

    def __init__(self):
        self.abandoned = threading.Event()
        self.conn: Optional[sqlite3.Connection] = None

    def abandon(self) -> None:
        self.abandoned.set()
        conn = self.conn
        if conn is not None:
            try:
                conn.interrupt()
            except sqlite3.ProgrammingError:
                # Connection closed between the check and the call
                pass


class SQLiteUserRepository(UserRepository):
    """
    User store backed by a SQLite database file.

    Email uniqueness among live users is enforced by a partial unique
    index, so a concurrent duplicate insert fails inside the database and
    is reported as ``DuplicateEmailError``. Deletes set ``deleted_at``.

    Each call opens its own connection and runs in a worker thread, so
    the event loop is never blocked. Transient ``sqlite3.OperationalError``
    (for example "database is locked") is retried with backoff; any other
    driver failure is raised as ``StoreError``. When the awaiting caller
    is cancelled, the worker stops retrying and rolls back instead of
    committing, so a call reported as failed never takes effect later.
    """

    def __init__(
        self,
        path: Path,
        busy_timeout: float = 5.0,
        retry_config: Optional[RetryConfig] = None,
    ):
        """
        Initialize repository.

        Args:
            path: Database file (created on first use)
            busy_timeout: Seconds SQLite waits on a locked database per attempt
            retry_config: Retry policy for operational errors
        """
        self.path = Path(path)
        self.busy_timeout = busy_timeout
        self.logger = ServiceLogger.get_instance()

        retry_config = replace(
            retry_config or RetryConfig(),
            retryable_exceptions=(sqlite3.OperationalError,),
        )
        self._run_with_retry = retry_with_backoff(retry_config)(self._run_once)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path, timeout=self.busy_timeout, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _run_once(
        self,
        operation: Callable[[sqlite3.Connection], T],
        call: Optional[_Call] = None,
    ) -> T:
        if call is not None and call.abandoned.is_set():
            raise _CallAbandoned()

        conn = self._connect()
        if call is not None:
            call.conn = conn
        try:
            with conn:
                result = operation(conn)
                # Raising inside the block rolls the transaction back
                if call is not None and call.abandoned.is_set():
                    raise _CallAbandoned()
                return result
        finally:
            if call is not None:
                call.conn = None
            conn.close()

    async def _run(self, operation: Callable[[sqlite3.Connection], T]) -> T:
        call = _Call()
        try:
            return await asyncio.to_thread(self._run_with_retry, operation, call)
        except asyncio.CancelledError:
            call.abandon()
            raise
        except sqlite3.Error as e:
            if isinstance(e, sqlite3.IntegrityError) and _is_duplicate_email(e):
                raise DuplicateEmailError() from e
            raise StoreError(f"sqlite error: {e}") from e

    def initialize(self) -> None:
        """Create the database file and schema if they do not already exist."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self._run_with_retry(lambda conn: conn.executescript(_SCHEMA))
        except sqlite3.Error as e:
            raise StoreError(f"could not initialize database {self.path}: {e}") from e

        self.logger.info(
            "User store initialized",
            extra={"database_path": str(self.path)}
        )

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> User:
        return User(
            id=row["id"],
            email=row["email"],
            name=row["name"],
            created_at=_parse_datetime(row["created_at"]),
            updated_at=_parse_datetime(row["updated_at"]),
        )

    async def create(self, user: User) -> None:
        def operation(conn: sqlite3.Connection) -> None:
            conn.execute(
                f"INSERT INTO users ({_COLUMNS}) VALUES (?, ?, ?, ?, ?)",
                (
                    user.id,
                    user.email,
                    user.name,
                    _serialize_datetime(user.created_at),
                    _serialize_datetime(user.updated_at),
                ),
            )

        await self._run(operation)

    async def _fetch_one(self, where: str, value: Any) -> User:
        def operation(conn: sqlite3.Connection) -> Optional[sqlite3.Row]:
            return conn.execute(
                f"SELECT {_COLUMNS} FROM users WHERE {where} = ? AND deleted_at IS NULL",
                (value,),
            ).fetchone()

        row = await self._run(operation)
        if row is None:
            raise UserNotFoundError()
        return self._row_to_user(row)

    async def get_by_id(self, user_id: str) -> User:
        return await self._fetch_one("id", user_id)

    async def get_by_email(self, email: str) -> User:
        return await self._fetch_one("email", email)

    async def update(self, user: User) -> None:
        def operation(conn: sqlite3.Connection) -> int:
            cursor = conn.execute(
                "UPDATE users SET name = ?, updated_at = ? WHERE id = ? AND deleted_at IS NULL",
                (user.name, _serialize_datetime(user.updated_at), user.id),
            )
            return cursor.rowcount

        if await self._run(operation) == 0:
            raise UserNotFoundError()

    async def delete(self, user_id: str) -> None:
        deleted_at = _serialize_datetime(datetime.now(timezone.utc))

        def operation(conn: sqlite3.Connection) -> int:
            cursor = conn.execute(
                "UPDATE users SET deleted_at = ? WHERE id = ? AND deleted_at IS NULL",
                (deleted_at, user_id),
            )
            return cursor.rowcount

        if await self._run(operation) == 0:
            raise UserNotFoundError()

    async def list(self, limit: int, offset: int) -> List[User]:
        def operation(conn: sqlite3.Connection) -> List[sqlite3.Row]:
            return conn.execute(
                f"SELECT {_COLUMNS} FROM users WHERE deleted_at IS NULL "
                "ORDER BY created_at DESC, rowid DESC LIMIT ? OFFSET ?",
                (limit, offset),
            ).fetchall()

        rows = await self._run(operation)
        return [self._row_to_user(row) for row in rows]

    async def check_health(self) -> None:
        await self._run(lambda conn: conn.execute("SELECT 1").fetchone())

"""
Tests for the UserRepository implementations.

Both stores must honour the same contract, so most tests run against
each of them.
"""

import asyncio
import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from userservice.application.services.user_service import UserService
from userservice.domain.exceptions import (
    DuplicateEmailError,
    StoreError,
    StoreTimeoutError,
    UserNotFoundError,
)
from userservice.domain.models.user import User
from userservice.infrastructure.persistence import InMemoryUserRepository, SQLiteUserRepository
from userservice.infrastructure.resilience import RetryConfig


def make_user(email: str, name: str = "Jane", created_at: datetime = None) -> User:
    created_at = created_at or datetime(2024, 1, 1, tzinfo=timezone.utc)
    return User(
        id=f"id-{email}",
        email=email,
        name=name,
        created_at=created_at,
        updated_at=created_at,
    )


@pytest.fixture(params=["memory", "sqlite"])
def repository(request, tmp_path):
    if request.param == "memory":
        return InMemoryUserRepository()
    repo = SQLiteUserRepository(
        tmp_path / "users.sqlite3",
        retry_config=RetryConfig(max_retries=0),
    )
    repo.initialize()
    return repo


class TestUserRepositoryContract:
    """Contract tests shared by every store."""

    @pytest.mark.asyncio
    async def test_create_and_get(self, repository):
        """Test that a stored user is returned by id and by email."""
        user = make_user("test@example.com")
        await repository.create(user)

        assert await repository.get_by_id(user.id) == user
        assert await repository.get_by_email("test@example.com") == user

    @pytest.mark.asyncio
    async def test_missing_user(self, repository):
        """Test lookups for users that do not exist."""
        with pytest.raises(UserNotFoundError):
            await repository.get_by_id("missing")
        with pytest.raises(UserNotFoundError):
            await repository.get_by_email("nobody@example.com")

    @pytest.mark.asyncio
    async def test_duplicate_email_rejected(self, repository):
        """Test that the store enforces email uniqueness."""
        await repository.create(make_user("x@y.com"))

        duplicate = make_user("x@y.com")
        duplicate = User(
            id="other-id",
            email=duplicate.email,
            name="Other",
            created_at=duplicate.created_at,
            updated_at=duplicate.updated_at,
        )
        with pytest.raises(DuplicateEmailError):
            await repository.create(duplicate)

    @pytest.mark.asyncio
    async def test_update_replaces_mutable_fields(self, repository):
        """Test that update stores the new name and updated_at only."""
        user = make_user("test@example.com")
        await repository.create(user)

        changed = User(
            id=user.id,
            email=user.email,
            name="Janet",
            created_at=user.created_at,
            updated_at=user.updated_at + timedelta(minutes=1),
        )
        await repository.update(changed)

        stored = await repository.get_by_id(user.id)
        assert stored.name == "Janet"
        assert stored.updated_at == changed.updated_at
        assert stored.created_at == user.created_at

    @pytest.mark.asyncio
    async def test_update_missing_user(self, repository):
        """Test that updating an unknown id is not found."""
        with pytest.raises(UserNotFoundError):
            await repository.update(make_user("ghost@example.com"))

    @pytest.mark.asyncio
    async def test_soft_delete(self, repository):
        """Test that deleted users are hidden and their email is freed."""
        user = make_user("test@example.com")
        await repository.create(user)
        await repository.delete(user.id)

        with pytest.raises(UserNotFoundError):
            await repository.get_by_id(user.id)
        with pytest.raises(UserNotFoundError):
            await repository.delete(user.id)
        with pytest.raises(UserNotFoundError):
            await repository.update(user)
        assert await repository.list(10, 0) == []

        replacement = User(
            id="new-id",
            email=user.email,
            name="New",
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
        await repository.create(replacement)
        assert (await repository.get_by_email(user.email)).id == "new-id"

    @pytest.mark.asyncio
    async def test_list_newest_first(self, repository):
        """Test ordering and pagination of list."""
        base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        for i in range(5):
            await repository.create(
                make_user(f"user{i}@example.com", created_at=base + timedelta(hours=i))
            )

        first_page = await repository.list(2, 0)
        second_page = await repository.list(2, 2)
        last_page = await repository.list(2, 4)

        assert [u.email for u in first_page] == ["user4@example.com", "user3@example.com"]
        assert [u.email for u in second_page] == ["user2@example.com", "user1@example.com"]
        assert [u.email for u in last_page] == ["user0@example.com"]
        assert await repository.list(2, 10) == []

    @pytest.mark.asyncio
    async def test_list_ties_are_newest_insert_first(self, repository):
        """Test that users created at the same instant list in reverse insert order."""
        for i in range(3):
            await repository.create(make_user(f"tie{i}@example.com"))

        users = await repository.list(10, 0)

        assert [u.email for u in users] == [
            "tie2@example.com",
            "tie1@example.com",
            "tie0@example.com",
        ]

    @pytest.mark.asyncio
    async def test_returned_users_are_copies(self, repository):
        """Test that mutating a returned user does not change the store."""
        user = make_user("test@example.com")
        await repository.create(user)

        fetched = await repository.get_by_id(user.id)
        fetched.rename("Changed")

        assert (await repository.get_by_id(user.id)).name == "Jane"

    @pytest.mark.asyncio
    async def test_check_health(self, repository):
        """Test that a working store reports healthy."""
        assert await repository.check_health() is None


class TestSQLiteUserRepository:
    """SQLite-specific behaviour."""

    @pytest.mark.asyncio
    async def test_data_survives_reopen(self, tmp_path):
        """Test that users persist across repository instances."""
        path = tmp_path / "users.sqlite3"
        first = SQLiteUserRepository(path)
        first.initialize()
        user = make_user("test@example.com")
        await first.create(user)

        second = SQLiteUserRepository(path)
        second.initialize()

        assert await second.get_by_id(user.id) == user

    def test_initialize_creates_parent_directory(self, tmp_path):
        """Test that initialize creates the database directory."""
        path = tmp_path / "nested" / "dir" / "users.sqlite3"
        SQLiteUserRepository(path).initialize()

        assert path.exists()

    def test_initialize_is_idempotent(self, tmp_path):
        """Test that initializing twice keeps the schema intact."""
        repo = SQLiteUserRepository(tmp_path / "users.sqlite3")
        repo.initialize()
        repo.initialize()

    @pytest.mark.asyncio
    async def test_timestamps_are_utc(self, tmp_path):
        """Test that timestamps come back timezone-aware in UTC."""
        repo = SQLiteUserRepository(tmp_path / "users.sqlite3")
        repo.initialize()
        offset = timezone(timedelta(hours=2))
        user = make_user("tz@example.com", created_at=datetime(2024, 1, 1, 12, tzinfo=offset))
        await repo.create(user)

        stored = await repo.get_by_id(user.id)

        assert stored.created_at == user.created_at
        assert stored.created_at.utcoffset() == timedelta(0)

    @pytest.mark.asyncio
    async def test_driver_errors_become_store_errors(self, tmp_path):
        """Test that a broken database raises StoreError."""
        path = tmp_path / "users.sqlite3"
        repo = SQLiteUserRepository(path, retry_config=RetryConfig(max_retries=0))
        repo.initialize()

        with sqlite3.connect(path) as conn:
            conn.execute("DROP TABLE users")
        conn.close()

        with pytest.raises(StoreError):
            await repo.get_by_id("any")
        with pytest.raises(StoreError):
            await repo.list(10, 0)

    @pytest.mark.asyncio
    async def test_operational_errors_are_retried(self, tmp_path):
        """Test that transient operational errors are retried before failing."""
        repo = SQLiteUserRepository(
            tmp_path / "users.sqlite3",
            retry_config=RetryConfig(max_retries=2, initial_delay=0.001, jitter=0.0),
        )
        repo.initialize()
        calls = []

        def flaky(conn):
            calls.append(1)
            if len(calls) < 3:
                raise sqlite3.OperationalError("database is locked")
            return "ok"

        assert await repo._run(flaky) == "ok"
        assert len(calls) == 3

    def test_caller_retry_config_is_not_modified(self, tmp_path):
        """Test that the repository does not mutate the given retry policy."""
        config = RetryConfig(max_retries=1)
        SQLiteUserRepository(tmp_path / "users.sqlite3", retry_config=config)

        assert config.retryable_exceptions != (sqlite3.OperationalError,)

    @pytest.mark.asyncio
    async def test_timed_out_write_never_commits(self, tmp_path):
        """Test that a create reported as timed out does not land once the lock clears."""
        path = tmp_path / "users.sqlite3"
        repo = SQLiteUserRepository(
            path,
            busy_timeout=0.1,
            retry_config=RetryConfig(max_retries=5, initial_delay=0.05, jitter=0.0),
        )
        repo.initialize()
        service = UserService(repo, default_timeout=0.3)

        blocker = sqlite3.connect(path, isolation_level=None)
        try:
            blocker.execute("BEGIN IMMEDIATE")
            with pytest.raises(StoreTimeoutError):
                await service.create_user("late@example.com", "Late")
            blocker.execute("ROLLBACK")

            # Give the worker thread time to reach its next attempt
            await asyncio.sleep(1.0)
        finally:
            blocker.close()

        with pytest.raises(UserNotFoundError):
            await repo.get_by_email("late@example.com")
        assert await repo.list(10, 0) == []

    @pytest.mark.asyncio
    async def test_cancelled_call_stops_retrying(self, tmp_path):
        """Test that cancelling the caller stops further attempts."""
        repo = SQLiteUserRepository(
            tmp_path / "users.sqlite3",
            retry_config=RetryConfig(max_retries=10, initial_delay=0.05, jitter=0.0),
        )
        repo.initialize()
        calls = []

        def always_locked(conn):
            calls.append(1)
            raise sqlite3.OperationalError("database is locked")

        task = asyncio.ensure_future(repo._run(always_locked))
        await asyncio.sleep(0.02)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        await asyncio.sleep(0.3)
        attempts = len(calls)
        await asyncio.sleep(0.3)

        assert attempts <= 2
        assert len(calls) == attempts

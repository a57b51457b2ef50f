"""User domain model."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict
from uuid import uuid4

from ..validation import normalize_name, validate_email

_IMMUTABLE_FIELDS = frozenset({"id", "email", "created_at"})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class User:
    """
    Aggregate root representing a user account.

    Instances are built through ``User.create`` (validated) or
    ``User.from_dict`` (rehydrated from storage). Identity, email and
    creation time cannot be reassigned once set; the only mutation is
    ``rename``.
    """
    id: str
    email: str
    name: str
    created_at: datetime
    updated_at: datetime

    def __setattr__(self, key: str, value: Any) -> None:
        if key in _IMMUTABLE_FIELDS and key in self.__dict__:
            raise AttributeError(f"User.{key} cannot be modified")
        super().__setattr__(key, value)

    @classmethod
    def create(cls, email: str, name: str) -> "User":
        """
        Factory method to create a new user.

        Email is checked before name; the first violation is raised.

        Raises:
            InvalidEmailError: If the email is malformed
            InvalidNameError: If the name is empty or too long after trimming
        """
        email = validate_email(email)
        name = normalize_name(name)

        now = _utcnow()
        return cls(
            id=str(uuid4()),
            email=email,
            name=name,
            created_at=now,
            updated_at=now,
        )

    def rename(self, name: str) -> None:
        """
        Replace the user's name and refresh ``updated_at``.

        The entity is left untouched when validation fails.

        Raises:
            InvalidNameError: If the name is empty or too long after trimming
        """
        name = normalize_name(name)

        self.name = name
        self.updated_at = max(_utcnow(), self.updated_at)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage."""
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        """Create from dictionary."""
        return cls(
            id=data["id"],
            email=data["email"],
            name=data["name"],
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
        )

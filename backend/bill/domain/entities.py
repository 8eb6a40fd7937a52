"""Domain entities.

Plain data holders shared by the use cases and the storage adapters. They know
nothing about SQLAlchemy; the mappers in ``bill.repositories.mappers`` convert
between these and ORM rows.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime


def _require_text(field: str, value: str) -> str:
    if not value or not value.strip():
        msg = f"{field} must be a non-empty string"
        raise ValueError(msg)
    return value


@dataclass
class UserProfile:
    """Personal data attached to at most one User."""

    name: str
    surname: str
    birth_date: date
    user_id: str
    id: int | None = None
    serial: str | None = None

    @classmethod
    def create(
        cls,
        *,
        name: str,
        surname: str,
        birth_date: date,
        user_id: str,
        id: int | None = None,  # noqa: A002
        serial: str | None = None,
    ) -> UserProfile:
        """Build a profile; ``id`` and ``serial`` stay unset until storage assigns them."""
        return cls(
            name=_require_text("name", name),
            surname=_require_text("surname", surname),
            birth_date=birth_date,
            user_id=user_id,
            id=id,
            serial=serial,
        )


@dataclass
class User:
    """An identity created by the external auth provider and mirrored locally.

    ``id`` is always the provider's identity id. ``profile`` is attached after
    construction, once the profile has been persisted.
    """

    id: str
    email: str
    is_super_admin: bool = False
    email_confirmed_at: datetime | None = None
    profile: UserProfile | None = None

    @classmethod
    def create(
        cls,
        *,
        id: str,  # noqa: A002
        email: str,
        is_super_admin: bool = False,
        email_confirmed_at: datetime | None = None,
    ) -> User:
        return cls(
            id=id,
            email=email,
            is_super_admin=is_super_admin,
            email_confirmed_at=email_confirmed_at,
        )


@dataclass
class Family:
    """A named grouping owned by a user."""

    name: str
    user_id: str
    id: int | None = None

    @classmethod
    def create(cls, *, name: str, user_id: str, id: int | None = None) -> Family:  # noqa: A002
        return cls(name=_require_text("name", name), user_id=user_id, id=id)

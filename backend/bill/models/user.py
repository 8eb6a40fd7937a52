"""User and profile models."""

import uuid
from datetime import date, datetime

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, String, false
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bill.models.base import Base, TimestampMixin


def generate_serial() -> str:
    """Externally shareable profile token."""
    return uuid.uuid4().hex


class User(Base, TimestampMixin):
    """Local mirror of an identity created by the auth provider."""

    __tablename__ = "users"

    # Same value as the provider's identity id
    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )
    is_super_admin: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        server_default=false(),
        nullable=False,
    )
    email_confirmed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
    )

    profile: Mapped["UserProfile | None"] = relationship(back_populates="user", uselist=False)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, is_super_admin={self.is_super_admin})>"


class UserProfile(Base, TimestampMixin):
    """Personal data for a user; one row per user at most."""

    __tablename__ = "user_profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    serial: Mapped[str] = mapped_column(
        String(32),
        unique=True,
        nullable=False,
        default=generate_serial,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    surname: Mapped[str] = mapped_column(String(255), nullable=False)
    birth_date: Mapped[date] = mapped_column(Date, nullable=False)
    user_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )

    user: Mapped[User] = relationship(back_populates="profile")

    def __repr__(self) -> str:
        return f"<UserProfile(id={self.id}, serial={self.serial}, user_id={self.user_id})>"

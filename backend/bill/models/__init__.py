"""Database models for the Bill backend."""

# Import all models to register them with SQLAlchemy metadata
from bill.models.base import Base, TimestampMixin
from bill.models.family import Family
from bill.models.user import User, UserProfile

__all__ = [
    "Base",
    "TimestampMixin",
    "User",
    "UserProfile",
    "Family",
]

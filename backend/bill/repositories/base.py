"""
Storage ports the use cases depend on.

Use cases receive objects satisfying these protocols; the SQLAlchemy adapters
in this package are one implementation, test doubles are another. Every
method returns ``None`` for "not found" and raises ``RepositoryError`` only
when the store itself fails.
"""

from typing import Protocol

from bill.domain.entities import Family, User, UserProfile


class UserRepository(Protocol):
    """Identity and profile storage."""

    async def find_by_email(self, email: str) -> User | None:
        """Look up a user by their unique email."""
        ...

    async def find_by_id(self, user_id: str) -> User | None:
        """Look up a user by identity id."""
        ...

    async def find_profile_by_user_id(self, user_id: str) -> UserProfile | None:
        """Return the user's profile, if one was ever saved."""
        ...

    async def save(self, user: User) -> User:
        """Persist a user mirrored from the identity provider."""
        ...

    async def save_profile(self, profile: UserProfile) -> UserProfile:
        """Persist a profile, assigning ``id`` and ``serial`` when unset."""
        ...


class FamilyRepository(Protocol):
    """Family storage."""

    async def save(self, family: Family) -> Family:
        """Persist a family, assigning ``id``."""
        ...

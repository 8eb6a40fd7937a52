"""SQLAlchemy implementation of the user repository."""

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bill import models
from bill.domain.entities import User, UserProfile
from bill.domain.errors import RepositoryError
from bill.repositories.mappers import UserMapper, UserProfileMapper

logger = structlog.get_logger(__name__)


class SqlAlchemyUserRepository:
    """User and profile storage backed by an async SQLAlchemy session."""

    def __init__(self, db: AsyncSession) -> None:
        """
        Initialize the repository.

        Args:
            db: Database session, owned by the caller
        """
        self.db = db

    async def find_by_email(self, email: str) -> User | None:
        try:
            result = await self.db.execute(select(models.User).where(models.User.email == email))
            row = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("user_lookup_failed", lookup="email", error=str(e))
            raise RepositoryError("find_by_email") from e
        return UserMapper.to_domain(row) if row else None

    async def find_by_id(self, user_id: str) -> User | None:
        try:
            row = await self.db.get(models.User, user_id)
        except SQLAlchemyError as e:
            logger.error("user_lookup_failed", lookup="id", user_id=user_id, error=str(e))
            raise RepositoryError("find_by_id") from e
        return UserMapper.to_domain(row) if row else None

    async def find_profile_by_user_id(self, user_id: str) -> UserProfile | None:
        try:
            result = await self.db.execute(select(models.UserProfile).where(models.UserProfile.user_id == user_id))
            row = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("profile_lookup_failed", user_id=user_id, error=str(e))
            raise RepositoryError("find_profile_by_user_id") from e
        return UserProfileMapper.to_domain(row) if row else None

    async def save(self, user: User) -> User:
        """
        Persist the local mirror of a provider identity.

        Two concurrent signups for the same email can both reach this point.
        The loser of the insert race gets the row the winner wrote.

        Raises:
            RepositoryError: If the insert fails and no existing row can be read back
        """
        row = UserMapper.to_model(user)
        self.db.add(row)
        try:
            await self.db.commit()
            await self.db.refresh(row)
            return UserMapper.to_domain(row)
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning("user_insert_conflict", user_id=user.id)
            existing = await self.find_by_id(user.id)
            if existing is not None:
                return existing
            raise RepositoryError("save") from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("user_insert_failed", user_id=user.id, error=str(e))
            raise RepositoryError("save") from e

    async def save_profile(self, profile: UserProfile) -> UserProfile:
        row = UserProfileMapper.to_model(profile)
        self.db.add(row)
        try:
            await self.db.commit()
            await self.db.refresh(row)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("profile_insert_failed", user_id=profile.user_id, error=str(e))
            raise RepositoryError("save_profile") from e
        return UserProfileMapper.to_domain(row)

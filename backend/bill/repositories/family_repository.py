"""SQLAlchemy implementation of the family repository."""

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bill.domain.entities import Family
from bill.domain.errors import RepositoryError
from bill.repositories.mappers import FamilyMapper

logger = structlog.get_logger(__name__)


class SqlAlchemyFamilyRepository:
    """Family storage backed by an async SQLAlchemy session."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def save(self, family: Family) -> Family:
        row = FamilyMapper.to_model(family)
        self.db.add(row)
        try:
            await self.db.commit()
            await self.db.refresh(row)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("family_insert_failed", user_id=family.user_id, error=str(e))
            raise RepositoryError("save") from e
        return FamilyMapper.to_domain(row)

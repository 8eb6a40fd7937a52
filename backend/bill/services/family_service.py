"""Family creation use case."""

from dataclasses import dataclass
from http import HTTPStatus

import structlog

from bill.domain.entities import Family
from bill.domain.errors import ErrorCode, RepositoryError
from bill.domain.response import Response, build_error_response, build_response
from bill.repositories.base import FamilyRepository

logger = structlog.get_logger(__name__)

FAMILY_CREATED_MESSAGE = "Family created successfully!"


@dataclass(frozen=True)
class CreateFamilyRequest:
    name: str


class FamilyService:
    """Creates families. Every call creates a new record; names are not deduplicated."""

    def __init__(self, family_repository: FamilyRepository) -> None:
        self.family_repository = family_repository

    async def execute(self, request: CreateFamilyRequest, user_id: str) -> Response[Family]:
        logger.debug("family_creation_started", user_id=user_id)

        try:
            family = Family.create(name=request.name, user_id=user_id)
            family = await self.family_repository.save(family)
        except ValueError as e:
            logger.info("family_invalid_request", user_id=user_id, error=str(e))
            return build_error_response(
                code=ErrorCode.INVALID_REQUEST,
                message="Invalid request data",
                status_code=HTTPStatus.BAD_REQUEST,
            )
        except RepositoryError as e:
            logger.error("family_storage_failed", user_id=user_id, operation=e.operation)
            return build_error_response(
                code=ErrorCode.INTERNAL_ERROR,
                message="An unexpected error occurred",
                status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            )

        # Storage ids stay internal
        family.id = None

        logger.info("family_created", user_id=user_id)
        return build_response(data=family, status_code=HTTPStatus.CREATED, message=FAMILY_CREATED_MESSAGE)

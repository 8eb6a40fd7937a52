"""FastAPI dependency providers wiring concrete adapters into the use cases."""

from fastapi import Depends
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from bill.core.database import get_db
from bill.domain.response import ErrorResponse, SuccessResponse, to_payload
from bill.repositories.base import FamilyRepository, UserRepository
from bill.repositories.family_repository import SqlAlchemyFamilyRepository
from bill.repositories.user_repository import SqlAlchemyUserRepository
from bill.services.family_service import FamilyService
from bill.services.identity_provider import IdentityProvider, SupabaseIdentityProvider
from bill.services.signup_service import SignupService


def get_user_repository(db: AsyncSession = Depends(get_db)) -> UserRepository:
    return SqlAlchemyUserRepository(db)


def get_family_repository(db: AsyncSession = Depends(get_db)) -> FamilyRepository:
    return SqlAlchemyFamilyRepository(db)


def get_identity_provider() -> IdentityProvider:
    return SupabaseIdentityProvider()


def get_signup_service(
    user_repository: UserRepository = Depends(get_user_repository),
    identity_provider: IdentityProvider = Depends(get_identity_provider),
) -> SignupService:
    return SignupService(user_repository, identity_provider)


def get_family_service(
    family_repository: FamilyRepository = Depends(get_family_repository),
) -> FamilyService:
    return FamilyService(family_repository)


def envelope_response(
    envelope: SuccessResponse[object] | ErrorResponse, *, exclude_none: bool = False
) -> JSONResponse:
    """
    Serialize a use-case envelope, using its status code as the HTTP status.

    With ``exclude_none`` unset fields of the data are left out instead of
    being sent as null.
    """
    return JSONResponse(
        status_code=int(envelope.status_code),
        content=jsonable_encoder(to_payload(envelope), exclude_none=exclude_none),
    )

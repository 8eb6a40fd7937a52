"""Family API endpoints."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from bill.api.dependencies import envelope_response, get_family_service
from bill.core.auth import get_current_user_id
from bill.schemas.family import CreateFamilyRequestSchema
from bill.services.family_service import CreateFamilyRequest, FamilyService

router = APIRouter(prefix="/families", tags=["families"])


@router.post("", status_code=201)
async def create_family(
    body: CreateFamilyRequestSchema,
    user_id: str = Depends(get_current_user_id),
    service: FamilyService = Depends(get_family_service),
) -> JSONResponse:
    """Create a family owned by the authenticated user. The storage id is not returned."""
    envelope = await service.execute(CreateFamilyRequest(name=body.name), user_id)
    return envelope_response(envelope, exclude_none=True)

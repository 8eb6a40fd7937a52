"""Signup API endpoint."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from bill.api.dependencies import envelope_response, get_signup_service
from bill.schemas.auth import SignupRequestSchema
from bill.services.signup_service import SignupRequest, SignupService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", status_code=201)
async def signup(
    body: SignupRequestSchema,
    service: SignupService = Depends(get_signup_service),
) -> JSONResponse:
    """
    Sign up a new user.

    Retrying a signup whose profile step never completed finishes it. A
    signup for an email that already has a profile fails with BILL-201.

    Returns:
        The response envelope; its status_code is also the HTTP status.
    """
    envelope = await service.execute(
        SignupRequest(
            email=str(body.email),
            password=body.password,
            name=body.name,
            surname=body.surname,
            birth_date=body.birth_date.isoformat(),
        )
    )
    return envelope_response(envelope)

"""Signup use case: create an identity and attach a profile to it."""

from dataclasses import dataclass
from datetime import date, datetime
from http import HTTPStatus

import structlog
from opentelemetry.trace import Status, StatusCode

from bill.core.telemetry import service_span
from bill.domain.entities import User, UserProfile
from bill.domain.errors import ErrorCode, IdentityProviderError, RepositoryError
from bill.domain.response import ErrorResponse, Response, build_error_response, build_response
from bill.repositories.base import UserRepository
from bill.services.identity_provider import IdentityProvider
from bill.utils.pii import hash_pii

logger = structlog.get_logger(__name__)

USER_CREATED_MESSAGE = "User created successfully"
DUPLICATE_USER_MESSAGE = "It was not possible to create the user"
IDENTITY_FAILURE_MESSAGE = "Could not create user"
INVALID_REQUEST_MESSAGE = "Invalid request data"
INTERNAL_ERROR_MESSAGE = "An unexpected error occurred"


@dataclass(frozen=True)
class SignupRequest:
    email: str
    password: str
    name: str
    surname: str
    birth_date: str | date  # ISO-8601 date or datetime string


def parse_birth_date(value: str | date) -> date:
    """
    Convert an ISO-8601 date (or datetime) into a calendar date.

    Raises:
        ValueError: If the value is not an ISO-8601 date or datetime
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except ValueError:
        return datetime.fromisoformat(value).date()


class SignupService:
    """
    Signs up a user, recovering from earlier half-finished attempts.

    Local storage decides what happens, in this order:

    1. No local user for the email: the identity provider mints a new
       identity, which is mirrored locally, then the profile is created.
    2. Local user without a profile: a previous attempt stopped after the
       identity was created. The provider is not called again; only the
       profile is created.
    3. Local user with a profile: the signup is a duplicate and is rejected
       without writing anything.

    Identity creation and profile creation are not atomic. Branch 2 is what
    makes a retried signup finish the work instead of failing or minting a
    second remote identity.
    """

    def __init__(self, user_repository: UserRepository, identity_provider: IdentityProvider) -> None:
        self.user_repository = user_repository
        self.identity_provider = identity_provider

    async def execute(self, request: SignupRequest) -> Response[User]:
        """
        Run the signup flow.

        Returns:
            Success envelope with the User (profile attached), or an error envelope.
            Never raises for domain, provider or storage failures.
        """
        log = logger.bind(email_hash=hash_pii(request.email))
        log.debug("signup_started")

        with service_span("signup.execute", "signup-service") as span:
            response = await self._run(request, log)
            if isinstance(response, ErrorResponse):
                span.set_status(Status(StatusCode.ERROR, response.code.value))
            return response

    async def _run(self, request: SignupRequest, log: structlog.stdlib.BoundLogger) -> Response[User]:
        try:
            return await self._signup(request, log)
        except IdentityProviderError as e:
            log.warning(
                "signup_identity_provider_failed",
                error=e.message,
                provider_code=e.provider_code,
                status_code=int(e.status_code),
            )
            return build_error_response(
                code=ErrorCode.IDENTITY_PROVIDER_FAILURE,
                message=IDENTITY_FAILURE_MESSAGE,
                status_code=e.status_code,
            )
        except RepositoryError as e:
            log.error("signup_storage_failed", operation=e.operation)
            return build_error_response(
                code=ErrorCode.INTERNAL_ERROR,
                message=INTERNAL_ERROR_MESSAGE,
                status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            )
        except ValueError as e:
            log.info("signup_invalid_request", error=str(e))
            return build_error_response(
                code=ErrorCode.INVALID_REQUEST,
                message=INVALID_REQUEST_MESSAGE,
                status_code=HTTPStatus.BAD_REQUEST,
            )

    async def _signup(self, request: SignupRequest, log: structlog.stdlib.BoundLogger) -> Response[User]:
        birth_date = parse_birth_date(request.birth_date)

        user = await self.user_repository.find_by_email(request.email)

        if user is None:
            identity = await self.identity_provider.sign_up(request.email, request.password)
            user = User.create(id=identity.external_user_id, email=identity.email)
            user = await self.user_repository.save(user)
            log.info("signup_identity_created", user_id=user.id)
        elif await self.user_repository.find_profile_by_user_id(user.id) is not None:
            log.info("signup_duplicate_rejected", user_id=user.id)
            return build_error_response(
                code=ErrorCode.USER_ALREADY_EXISTS,
                message=DUPLICATE_USER_MESSAGE,
                status_code=HTTPStatus.BAD_REQUEST,
                details={},
            )
        else:
            log.info("signup_resuming_without_profile", user_id=user.id)

        profile = UserProfile.create(
            name=request.name,
            surname=request.surname,
            birth_date=birth_date,
            user_id=user.id,
        )
        user.profile = await self.user_repository.save_profile(profile)

        log.info("signup_completed", user_id=user.id, profile_serial=user.profile.serial)
        return build_response(data=user, status_code=HTTPStatus.CREATED, message=USER_CREATED_MESSAGE)

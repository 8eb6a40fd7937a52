"""External identity provider port and its Supabase (GoTrue) adapter."""

from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Protocol
from urllib.parse import urljoin

import httpx
import structlog
from opentelemetry.trace import SpanKind

from bill.core.config import require_config, settings
from bill.core.telemetry import service_span
from bill.domain.errors import IdentityProviderError
from bill.utils.pii import hash_pii

require_config("SUPABASE_URL", "SUPABASE_ANON_KEY")

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ProviderIdentity:
    """Identity minted by the provider."""

    external_user_id: str
    email: str


class IdentityProvider(Protocol):
    """The only place new identity ids come from."""

    async def sign_up(self, email: str, password: str) -> ProviderIdentity:
        """
        Create a credentialed identity.

        Raises:
            IdentityProviderError: If the provider rejects the request or is unreachable
        """
        ...


class SupabaseIdentityProvider:
    """Creates identities through the Supabase GoTrue REST API."""

    SIGNUP_PATH = "/auth/v1/signup"

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the adapter.

        Args:
            base_url: Supabase project URL (defaults to SUPABASE_URL)
            api_key: Project anon key (defaults to SUPABASE_ANON_KEY)
            timeout: Request timeout in seconds (defaults to AUTH_PROVIDER_TIMEOUT)
            transport: Optional httpx transport, used by tests to stub the provider
        """
        self.base_url = base_url or settings.SUPABASE_URL
        self.api_key = api_key or settings.SUPABASE_ANON_KEY
        self.timeout = timeout if timeout is not None else settings.AUTH_PROVIDER_TIMEOUT
        self._transport = transport

    @property
    def signup_url(self) -> str:
        return urljoin(self.base_url.rstrip("/") + "/", self.SIGNUP_PATH.lstrip("/"))

    async def sign_up(self, email: str, password: str) -> ProviderIdentity:
        email_hash = hash_pii(email)
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
        }

        with service_span("supabase.sign_up", "supabase", kind=SpanKind.CLIENT) as span:
            span.set_attribute("user.email_hash", email_hash)
            try:
                async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                    response = await client.post(
                        self.signup_url,
                        json={"email": email, "password": password},
                        headers=headers,
                    )
            except httpx.HTTPError as e:
                logger.error("identity_provider_unreachable", email_hash=email_hash, error=str(e))
                raise IdentityProviderError(
                    "Identity provider unavailable",
                    status_code=HTTPStatus.SERVICE_UNAVAILABLE,
                ) from e

            span.set_attribute("http.status_code", response.status_code)

            if response.is_error:
                raise self._rejection(response, email_hash)

            return self._parse_identity(response, email_hash)

    def _rejection(self, response: httpx.Response, email_hash: str) -> IdentityProviderError:
        body = _safe_json(response)
        provider_code = body.get("error_code") or body.get("code")
        message = body.get("msg") or body.get("message") or body.get("error_description") or "Sign-up rejected"
        status_code = HTTPStatus.BAD_REQUEST if response.is_client_error else HTTPStatus.SERVICE_UNAVAILABLE
        logger.warning(
            "identity_provider_rejected_signup",
            email_hash=email_hash,
            provider_status=response.status_code,
            provider_code=provider_code,
        )
        return IdentityProviderError(str(message), status_code=status_code, provider_code=_as_str(provider_code))

    def _parse_identity(self, response: httpx.Response, email_hash: str) -> ProviderIdentity:
        body = _safe_json(response)
        # With email confirmation on GoTrue returns the user object itself, otherwise a session wrapping it
        user = body.get("user") if isinstance(body.get("user"), dict) else body
        user_id = user.get("id")
        email = user.get("email")
        if not user_id or not email:
            logger.error("identity_provider_malformed_response", email_hash=email_hash)
            raise IdentityProviderError(
                "Identity provider returned no user",
                status_code=HTTPStatus.BAD_GATEWAY,
            )
        return ProviderIdentity(external_user_id=str(user_id), email=str(email))


def _safe_json(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _as_str(value: object) -> str | None:
    return None if value is None else str(value)

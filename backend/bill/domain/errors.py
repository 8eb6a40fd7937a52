"""Domain error codes and the exceptions raised by ports."""

import enum
from http import HTTPStatus


class ErrorCode(str, enum.Enum):
    """Machine-readable codes carried by error envelopes."""

    INVALID_REQUEST = "BILL-400"
    USER_ALREADY_EXISTS = "BILL-201"
    IDENTITY_PROVIDER_FAILURE = "BILL-202"
    INTERNAL_ERROR = "BILL-500"


class RepositoryError(Exception):
    """
    Raised by repository adapters when the underlying store fails.

    Adapters translate driver and ORM exceptions into this type so use cases
    never depend on a storage library's error hierarchy.
    """

    def __init__(self, operation: str, message: str = "Storage operation failed") -> None:
        self.operation = operation
        super().__init__(f"{message} ({operation})")


class IdentityProviderError(Exception):
    """
    Raised by identity provider adapters when an identity cannot be created.

    ``status_code`` classifies the failure: a client-error class when the
    provider rejected the request (already registered, weak password), a
    server-error class when the provider could not be reached.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: HTTPStatus = HTTPStatus.BAD_REQUEST,
        provider_code: str | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.provider_code = provider_code
        super().__init__(message)

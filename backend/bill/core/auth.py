"""Authentication utilities for the HTTP layer."""

from typing import Any

import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from bill.core.config import require_config, settings

require_config("SUPABASE_JWT_SECRET", "JWT_AUDIENCE")

logger = structlog.get_logger(__name__)

# Supabase signs access tokens with the project's shared JWT secret
JWT_ALGORITHMS = ["HS256"]

security = HTTPBearer()


def verify_jwt(credentials: HTTPAuthorizationCredentials = Depends(security)) -> dict[str, Any]:
    """
    Verify a Supabase access token.

    Args:
        credentials: HTTP Bearer credentials containing the JWT

    Returns:
        JWT payload dictionary containing claims (e.g., 'sub', 'exp')

    Raises:
        HTTPException: 401 if the token is invalid, expired or has the wrong audience
    """
    try:
        return jwt.decode(
            credentials.credentials,
            settings.SUPABASE_JWT_SECRET,
            algorithms=JWT_ALGORITHMS,
            audience=settings.JWT_AUDIENCE,
        )
    except JWTError as e:
        logger.info("jwt_verification_failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


def get_current_user_id(payload: dict[str, Any] = Depends(verify_jwt)) -> str:
    """
    Resolve the authenticated user's identity id from the token subject.

    Raises:
        HTTPException: 401 if the token carries no subject
    """
    subject = payload.get("sub")
    if not subject:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing 'sub' claim",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return str(subject)

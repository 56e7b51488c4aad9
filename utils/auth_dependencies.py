"""
FastAPI Authentication Dependencies
Resolves the caller from the identity provider token and guards routes by role
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Request, status

from config import settings
from utils.jwt_utils import InvalidTokenError, token_verifier
from utils.structured_logging import log_authentication_event


class AuthenticationError(Exception):
    """Custom exception for authentication failures"""

    pass


@dataclass(frozen=True)
class Caller:
    """Authenticated caller as known to the identity provider"""

    id: str
    role: Optional[str] = None

    @property
    def is_instructor(self) -> bool:
        return self.role == settings.INSTRUCTOR_ROLE


def extract_bearer_token(authorization: Optional[str]) -> str:
    """Extract bearer token from Authorization header"""
    if not authorization:
        raise AuthenticationError("Authorization header missing")

    if not authorization.startswith("Bearer "):
        raise AuthenticationError("Invalid authorization header format. Expected 'Bearer <token>'")

    return authorization.replace("Bearer ", "", 1).strip()


def resolve_caller(request: Request) -> Caller:
    """
    Resolve the caller of a request

    Raises:
        AuthenticationError: no token, or a token the identity provider did not sign
    """
    token = extract_bearer_token(request.headers.get("Authorization"))
    try:
        payload = token_verifier.decode(token)
    except InvalidTokenError as e:
        raise AuthenticationError(str(e))

    return Caller(id=str(payload["sub"]), role=token_verifier.extract_role(payload))


# =============================================================================
# CORE AUTHENTICATION DEPENDENCIES
# =============================================================================


async def get_current_caller(request: Request) -> Caller:
    """
    Get current authenticated caller - raises 401 if not authenticated
    """
    try:
        caller = resolve_caller(request)
    except AuthenticationError as e:
        log_authentication_event(
            "bearer_token", success=False, details={"path": request.url.path, "error": str(e)}
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )

    request.state.user_id = caller.id
    log_authentication_event("bearer_token", user_id=caller.id, details={"role": caller.role})
    return caller


# =============================================================================
# ROLE-BASED AUTHENTICATION DEPENDENCIES
# =============================================================================


def instructor_only(action: str):
    """
    Build a dependency that admits only instructors

    Args:
        action: completes the 403 message, e.g. "create assessments"
    """

    async def dependency(caller: Caller = Depends(get_current_caller)) -> Caller:
        if not caller.is_instructor:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Only instructors can {action}.",
            )
        return caller

    return dependency


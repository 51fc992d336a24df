"""FastAPI dependencies: get_current_principal, require_admin.

Usage in any protected router:
    from src.cw_gateway.auth.dependencies import get_current_principal

    @router.get("/protected")
    async def protected(principal: Principal = Depends(get_current_principal)):
        ...
"""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.cw_common.errors import ForbiddenError, UnauthorizedError
from src.cw_gateway.auth.jwt_handler import decode_external_token
from src.cw_gateway.auth.policy import AuthorizationPolicy
from src.cw_gateway.auth.principal import Principal

# auto_error=False so a missing header goes through the AppError envelope too
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Principal:
    """Raises UnauthorizedError (401) if the token is missing, invalid, or expired."""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError()
    return decode_external_token(credentials.credentials)


async def require_admin(
    request: Request,
    principal: Principal = Depends(get_current_principal),
) -> Principal:
    """Raises ForbiddenError (403) unless the configured policy accepts the caller."""
    policy: AuthorizationPolicy = request.app.state.auth_policy
    if not policy.is_admin(principal):
        raise ForbiddenError()
    return principal

"""Verification of bearer tokens issued by the external identity provider.

This service never issues tokens. It only checks signature, expiry and the
optional audience / issuer claims, then maps the payload to a Principal.
"""

from typing import Any

from jose import JWTError, jwt

from config.settings import settings
from src.cw_common.errors import UnauthorizedError
from src.cw_gateway.auth.principal import Principal


def _roles_from_claims(payload: dict[str, Any]) -> frozenset[str]:
    roles: set[str] = set()
    single = payload.get("role")
    if isinstance(single, str) and single:
        roles.add(single)
    many = payload.get("roles")
    if isinstance(many, (list, tuple)):
        roles.update(r for r in many if isinstance(r, str) and r)
    return frozenset(roles)


def decode_external_token(token: str) -> Principal:
    """Decode and validate a JWT bearer token.

    Raises:
        UnauthorizedError: bad signature, expired, wrong aud/iss, or no sub claim.
    """
    options = {"verify_aud": settings.AUTH_JWT_AUDIENCE is not None}
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.AUTH_JWT_KEY,
            algorithms=[settings.AUTH_JWT_ALGORITHM],  # Explicit list prevents algorithm confusion
            audience=settings.AUTH_JWT_AUDIENCE,
            issuer=settings.AUTH_JWT_ISSUER,
            options=options,
        )
    except JWTError:
        raise UnauthorizedError() from None

    user_id = payload.get("sub")
    if not isinstance(user_id, str) or not user_id:
        raise UnauthorizedError()

    return Principal(user_id=user_id, roles=_roles_from_claims(payload), claims=payload)

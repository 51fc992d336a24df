"""Admin authorization policies.

Which policy applies is configuration (ADMIN_AUTH_POLICY), decided once at
startup. Deployment environment names never grant admin rights.
"""

from typing import Any, Protocol

from src.cw_gateway.auth.principal import Principal


class AuthorizationPolicy(Protocol):
    def is_admin(self, principal: Principal) -> bool: ...


class AlwaysAllowPolicy:
    """Every authenticated caller is an admin. Test deployments only."""

    def is_admin(self, principal: Principal) -> bool:
        return True


class RoleBasedPolicy:
    def __init__(self, admin_roles: frozenset[str] | set[str] | list[str]) -> None:
        self._admin_roles = frozenset(admin_roles)

    def is_admin(self, principal: Principal) -> bool:
        return principal.has_any_role(self._admin_roles)


class ExternalTokenVerifiedPolicy:
    """Trust a boolean claim set by the identity provider on a verified token."""

    def __init__(self, claim: str = "admin") -> None:
        self._claim = claim

    def is_admin(self, principal: Principal) -> bool:
        return principal.claims.get(self._claim) is True


def build_policy(settings: Any) -> AuthorizationPolicy:
    name = settings.ADMIN_AUTH_POLICY
    if name == "role_based":
        return RoleBasedPolicy(settings.ADMIN_ROLES)
    if name == "external_token":
        return ExternalTokenVerifiedPolicy()
    if name == "always_allow":
        return AlwaysAllowPolicy()
    raise ValueError(f"Unknown ADMIN_AUTH_POLICY: {name!r}")

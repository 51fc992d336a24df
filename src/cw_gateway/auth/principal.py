"""Authenticated caller identity, as asserted by the external identity provider."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Principal:
    user_id: str
    roles: frozenset[str] = frozenset()
    claims: dict[str, Any] = field(default_factory=dict, hash=False, compare=False)

    def has_any_role(self, roles: frozenset[str]) -> bool:
        return bool(self.roles & roles)

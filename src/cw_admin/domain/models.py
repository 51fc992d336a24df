"""Domain models for cw_admin — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class AdminAction:
    """Immutable audit record of an administrator mutating balances or withdrawal state."""

    id: int
    admin_id: str
    target_user_id: str | None
    action_type: str            # AdminActionType value
    details: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None

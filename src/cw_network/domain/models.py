"""Domain models for cw_network — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.cw_common.amounts import ZERO


@dataclass
class NetworkConfig:
    network: str
    chain_id: int | None = None
    native_symbol: str | None = None
    withdrawal_fee: Decimal = ZERO
    min_withdrawal: Decimal = ZERO
    required_confirmations: int = 0
    is_active: bool = True
    updated_at: datetime | None = None

    @classmethod
    def unconfigured(cls, network: str) -> "NetworkConfig":
        """No config row: zero fee, zero minimum."""
        return cls(network=network)


# Columns an administrator may change
UPDATABLE_FIELDS = frozenset(
    {"withdrawal_fee", "min_withdrawal", "required_confirmations", "is_active"}
)

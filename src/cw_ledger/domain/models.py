"""Domain models for cw_ledger — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.cw_common.amounts import negate_amount
from src.cw_common.enums import LedgerEntryType


@dataclass(frozen=True)
class LedgerReference:
    """What caused a ledger entry, plus optional on-chain / audit context."""

    reference_type: str
    reference_id: str | None = None
    network: str | None = None
    tx_hash: str | None = None
    admin_id: str | None = None
    note: str | None = None


@dataclass
class LedgerEntry:
    id: int                          # BIGSERIAL, defines append order
    user_id: str
    symbol: str
    entry_type: str                  # LedgerEntryType value
    amount: Decimal                  # non-negative magnitude
    balance_before: Decimal
    balance_after: Decimal
    network: str | None = None
    reference_type: str | None = None
    reference_id: str | None = None
    tx_hash: str | None = None
    admin_id: str | None = None
    note: str | None = None
    created_at: datetime | None = None

    @property
    def signed_amount(self) -> Decimal:
        if LedgerEntryType(self.entry_type).sign > 0:
            return self.amount
        return negate_amount(self.amount)


@dataclass
class ProjectionMismatch:
    user_id: str
    symbol: str
    projected_balance: Decimal
    log_balance: Decimal | None

"""Domain models for cw_withdrawal — pure dataclasses, no SQLAlchemy dependency.

State machine:  pending ──approve──▶ completed
                   └─────reject───▶ rejected
completed / rejected are terminal.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.cw_common.amounts import sub_amounts
from src.cw_common.enums import WithdrawalStatus
from src.cw_common.errors import AlreadyProcessedError

TERMINAL_STATUSES = frozenset({WithdrawalStatus.COMPLETED, WithdrawalStatus.REJECTED})


@dataclass
class WithdrawalRequest:
    id: str
    user_id: str
    symbol: str
    network: str
    amount: Decimal          # debited from the ledger on approval
    fee: Decimal             # retained by the platform
    net_amount: Decimal      # amount - fee, frozen at creation
    to_address: str
    status: str              # WithdrawalStatus value
    tx_hash: str | None = None
    admin_id: str | None = None
    admin_note: str | None = None
    rejection_reason: str | None = None
    requested_at: datetime | None = None
    processed_at: datetime | None = None
    completed_at: datetime | None = None
    rejected_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return WithdrawalStatus(self.status) in TERMINAL_STATUSES

    def ensure_pending(self) -> None:
        if self.is_terminal:
            raise AlreadyProcessedError(self.id, self.status)


def compute_net_amount(amount: Decimal, fee: Decimal) -> Decimal:
    return sub_amounts(amount, fee)

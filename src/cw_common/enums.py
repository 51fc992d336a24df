"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class LedgerEntryType(str, Enum):
    # Deposits observed on-chain / investment earnings
    DEPOSIT = "deposit"
    EARNING = "earning"
    # Withdrawal workflow (user side + platform fee side)
    WITHDRAWAL = "withdrawal"
    FEE_REVENUE = "fee_revenue"
    # Direct administrator correction
    ADMIN_CREDIT = "admin_credit"
    ADMIN_DEBIT = "admin_debit"

    @property
    def sign(self) -> int:
        """+1 for entries that increase the balance, -1 for those that decrease it."""
        return -1 if self in _DEBIT_TYPES else 1


_DEBIT_TYPES = frozenset({LedgerEntryType.WITHDRAWAL, LedgerEntryType.ADMIN_DEBIT})


class ReferenceType(str, Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    ADMIN_ACTION = "admin_action"
    INVESTMENT = "investment"


class WithdrawalStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    REJECTED = "rejected"


class WithdrawalAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


class AdjustDirection(str, Enum):
    CREDIT = "credit"
    DEBIT = "debit"


class AdminActionType(str, Enum):
    BALANCE_CREDIT = "balance_credit"
    BALANCE_DEBIT = "balance_debit"
    WITHDRAWAL_APPROVE = "withdrawal_approve"
    WITHDRAWAL_REJECT = "withdrawal_reject"
    NETWORK_CONFIG_UPDATE = "network_config_update"


class AddressSpace(str, Enum):
    """Chains sharing one derived address per index."""
    EVM = "EVM"

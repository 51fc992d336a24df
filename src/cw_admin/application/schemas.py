"""Pydantic schemas for cw_admin API."""

from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from src.cw_admin.domain.models import AdminAction
from src.cw_common.amounts import amount_to_display, to_amount
from src.cw_common.datetime_utils import isoformat_or_none
from src.cw_network.domain.models import NetworkConfig
from src.cw_wallet.application.schemas import DepositAddressItem
from src.cw_withdrawal.application.schemas import WithdrawalResponse

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class AdjustBalanceRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=64)
    symbol: str = Field(..., min_length=1, max_length=16)
    amount: Decimal
    type: Literal["credit", "debit"]
    note: str | None = Field(None, max_length=500)

    @field_validator("amount", mode="before")
    @classmethod
    def parse_amount(cls, v: object) -> Decimal:
        return to_amount(v)  # type: ignore[arg-type]


class NetworkConfigUpdateRequest(BaseModel):
    withdrawal_fee: Decimal | None = None
    min_withdrawal: Decimal | None = None
    required_confirmations: int | None = Field(None, ge=0)
    is_active: bool | None = None

    @field_validator("withdrawal_fee", "min_withdrawal", mode="before")
    @classmethod
    def parse_amount(cls, v: object) -> Decimal | None:
        return None if v is None else to_amount(v)  # type: ignore[arg-type]

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class AdjustBalanceResponse(BaseModel):
    entry_id: int
    user_id: str
    symbol: str
    entry_type: str
    amount: str
    balance_before: str
    balance_after: str


class AdminActionItem(BaseModel):
    id: int
    admin_id: str
    target_user_id: str | None
    action_type: str
    details: dict[str, Any]
    created_at: str | None

    @classmethod
    def from_domain(cls, a: AdminAction) -> "AdminActionItem":
        return cls(
            id=a.id,
            admin_id=a.admin_id,
            target_user_id=a.target_user_id,
            action_type=a.action_type,
            details=a.details,
            created_at=isoformat_or_none(a.created_at),
        )


class NetworkConfigItem(BaseModel):
    network: str
    chain_id: int | None
    native_symbol: str | None
    withdrawal_fee: str
    min_withdrawal: str
    required_confirmations: int
    is_active: bool
    updated_at: str | None

    @classmethod
    def from_domain(cls, c: NetworkConfig) -> "NetworkConfigItem":
        return cls(
            network=c.network,
            chain_id=c.chain_id,
            native_symbol=c.native_symbol,
            withdrawal_fee=amount_to_display(c.withdrawal_fee),
            min_withdrawal=amount_to_display(c.min_withdrawal),
            required_confirmations=c.required_confirmations,
            is_active=c.is_active,
            updated_at=isoformat_or_none(c.updated_at),
        )


class UserOverviewResponse(BaseModel):
    user_id: str
    balances: dict[str, str]
    deposit_addresses: list[DepositAddressItem]
    recent_withdrawals: list[WithdrawalResponse]
    # symbols whose projected balance differs from the ledger log
    inconsistent_symbols: list[str] = []


class ConsistencyViolation(BaseModel):
    user_id: str
    symbol: str
    projected_balance: str
    log_balance: str | None


class ConsistencyReport(BaseModel):
    ok: bool
    checked_at: str
    violations: list[ConsistencyViolation]

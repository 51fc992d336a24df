"""Pydantic schemas for cw_withdrawal API.

Amounts travel as decimal strings ("40", "0.5"); JSON floats are refused so a
binary rounding error can never reach the ledger.
"""

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from src.cw_common.amounts import amount_to_display, to_amount
from src.cw_common.datetime_utils import isoformat_or_none
from src.cw_withdrawal.domain.models import WithdrawalRequest

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class WithdrawRequest(BaseModel):
    symbol: str = Field(..., min_length=1, max_length=16)
    network: str = Field(..., min_length=1, max_length=32)
    amount: Decimal
    to_address: str = Field(..., min_length=1, max_length=64)

    @field_validator("amount", mode="before")
    @classmethod
    def parse_amount(cls, v: object) -> Decimal:
        return to_amount(v)  # type: ignore[arg-type]


class ProcessWithdrawalRequest(BaseModel):
    action: Literal["approve", "reject"]
    tx_hash: str | None = Field(None, max_length=128)
    note: str | None = Field(None, max_length=500)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class WithdrawalResponse(BaseModel):
    id: str
    user_id: str
    symbol: str
    network: str
    amount: str
    fee: str
    net_amount: str
    to_address: str
    status: str
    tx_hash: str | None
    admin_id: str | None
    admin_note: str | None
    rejection_reason: str | None
    requested_at: str | None
    processed_at: str | None

    @classmethod
    def from_domain(cls, w: WithdrawalRequest) -> "WithdrawalResponse":
        return cls(
            id=w.id,
            user_id=w.user_id,
            symbol=w.symbol,
            network=w.network,
            amount=amount_to_display(w.amount),
            fee=amount_to_display(w.fee),
            net_amount=amount_to_display(w.net_amount),
            to_address=w.to_address,
            status=w.status,
            tx_hash=w.tx_hash,
            admin_id=w.admin_id,
            admin_note=w.admin_note,
            rejection_reason=w.rejection_reason,
            requested_at=isoformat_or_none(w.requested_at),
            processed_at=isoformat_or_none(w.processed_at),
        )


class WithdrawalListResponse(BaseModel):
    items: list[WithdrawalResponse]

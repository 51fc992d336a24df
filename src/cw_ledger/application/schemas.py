"""Pydantic schemas and cursor utilities for cw_ledger API."""

import base64
import json
from decimal import Decimal

from pydantic import BaseModel

from src.cw_common.amounts import amount_to_display
from src.cw_common.datetime_utils import isoformat_or_none
from src.cw_ledger.domain.models import LedgerEntry

# ---------------------------------------------------------------------------
# Cursor-based pagination utilities
# ---------------------------------------------------------------------------


def cursor_encode(last_id: int) -> str:
    """Encode a BIGINT primary key into an opaque Base64 cursor string."""
    payload = json.dumps({"id": last_id})
    return base64.b64encode(payload.encode()).decode()


def cursor_decode(cursor: str | None) -> int | None:
    """Decode a cursor string back to the last seen id. Returns None on error."""
    if cursor is None:
        return None
    try:
        payload = json.loads(base64.b64decode(cursor.encode()).decode())
        return int(payload["id"])
    except Exception:
        return None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BalanceResponse(BaseModel):
    user_id: str
    symbol: str
    balance: str
    balance_display: str

    @classmethod
    def from_amount(cls, user_id: str, symbol: str, balance: Decimal) -> "BalanceResponse":
        return cls(
            user_id=user_id,
            symbol=symbol,
            balance=amount_to_display(balance),
            balance_display=amount_to_display(balance, symbol),
        )


class AllBalancesResponse(BaseModel):
    user_id: str
    balances: dict[str, str]

    @classmethod
    def from_amounts(cls, user_id: str, balances: dict[str, Decimal]) -> "AllBalancesResponse":
        return cls(
            user_id=user_id,
            balances={s: amount_to_display(b) for s, b in balances.items()},
        )


class LedgerEntryItem(BaseModel):
    id: int
    symbol: str
    network: str | None
    entry_type: str
    amount: str
    balance_before: str
    balance_after: str
    reference_type: str | None
    reference_id: str | None
    tx_hash: str | None
    admin_id: str | None
    note: str | None
    created_at: str | None  # ISO8601 string

    @classmethod
    def from_domain(cls, e: LedgerEntry) -> "LedgerEntryItem":
        return cls(
            id=e.id,
            symbol=e.symbol,
            network=e.network,
            entry_type=e.entry_type,
            amount=amount_to_display(e.amount),
            balance_before=amount_to_display(e.balance_before),
            balance_after=amount_to_display(e.balance_after),
            reference_type=e.reference_type,
            reference_id=e.reference_id,
            tx_hash=e.tx_hash,
            admin_id=e.admin_id,
            note=e.note,
            created_at=isoformat_or_none(e.created_at),
        )


class LedgerResponse(BaseModel):
    items: list[LedgerEntryItem]
    next_cursor: str | None
    has_more: bool

"""Unit tests for WithdrawalRepository conditional transitions."""

import uuid
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock, MagicMock

from src.cw_withdrawal.infrastructure.persistence import WithdrawalRepository

REQUEST_ID = str(uuid.uuid4())


def _row(**kwargs: Any) -> MagicMock:
    row = MagicMock()
    row.id = uuid.UUID(kwargs.get("id", REQUEST_ID))
    row.user_id = kwargs.get("user_id", "user-1")
    row.symbol = "USDT"
    row.network = "ERC20"
    row.amount = Decimal("40")
    row.fee = Decimal("2")
    row.net_amount = Decimal("38")
    row.to_address = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
    row.status = kwargs.get("status", "pending")
    row.tx_hash = kwargs.get("tx_hash")
    row.admin_id = kwargs.get("admin_id")
    row.admin_note = None
    row.rejection_reason = kwargs.get("rejection_reason")
    row.requested_at = datetime.now(UTC)
    row.processed_at = None
    row.completed_at = None
    row.rejected_at = None
    return row


def _db(row: Any = None, rows: list[Any] | None = None) -> AsyncMock:
    result = MagicMock()
    result.fetchone.return_value = row
    result.fetchall.return_value = rows or []
    db = AsyncMock()
    db.execute.return_value = result
    return db


class TestTransitions:
    async def test_mark_completed_returns_updated_row(self) -> None:
        db = _db(_row(status="completed", tx_hash="0xabc", admin_id="admin-1"))
        result = await WithdrawalRepository().mark_completed(
            db, REQUEST_ID, "admin-1", "0xabc", None
        )
        assert result is not None
        assert result.id == REQUEST_ID
        assert result.status == "completed"
        assert db.execute.await_args.args[1]["tx_hash"] == "0xabc"

    async def test_mark_completed_no_match(self) -> None:
        db = _db(None)
        assert await WithdrawalRepository().mark_completed(db, REQUEST_ID, "a", None, None) is None

    async def test_mark_rejected_passes_reason(self) -> None:
        db = _db(_row(status="rejected", rejection_reason="aml"))
        result = await WithdrawalRepository().mark_rejected(db, REQUEST_ID, "admin-1", "aml")
        assert result is not None
        assert result.rejection_reason == "aml"
        assert db.execute.await_args.args[1]["reason"] == "aml"

    async def test_non_uuid_id_never_hits_the_database(self) -> None:
        db = _db()
        repo = WithdrawalRepository()
        assert await repo.get(db, "not-a-uuid") is None
        assert await repo.mark_completed(db, "not-a-uuid", "a", None, None) is None
        assert await repo.mark_rejected(db, "not-a-uuid", "a", None) is None
        db.execute.assert_not_called()


class TestListing:
    async def test_list_for_user(self) -> None:
        db = _db(rows=[_row(), _row(id=str(uuid.uuid4()))])
        items = await WithdrawalRepository().list_for_user(db, "user-1", 20)
        assert len(items) == 2
        assert db.execute.await_args.args[1] == {"user_id": "user-1", "limit": 20}

    async def test_list_pending_empty(self) -> None:
        assert await WithdrawalRepository().list_pending(_db()) == []

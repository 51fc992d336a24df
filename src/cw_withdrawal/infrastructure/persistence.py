"""WithdrawalRepository — concrete implementation of WithdrawalRepositoryProtocol.

Status transitions are conditional UPDATEs that only match a row still in
'pending'. Returning None means the row is missing or already terminal; the
caller decides which by re-reading it. Concurrent approve/reject on the same
id therefore resolve to exactly one winner.
"""

import uuid
from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.cw_common.errors import InternalError
from src.cw_withdrawal.domain.models import WithdrawalRequest

_COLUMNS = """
    id, user_id, symbol, network, amount, fee, net_amount, to_address, status,
    tx_hash, admin_id, admin_note, rejection_reason,
    requested_at, processed_at, completed_at, rejected_at
"""

_INSERT_SQL = text(f"""
    INSERT INTO withdrawal_requests
        (user_id, symbol, network, amount, fee, net_amount, to_address, status)
    VALUES
        (:user_id, :symbol, :network, :amount, :fee, :net_amount, :to_address, 'pending')
    RETURNING {_COLUMNS}
""")

_GET_SQL = text(f"""
    SELECT {_COLUMNS} FROM withdrawal_requests WHERE id = CAST(:id AS UUID)
""")

_MARK_COMPLETED_SQL = text(f"""
    UPDATE withdrawal_requests
    SET status = 'completed',
        tx_hash = :tx_hash,
        admin_id = :admin_id,
        admin_note = :note,
        processed_at = NOW(),
        completed_at = NOW()
    WHERE id = CAST(:id AS UUID) AND status = 'pending'
    RETURNING {_COLUMNS}
""")

_MARK_REJECTED_SQL = text(f"""
    UPDATE withdrawal_requests
    SET status = 'rejected',
        admin_id = :admin_id,
        rejection_reason = :reason,
        processed_at = NOW(),
        rejected_at = NOW()
    WHERE id = CAST(:id AS UUID) AND status = 'pending'
    RETURNING {_COLUMNS}
""")

_LIST_PENDING_SQL = text(f"""
    SELECT {_COLUMNS} FROM withdrawal_requests
    WHERE status = 'pending'
    ORDER BY requested_at DESC
""")

_LIST_FOR_USER_SQL = text(f"""
    SELECT {_COLUMNS} FROM withdrawal_requests
    WHERE user_id = :user_id
    ORDER BY requested_at DESC
    LIMIT :limit
""")


def _is_uuid(value: str) -> bool:
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


def _row_to_request(row: object) -> WithdrawalRequest:
    return WithdrawalRequest(
        id=str(row.id),  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        symbol=row.symbol,  # type: ignore[attr-defined]
        network=row.network,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        fee=row.fee,  # type: ignore[attr-defined]
        net_amount=row.net_amount,  # type: ignore[attr-defined]
        to_address=row.to_address,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        tx_hash=row.tx_hash,  # type: ignore[attr-defined]
        admin_id=row.admin_id,  # type: ignore[attr-defined]
        admin_note=row.admin_note,  # type: ignore[attr-defined]
        rejection_reason=row.rejection_reason,  # type: ignore[attr-defined]
        requested_at=row.requested_at,  # type: ignore[attr-defined]
        processed_at=row.processed_at,  # type: ignore[attr-defined]
        completed_at=row.completed_at,  # type: ignore[attr-defined]
        rejected_at=row.rejected_at,  # type: ignore[attr-defined]
    )


class WithdrawalRepository:
    async def insert(
        self,
        db: AsyncSession,
        user_id: str,
        symbol: str,
        network: str,
        amount: Decimal,
        fee: Decimal,
        net_amount: Decimal,
        to_address: str,
    ) -> WithdrawalRequest:
        result = await db.execute(
            _INSERT_SQL,
            {
                "user_id": user_id,
                "symbol": symbol,
                "network": network,
                "amount": amount,
                "fee": fee,
                "net_amount": net_amount,
                "to_address": to_address,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Withdrawal insert returned no rows — this should never happen")
        return _row_to_request(row)

    async def get(self, db: AsyncSession, request_id: str) -> WithdrawalRequest | None:
        if not _is_uuid(request_id):
            return None
        result = await db.execute(_GET_SQL, {"id": request_id})
        row = result.fetchone()
        return _row_to_request(row) if row else None

    async def mark_completed(
        self,
        db: AsyncSession,
        request_id: str,
        admin_id: str,
        tx_hash: str | None,
        note: str | None,
    ) -> WithdrawalRequest | None:
        if not _is_uuid(request_id):
            return None
        result = await db.execute(
            _MARK_COMPLETED_SQL,
            {"id": request_id, "admin_id": admin_id, "tx_hash": tx_hash, "note": note},
        )
        row = result.fetchone()
        return _row_to_request(row) if row else None

    async def mark_rejected(
        self,
        db: AsyncSession,
        request_id: str,
        admin_id: str,
        reason: str | None,
    ) -> WithdrawalRequest | None:
        if not _is_uuid(request_id):
            return None
        result = await db.execute(
            _MARK_REJECTED_SQL,
            {"id": request_id, "admin_id": admin_id, "reason": reason},
        )
        row = result.fetchone()
        return _row_to_request(row) if row else None

    async def list_pending(self, db: AsyncSession) -> list[WithdrawalRequest]:
        result = await db.execute(_LIST_PENDING_SQL)
        return [_row_to_request(row) for row in result.fetchall()]

    async def list_for_user(
        self, db: AsyncSession, user_id: str, limit: int
    ) -> list[WithdrawalRequest]:
        result = await db.execute(_LIST_FOR_USER_SQL, {"user_id": user_id, "limit": limit})
        return [_row_to_request(row) for row in result.fetchall()]

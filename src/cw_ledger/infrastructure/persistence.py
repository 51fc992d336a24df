"""LedgerRepository — concrete implementation of LedgerRepositoryProtocol.

ledger_entries is the append-only source of truth; ledger_balances is the
denormalized "latest balance" projection, written in the same transaction as
every entry. The balance read, sufficiency check and write happen in a single
UPDATE ... RETURNING, whose row lock serializes appends per (user, symbol).
A debit that returns 0 rows means the balance would have gone negative.

Transaction ownership: The CALLER (application service) is responsible for
committing or rolling back.
"""

import logging
from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.cw_common.amounts import ZERO, abs_amount, sub_amounts
from src.cw_common.enums import LedgerEntryType
from src.cw_common.errors import InsufficientBalanceError, InternalError, InvalidAmountError
from src.cw_ledger.domain.models import LedgerEntry, LedgerReference, ProjectionMismatch

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# SQL: balance projection mutations
# ---------------------------------------------------------------------------

_CREDIT_BALANCE_SQL = text("""
    INSERT INTO ledger_balances (user_id, symbol, balance)
    VALUES (:user_id, :symbol, :amount)
    ON CONFLICT (user_id, symbol) DO UPDATE
        SET balance = ledger_balances.balance + EXCLUDED.balance,
            updated_at = NOW()
    RETURNING balance
""")

_DEBIT_BALANCE_SQL = text("""
    UPDATE ledger_balances
    SET balance = balance - :amount,
        updated_at = NOW()
    WHERE user_id = :user_id AND symbol = :symbol AND balance >= :amount
    RETURNING balance
""")

_SET_LAST_ENTRY_SQL = text("""
    UPDATE ledger_balances
    SET last_entry_id = :entry_id
    WHERE user_id = :user_id AND symbol = :symbol
""")

_INSERT_ENTRY_SQL = text("""
    INSERT INTO ledger_entries
        (user_id, symbol, network, entry_type, amount, balance_before, balance_after,
         reference_type, reference_id, tx_hash, admin_id, note)
    VALUES
        (:user_id, :symbol, :network, :entry_type, :amount, :balance_before, :balance_after,
         :reference_type, :reference_id, :tx_hash, :admin_id, :note)
    RETURNING id, user_id, symbol, network, entry_type, amount, balance_before,
              balance_after, reference_type, reference_id, tx_hash, admin_id, note,
              created_at
""")

# ---------------------------------------------------------------------------
# SQL: reads
# ---------------------------------------------------------------------------

_GET_BALANCE_SQL = text("""
    SELECT balance FROM ledger_balances
    WHERE user_id = :user_id AND symbol = :symbol
""")

_LIST_BALANCES_SQL = text("""
    SELECT symbol, balance FROM ledger_balances
    WHERE user_id = :user_id
    ORDER BY symbol
""")

_LATEST_LOGGED_BALANCE_SQL = text("""
    SELECT balance_after FROM ledger_entries
    WHERE user_id = :user_id AND symbol = :symbol
    ORDER BY id DESC
    LIMIT 1
""")

_LIST_ENTRIES_SQL = text("""
    SELECT id, user_id, symbol, network, entry_type, amount, balance_before,
           balance_after, reference_type, reference_id, tx_hash, admin_id, note,
           created_at
    FROM ledger_entries
    WHERE user_id = :user_id
      AND (CAST(:cursor_id AS BIGINT) IS NULL OR id < :cursor_id)
      AND (CAST(:symbol AS VARCHAR) IS NULL OR symbol = :symbol)
    ORDER BY id DESC
    LIMIT :limit
""")

_PROJECTION_MISMATCH_SQL = text("""
    SELECT b.user_id, b.symbol, b.balance, latest.balance_after
    FROM ledger_balances b
    LEFT JOIN LATERAL (
        SELECT le.balance_after
        FROM ledger_entries le
        WHERE le.user_id = b.user_id AND le.symbol = b.symbol
        ORDER BY le.id DESC
        LIMIT 1
    ) latest ON TRUE
    WHERE latest.balance_after IS DISTINCT FROM b.balance
""")


def _row_to_entry(row: object) -> LedgerEntry:
    return LedgerEntry(
        id=row.id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        symbol=row.symbol,  # type: ignore[attr-defined]
        network=row.network,  # type: ignore[attr-defined]
        entry_type=row.entry_type,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        balance_before=row.balance_before,  # type: ignore[attr-defined]
        balance_after=row.balance_after,  # type: ignore[attr-defined]
        reference_type=row.reference_type,  # type: ignore[attr-defined]
        reference_id=row.reference_id,  # type: ignore[attr-defined]
        tx_hash=row.tx_hash,  # type: ignore[attr-defined]
        admin_id=row.admin_id,  # type: ignore[attr-defined]
        note=row.note,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


def validate_delta(delta: Decimal, entry_type: LedgerEntryType) -> None:
    """delta must be non-zero and carry the sign of its entry type."""
    if delta == ZERO:
        raise InvalidAmountError("ledger delta must be non-zero")
    if (delta > ZERO) != (entry_type.sign > 0):
        raise InvalidAmountError(
            f"{entry_type.value} entries must be {'positive' if entry_type.sign > 0 else 'negative'}"
        )


class LedgerRepository:
    """Concrete repository — each append is atomic at the SQL level."""

    async def append(
        self,
        db: AsyncSession,
        user_id: str,
        symbol: str,
        delta: Decimal,
        entry_type: LedgerEntryType,
        reference: LedgerReference,
    ) -> LedgerEntry:
        validate_delta(delta, entry_type)
        amount = abs_amount(delta)
        params = {"user_id": user_id, "symbol": symbol, "amount": amount}

        if delta > ZERO:
            row = (await db.execute(_CREDIT_BALANCE_SQL, params)).fetchone()
            if row is None:
                raise InternalError("Balance upsert returned no rows — this should never happen")
        else:
            row = (await db.execute(_DEBIT_BALANCE_SQL, params)).fetchone()
            if row is None:
                available = await self.get_balance(db, user_id, symbol)
                logger.info(
                    "Rejected %s of %s %s for user %s: balance %s",
                    entry_type.value,
                    amount,
                    symbol,
                    user_id,
                    available,
                )
                raise InsufficientBalanceError(amount, available)

        balance_after: Decimal = row.balance
        entry_result = await db.execute(
            _INSERT_ENTRY_SQL,
            {
                "user_id": user_id,
                "symbol": symbol,
                "network": reference.network,
                "entry_type": entry_type.value,
                "amount": amount,
                "balance_before": sub_amounts(balance_after, delta),
                "balance_after": balance_after,
                "reference_type": reference.reference_type,
                "reference_id": reference.reference_id,
                "tx_hash": reference.tx_hash,
                "admin_id": reference.admin_id,
                "note": reference.note,
            },
        )
        entry_row = entry_result.fetchone()
        if entry_row is None:
            raise InternalError("Ledger insert returned no rows — this should never happen")
        entry = _row_to_entry(entry_row)

        await db.execute(
            _SET_LAST_ENTRY_SQL,
            {"entry_id": entry.id, "user_id": user_id, "symbol": symbol},
        )
        logger.debug(
            "Ledger append #%d %s %s %s: %s -> %s",
            entry.id,
            user_id,
            symbol,
            entry_type.value,
            entry.balance_before,
            entry.balance_after,
        )
        return entry

    async def get_balance(self, db: AsyncSession, user_id: str, symbol: str) -> Decimal:
        result = await db.execute(_GET_BALANCE_SQL, {"user_id": user_id, "symbol": symbol})
        row = result.fetchone()
        return row.balance if row else ZERO

    async def list_balances(self, db: AsyncSession, user_id: str) -> dict[str, Decimal]:
        result = await db.execute(_LIST_BALANCES_SQL, {"user_id": user_id})
        return {row.symbol: row.balance for row in result.fetchall()}

    async def latest_logged_balance(
        self, db: AsyncSession, user_id: str, symbol: str
    ) -> Decimal:
        result = await db.execute(
            _LATEST_LOGGED_BALANCE_SQL, {"user_id": user_id, "symbol": symbol}
        )
        row = result.fetchone()
        return row.balance_after if row else ZERO

    async def list_entries(
        self,
        db: AsyncSession,
        user_id: str,
        cursor_id: int | None,
        limit: int,
        symbol: str | None,
    ) -> list[LedgerEntry]:
        result = await db.execute(
            _LIST_ENTRIES_SQL,
            {
                "user_id": user_id,
                "cursor_id": cursor_id,
                "symbol": symbol,
                "limit": limit,
            },
        )
        return [_row_to_entry(row) for row in result.fetchall()]

    async def find_projection_mismatches(self, db: AsyncSession) -> list[ProjectionMismatch]:
        result = await db.execute(_PROJECTION_MISMATCH_SQL)
        return [
            ProjectionMismatch(
                user_id=row.user_id,
                symbol=row.symbol,
                projected_balance=row.balance,
                log_balance=row.balance_after,
            )
            for row in result.fetchall()
        ]

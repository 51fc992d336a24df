"""LedgerService — Balance Query Service plus a committing append facade.

Reads go to the ledger_balances projection and are wrapped in retry_read.
append() owns its transaction; services that must combine a ledger append
with other writes (withdrawal approval, admin adjustment) call the repository
directly inside their own transaction instead.
"""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.cw_common.enums import LedgerEntryType
from src.cw_common.retry import retry_read
from src.cw_ledger.application.schemas import (
    LedgerEntryItem,
    LedgerResponse,
    cursor_decode,
    cursor_encode,
)
from src.cw_ledger.domain.models import LedgerEntry, LedgerReference
from src.cw_ledger.domain.repository import LedgerRepositoryProtocol
from src.cw_ledger.infrastructure.persistence import LedgerRepository


class LedgerService:
    def __init__(self, repo: LedgerRepositoryProtocol | None = None) -> None:
        self._repo: LedgerRepositoryProtocol = repo or LedgerRepository()

    async def append(
        self,
        db: AsyncSession,
        user_id: str,
        symbol: str,
        delta: Decimal,
        entry_type: LedgerEntryType,
        reference: LedgerReference,
    ) -> LedgerEntry:
        try:
            entry = await self._repo.append(db, user_id, symbol, delta, entry_type, reference)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return entry

    async def current_balance(self, db: AsyncSession, user_id: str, symbol: str) -> Decimal:
        async def _read() -> Decimal:
            return await self._repo.get_balance(db, user_id, symbol)

        return await retry_read(_read, reset=db.rollback)

    async def all_balances(self, db: AsyncSession, user_id: str) -> dict[str, Decimal]:
        async def _read() -> dict[str, Decimal]:
            return await self._repo.list_balances(db, user_id)

        return await retry_read(_read, reset=db.rollback)

    async def balance_from_log(self, db: AsyncSession, user_id: str, symbol: str) -> Decimal:
        """balance_after of the highest-id entry; the projection must always equal this."""
        return await self._repo.latest_logged_balance(db, user_id, symbol)

    async def list_entries(
        self,
        db: AsyncSession,
        user_id: str,
        cursor: str | None,
        limit: int,
        symbol: str | None,
    ) -> LedgerResponse:
        cursor_id = cursor_decode(cursor)
        # Fetch limit+1 to detect has_more without a COUNT(*) query
        entries = await self._repo.list_entries(db, user_id, cursor_id, limit + 1, symbol)
        has_more = len(entries) > limit
        page = entries[:limit]
        next_cursor = cursor_encode(page[-1].id) if has_more and page else None
        return LedgerResponse(
            items=[LedgerEntryItem.from_domain(e) for e in page],
            next_cursor=next_cursor,
            has_more=has_more,
        )

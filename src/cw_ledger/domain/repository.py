"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.cw_common.enums import LedgerEntryType
from src.cw_ledger.domain.models import LedgerEntry, LedgerReference, ProjectionMismatch


class LedgerRepositoryProtocol(Protocol):
    async def append(
        self,
        db: AsyncSession,
        user_id: str,
        symbol: str,
        delta: Decimal,
        entry_type: LedgerEntryType,
        reference: LedgerReference,
    ) -> LedgerEntry: ...

    async def get_balance(
        self, db: AsyncSession, user_id: str, symbol: str
    ) -> Decimal: ...

    async def list_balances(
        self, db: AsyncSession, user_id: str
    ) -> dict[str, Decimal]: ...

    async def latest_logged_balance(
        self, db: AsyncSession, user_id: str, symbol: str
    ) -> Decimal: ...

    async def list_entries(
        self,
        db: AsyncSession,
        user_id: str,
        cursor_id: int | None,
        limit: int,
        symbol: str | None,
    ) -> list[LedgerEntry]: ...

    async def find_projection_mismatches(
        self, db: AsyncSession
    ) -> list[ProjectionMismatch]: ...

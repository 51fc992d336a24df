"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.cw_withdrawal.domain.models import WithdrawalRequest


class WithdrawalRepositoryProtocol(Protocol):
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
    ) -> WithdrawalRequest: ...

    async def get(self, db: AsyncSession, request_id: str) -> WithdrawalRequest | None: ...

    async def mark_completed(
        self,
        db: AsyncSession,
        request_id: str,
        admin_id: str,
        tx_hash: str | None,
        note: str | None,
    ) -> WithdrawalRequest | None: ...

    async def mark_rejected(
        self,
        db: AsyncSession,
        request_id: str,
        admin_id: str,
        reason: str | None,
    ) -> WithdrawalRequest | None: ...

    async def list_pending(self, db: AsyncSession) -> list[WithdrawalRequest]: ...

    async def list_for_user(
        self, db: AsyncSession, user_id: str, limit: int
    ) -> list[WithdrawalRequest]: ...

"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.cw_wallet.domain.models import DepositAddress, DerivationSlot


class DepositAddressRepositoryProtocol(Protocol):
    async def get_deposit_address(
        self, db: AsyncSession, user_id: str, network: str, symbol: str
    ) -> DepositAddress | None: ...

    async def list_deposit_addresses(
        self, db: AsyncSession, user_id: str
    ) -> list[DepositAddress]: ...

    async def lock_index_allocation(self, db: AsyncSession) -> None: ...

    async def get_slot_for_user(
        self, db: AsyncSession, user_id: str, address_space: str
    ) -> DerivationSlot | None: ...

    async def next_derivation_index(self, db: AsyncSession) -> int: ...

    async def insert_slot(self, db: AsyncSession, slot: DerivationSlot) -> None: ...

    async def insert_deposit_address(
        self,
        db: AsyncSession,
        user_id: str,
        network: str,
        symbol: str,
        address: str,
        derivation_index: int,
    ) -> None: ...

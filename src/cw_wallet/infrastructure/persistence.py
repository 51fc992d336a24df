"""DepositAddressRepository — concrete implementation of DepositAddressRepositoryProtocol.

Index allocation is serialized with a transaction-scoped advisory lock; the
UNIQUE constraints on derivation_indexes and deposit_addresses are the final guard.

Transaction ownership: The CALLER (application service) is responsible for
committing or rolling back.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.cw_wallet.domain.models import DepositAddress, DerivationSlot

# Arbitrary constant key for pg_advisory_xact_lock; released at COMMIT/ROLLBACK
INDEX_ALLOCATION_LOCK_KEY = 0x0C057D1A

_GET_DEPOSIT_ADDRESS_SQL = text("""
    SELECT id, user_id, network, symbol, address, derivation_index, created_at
    FROM deposit_addresses
    WHERE user_id = :user_id AND network = :network AND symbol = :symbol
""")

_LIST_DEPOSIT_ADDRESSES_SQL = text("""
    SELECT id, user_id, network, symbol, address, derivation_index, created_at
    FROM deposit_addresses
    WHERE user_id = :user_id
    ORDER BY created_at, network, symbol
""")

_LOCK_ALLOCATION_SQL = text("SELECT pg_advisory_xact_lock(:key)")

_GET_SLOT_SQL = text("""
    SELECT derivation_index, user_id, address_space, address
    FROM derivation_indexes
    WHERE user_id = :user_id AND address_space = :address_space
""")

_NEXT_INDEX_SQL = text("""
    SELECT COALESCE(MAX(derivation_index), 0) + 1 AS next_index
    FROM derivation_indexes
""")

_INSERT_SLOT_SQL = text("""
    INSERT INTO derivation_indexes (derivation_index, user_id, address_space, address)
    VALUES (:derivation_index, :user_id, :address_space, :address)
""")

_INSERT_DEPOSIT_ADDRESS_SQL = text("""
    INSERT INTO deposit_addresses (user_id, network, symbol, address, derivation_index)
    VALUES (:user_id, :network, :symbol, :address, :derivation_index)
    ON CONFLICT (user_id, network, symbol) DO NOTHING
""")


def _row_to_deposit_address(row: object) -> DepositAddress:
    return DepositAddress(
        id=str(row.id),  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        network=row.network,  # type: ignore[attr-defined]
        symbol=row.symbol,  # type: ignore[attr-defined]
        address=row.address,  # type: ignore[attr-defined]
        derivation_index=row.derivation_index,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


def _row_to_slot(row: object) -> DerivationSlot:
    return DerivationSlot(
        derivation_index=row.derivation_index,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        address_space=row.address_space,  # type: ignore[attr-defined]
        address=row.address,  # type: ignore[attr-defined]
    )


class DepositAddressRepository:
    async def get_deposit_address(
        self, db: AsyncSession, user_id: str, network: str, symbol: str
    ) -> DepositAddress | None:
        result = await db.execute(
            _GET_DEPOSIT_ADDRESS_SQL,
            {"user_id": user_id, "network": network, "symbol": symbol},
        )
        row = result.fetchone()
        return _row_to_deposit_address(row) if row else None

    async def list_deposit_addresses(
        self, db: AsyncSession, user_id: str
    ) -> list[DepositAddress]:
        result = await db.execute(_LIST_DEPOSIT_ADDRESSES_SQL, {"user_id": user_id})
        return [_row_to_deposit_address(row) for row in result.fetchall()]

    async def lock_index_allocation(self, db: AsyncSession) -> None:
        await db.execute(_LOCK_ALLOCATION_SQL, {"key": INDEX_ALLOCATION_LOCK_KEY})

    async def get_slot_for_user(
        self, db: AsyncSession, user_id: str, address_space: str
    ) -> DerivationSlot | None:
        result = await db.execute(
            _GET_SLOT_SQL, {"user_id": user_id, "address_space": address_space}
        )
        row = result.fetchone()
        return _row_to_slot(row) if row else None

    async def next_derivation_index(self, db: AsyncSession) -> int:
        """max(existing) + 1; 1 on an empty table (index 0 is the master address)."""
        result = await db.execute(_NEXT_INDEX_SQL)
        row = result.fetchone()
        return int(row.next_index) if row else 1

    async def insert_slot(self, db: AsyncSession, slot: DerivationSlot) -> None:
        await db.execute(
            _INSERT_SLOT_SQL,
            {
                "derivation_index": slot.derivation_index,
                "user_id": slot.user_id,
                "address_space": slot.address_space,
                "address": slot.address,
            },
        )

    async def insert_deposit_address(
        self,
        db: AsyncSession,
        user_id: str,
        network: str,
        symbol: str,
        address: str,
        derivation_index: int,
    ) -> None:
        await db.execute(
            _INSERT_DEPOSIT_ADDRESS_SQL,
            {
                "user_id": user_id,
                "network": network,
                "symbol": symbol,
                "address": address,
                "derivation_index": derivation_index,
            },
        )

"""DepositAddressService — per-user deposit address allocation.

A user owns one derivation index per address space. Every EVM network reuses
that index (and therefore the same address); only the (network, symbol) row
is new. Fresh indexes are allocated as max(existing) + 1 under an advisory
lock so two users can never be handed the same funding address.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.cw_common.errors import (
    InternalError,
    UninitializedWalletError,
    UnsupportedNetworkError,
)
from src.cw_wallet.application.schemas import DepositAddressResult
from src.cw_wallet.domain.deriver import MASTER_INDEX, AddressDeriver
from src.cw_wallet.domain.models import DepositAddress, DerivationSlot
from src.cw_wallet.domain.networks import EVM_NETWORKS, address_space_of, token_contract
from src.cw_wallet.domain.repository import DepositAddressRepositoryProtocol
from src.cw_wallet.infrastructure.persistence import DepositAddressRepository

logger = logging.getLogger(__name__)


def _to_result(d: DepositAddress, is_new: bool) -> DepositAddressResult:
    return DepositAddressResult(
        address=d.address,
        network=d.network,
        symbol=d.symbol,
        derivation_index=d.derivation_index,
        is_newly_allocated=is_new,
        token_contract=token_contract(d.network, d.symbol),
    )


class DepositAddressService:
    def __init__(
        self,
        deriver: AddressDeriver,
        repo: DepositAddressRepositoryProtocol | None = None,
    ) -> None:
        self._deriver = deriver
        self._repo: DepositAddressRepositoryProtocol = repo or DepositAddressRepository()

    async def request_deposit_address(
        self, db: AsyncSession, user_id: str, network: str, symbol: str
    ) -> DepositAddressResult:
        space = address_space_of(network)
        if space is None:
            raise UnsupportedNetworkError(network)

        existing = await self._repo.get_deposit_address(db, user_id, network, symbol)
        if existing is not None:
            return _to_result(existing, is_new=False)

        if not self._deriver.is_initialized():
            raise UninitializedWalletError()

        try:
            await self._repo.lock_index_allocation(db)

            # A concurrent request may have won the race while we waited on the lock
            existing = await self._repo.get_deposit_address(db, user_id, network, symbol)
            if existing is not None:
                await db.commit()
                return _to_result(existing, is_new=False)

            slot = await self._repo.get_slot_for_user(db, user_id, space.value)
            if slot is None:
                index = await self._repo.next_derivation_index(db)
                slot = DerivationSlot(
                    derivation_index=index,
                    user_id=user_id,
                    address_space=space.value,
                    address=self._deriver.derive_address(index),
                )
                await self._repo.insert_slot(db, slot)
                logger.info(
                    "Allocated derivation index %d to user %s (%s)",
                    index,
                    user_id,
                    space.value,
                )

            await self._repo.insert_deposit_address(
                db, user_id, network, symbol, slot.address, slot.derivation_index
            )
            created = await self._repo.get_deposit_address(db, user_id, network, symbol)
            if created is None:
                raise InternalError("Deposit address insert returned no rows")
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return _to_result(created, is_new=True)

    async def list_deposit_addresses(
        self, db: AsyncSession, user_id: str
    ) -> list[DepositAddress]:
        return await self._repo.list_deposit_addresses(db, user_id)

    def blockchain_status(self) -> dict[str, object]:
        status = self._deriver.status()
        status["networks"] = sorted(self._deriver.networks_sharing_address_space())
        status["master_wallets"] = (
            [
                {
                    "network": d.network,
                    "address": d.address,
                    "chain_id": EVM_NETWORKS[d.network].chain_id,
                }
                for d in self._deriver.addresses_for_index(MASTER_INDEX)
            ]
            if self._deriver.is_initialized()
            else []
        )
        return status

"""NetworkConfigRepository — fee/minimum lookup by network name."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.cw_common.errors import InvalidAmountError, NotFoundError
from src.cw_network.domain.models import UPDATABLE_FIELDS, NetworkConfig
from src.cw_network.infrastructure.db_models import NetworkConfigORM


def _orm_to_config(m: NetworkConfigORM) -> NetworkConfig:
    return NetworkConfig(
        network=m.network,
        chain_id=m.chain_id,
        native_symbol=m.native_symbol,
        withdrawal_fee=m.withdrawal_fee,
        min_withdrawal=m.min_withdrawal,
        required_confirmations=m.required_confirmations,
        is_active=m.is_active,
        updated_at=m.updated_at,
    )


class NetworkConfigRepository:
    async def get(self, db: AsyncSession, network: str) -> NetworkConfig | None:
        result = await db.execute(
            select(NetworkConfigORM).where(NetworkConfigORM.network == network)
        )
        m = result.scalar_one_or_none()
        return _orm_to_config(m) if m else None

    async def get_or_default(self, db: AsyncSession, network: str) -> NetworkConfig:
        return await self.get(db, network) or NetworkConfig.unconfigured(network)

    async def list_all(self, db: AsyncSession) -> list[NetworkConfig]:
        result = await db.execute(select(NetworkConfigORM).order_by(NetworkConfigORM.network))
        return [_orm_to_config(m) for m in result.scalars().all()]

    async def update(
        self, db: AsyncSession, network: str, changes: dict[str, Any]
    ) -> NetworkConfig:
        """Apply *changes* within the caller's transaction."""
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown network config fields: {sorted(unknown)}")
        for key in ("withdrawal_fee", "min_withdrawal"):
            if key in changes and changes[key] < 0:
                raise InvalidAmountError(f"{key} must be non-negative")

        result = await db.execute(
            select(NetworkConfigORM)
            .where(NetworkConfigORM.network == network)
            .with_for_update()
        )
        m = result.scalar_one_or_none()
        if m is None:
            raise NotFoundError("Network config", network)
        for key, value in changes.items():
            setattr(m, key, value)
        await db.flush()
        await db.refresh(m)
        return _orm_to_config(m)

"""Pydantic schemas for cw_wallet API."""

from pydantic import BaseModel, Field

from src.cw_common.datetime_utils import isoformat_or_none
from src.cw_wallet.domain.models import DepositAddress

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class DepositAddressRequest(BaseModel):
    network: str = Field(..., min_length=1, max_length=32, description="e.g. ERC20, BSC20")
    symbol: str = Field(..., min_length=1, max_length=16, description="e.g. USDT")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class DepositAddressResult(BaseModel):
    address: str
    network: str
    symbol: str
    derivation_index: int
    is_newly_allocated: bool
    token_contract: str | None = None


class DepositAddressItem(BaseModel):
    id: str
    network: str
    symbol: str
    address: str
    derivation_index: int
    created_at: str | None

    @classmethod
    def from_domain(cls, d: DepositAddress) -> "DepositAddressItem":
        return cls(
            id=d.id,
            network=d.network,
            symbol=d.symbol,
            address=d.address,
            derivation_index=d.derivation_index,
            created_at=isoformat_or_none(d.created_at),
        )


class MasterWalletItem(BaseModel):
    network: str
    address: str
    chain_id: int


class BlockchainStatusResponse(BaseModel):
    initialized: bool
    master_address: str | None
    networks: list[str]
    master_wallets: list[MasterWalletItem] = []

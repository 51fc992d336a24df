"""Domain models for cw_wallet — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class DerivedAddress:
    address: str
    derivation_index: int
    network: str


@dataclass
class DepositAddress:
    id: str
    user_id: str
    network: str
    symbol: str
    address: str
    derivation_index: int
    created_at: datetime | None = None


@dataclass
class DerivationSlot:
    """One allocated derivation index: owned by exactly one user per address space."""

    derivation_index: int
    user_id: str
    address_space: str
    address: str

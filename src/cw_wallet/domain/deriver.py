"""Hierarchical-deterministic deposit address derivation (BIP-39 / BIP-44).

Path: m / 44' / 60' / account' / 0 / index
  - coin type 60 (Ethereum) is shared by every EVM-compatible chain
  - index 0 is reserved for the custodial master address
  - user deposit indexes start at 1

Only the index is persisted per user; the private key is always re-derivable
from the master mnemonic. The mnemonic lives in an immutable HdWalletConfig
built once at process startup. There is no module-level wallet singleton.
"""

import logging
from dataclasses import dataclass
from typing import Any

from bip_utils import (
    Bip39Languages,
    Bip39MnemonicValidator,
    Bip39SeedGenerator,
    Bip44,
    Bip44Changes,
    Bip44Coins,
)
from eth_utils import is_checksum_address, is_hex_address, to_checksum_address

from src.cw_common.errors import UninitializedWalletError
from src.cw_wallet.domain.models import DerivedAddress
from src.cw_wallet.domain.networks import EVM_NETWORKS

logger = logging.getLogger(__name__)

MASTER_INDEX = 0
_MAX_NON_HARDENED_INDEX = 2**31 - 1


@dataclass(frozen=True)
class HdWalletConfig:
    mnemonic: str | None = None
    account_index: int = 0

    def __repr__(self) -> str:
        # Never render the mnemonic
        return f"HdWalletConfig(configured={self.is_configured}, account_index={self.account_index})"

    @property
    def is_configured(self) -> bool:
        return bool(self.mnemonic and self.mnemonic.strip())

    @classmethod
    def from_settings(cls, settings: Any) -> "HdWalletConfig":
        return cls(
            mnemonic=settings.MASTER_WALLET_MNEMONIC,
            account_index=settings.HD_ACCOUNT_INDEX,
        )


class AddressDeriver:
    """Pure, stateless-after-construction address derivation.

    Safe for unlimited concurrent use: the change-level node is computed once
    and every derive_address call only reads it.
    """

    def __init__(self, config: HdWalletConfig) -> None:
        self._change_ctx = None
        if not config.is_configured:
            logger.warning("MASTER_WALLET_MNEMONIC not set - deposit address functions disabled")
            return

        mnemonic = " ".join(config.mnemonic.split())  # type: ignore[union-attr]
        if not Bip39MnemonicValidator(Bip39Languages.ENGLISH).IsValid(mnemonic):
            raise ValueError("MASTER_WALLET_MNEMONIC is not a valid BIP-39 mnemonic")

        seed_bytes = Bip39SeedGenerator(mnemonic).Generate()
        self._change_ctx = (
            Bip44.FromSeed(seed_bytes, Bip44Coins.ETHEREUM)
            .Purpose()
            .Coin()
            .Account(config.account_index)
            .Change(Bip44Changes.CHAIN_EXT)
        )
        logger.info("HD wallet initialized (account=%d)", config.account_index)

    def is_initialized(self) -> bool:
        return self._change_ctx is not None

    def derive_address(self, index: int) -> str:
        """Return the EIP-55 checksummed address at *index*. Same index → same address."""
        if self._change_ctx is None:
            raise UninitializedWalletError()
        if isinstance(index, bool) or not isinstance(index, int):
            raise ValueError(f"Derivation index must be an int, got {index!r}")
        if not (0 <= index <= _MAX_NON_HARDENED_INDEX):
            raise ValueError(f"Derivation index must be 0-{_MAX_NON_HARDENED_INDEX}, got {index}")
        return str(self._change_ctx.AddressIndex(index).PublicKey().ToAddress())

    def master_address(self) -> str:
        """Platform operator's address; funds here belong to no individual user."""
        return self.derive_address(MASTER_INDEX)

    @staticmethod
    def is_valid_address(candidate: object) -> bool:
        """Strict 0x-prefixed 20-byte hex; mixed case must carry a valid EIP-55 checksum.

        All-lowercase and all-uppercase forms carry no checksum and are accepted.
        Never raises.
        """
        if not isinstance(candidate, str) or not candidate.startswith("0x"):
            return False
        if not is_hex_address(candidate):
            return False
        body = candidate[2:]
        if body.islower() or body.isupper() or body.isdigit():
            return True
        return bool(is_checksum_address(candidate))

    @staticmethod
    def normalize_address(candidate: str) -> str:
        return str(to_checksum_address(candidate))

    @staticmethod
    def networks_sharing_address_space() -> frozenset[str]:
        return frozenset(EVM_NETWORKS)

    def addresses_for_index(self, index: int) -> list[DerivedAddress]:
        """The same address, once per EVM network."""
        address = self.derive_address(index)
        return [
            DerivedAddress(address=address, derivation_index=index, network=network)
            for network in EVM_NETWORKS
        ]

    def status(self) -> dict[str, object]:
        return {
            "initialized": self.is_initialized(),
            "master_address": self.master_address() if self.is_initialized() else None,
        }

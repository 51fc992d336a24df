"""Unit tests for DepositAddressService using a mock repository."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.cw_common.errors import UninitializedWalletError, UnsupportedNetworkError
from src.cw_wallet.application.service import DepositAddressService
from src.cw_wallet.domain.deriver import AddressDeriver, HdWalletConfig
from src.cw_wallet.domain.models import DepositAddress, DerivationSlot

HARDHAT_MNEMONIC = "test test test test test test test test test test test junk"
ADDRESS_1 = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
ADDRESS_2 = "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC"


@pytest.fixture(scope="module")
def deriver() -> AddressDeriver:
    return AddressDeriver(HdWalletConfig(mnemonic=HARDHAT_MNEMONIC))


def _deposit(network: str, address: str = ADDRESS_1, index: int = 1) -> DepositAddress:
    return DepositAddress(
        id="dep-1",
        user_id="user-1",
        network=network,
        symbol="USDT",
        address=address,
        derivation_index=index,
    )


class TestRequestDepositAddress:
    async def test_unsupported_network(self, deriver: AddressDeriver) -> None:
        repo = AsyncMock()
        svc = DepositAddressService(deriver, repo=repo)
        with pytest.raises(UnsupportedNetworkError):
            await svc.request_deposit_address(AsyncMock(), "user-1", "TRC20", "USDT")
        repo.get_deposit_address.assert_not_called()

    async def test_existing_row_returned_without_lock(self, deriver: AddressDeriver) -> None:
        repo = AsyncMock()
        repo.get_deposit_address.return_value = _deposit("ERC20")
        db = AsyncMock()
        svc = DepositAddressService(deriver, repo=repo)

        result = await svc.request_deposit_address(db, "user-1", "ERC20", "USDT")

        assert result.is_newly_allocated is False
        assert result.address == ADDRESS_1
        assert result.token_contract == "0xdAC17F958D2ee523a2206206994597C13D831ec7"
        repo.lock_index_allocation.assert_not_called()
        db.commit.assert_not_called()

    async def test_uninitialized_wallet(self) -> None:
        repo = AsyncMock()
        repo.get_deposit_address.return_value = None
        db = AsyncMock()
        svc = DepositAddressService(AddressDeriver(HdWalletConfig()), repo=repo)

        with pytest.raises(UninitializedWalletError):
            await svc.request_deposit_address(db, "user-1", "ERC20", "USDT")
        repo.lock_index_allocation.assert_not_called()
        repo.insert_deposit_address.assert_not_called()

    async def test_first_request_allocates_next_index(self, deriver: AddressDeriver) -> None:
        repo = AsyncMock()
        repo.get_deposit_address.side_effect = [None, None, _deposit("ERC20", ADDRESS_2, 2)]
        repo.get_slot_for_user.return_value = None
        repo.next_derivation_index.return_value = 2
        db = AsyncMock()
        svc = DepositAddressService(deriver, repo=repo)

        result = await svc.request_deposit_address(db, "user-1", "ERC20", "USDT")

        assert result.is_newly_allocated is True
        assert result.derivation_index == 2
        repo.lock_index_allocation.assert_awaited_once()
        slot: DerivationSlot = repo.insert_slot.await_args.args[1]
        assert slot.derivation_index == 2
        assert slot.address == ADDRESS_2
        assert slot.address_space == "EVM"
        repo.insert_deposit_address.assert_awaited_once_with(
            db, "user-1", "ERC20", "USDT", ADDRESS_2, 2
        )
        db.commit.assert_awaited_once()

    async def test_second_evm_network_reuses_slot(self, deriver: AddressDeriver) -> None:
        repo = AsyncMock()
        repo.get_deposit_address.side_effect = [None, None, _deposit("BSC20")]
        repo.get_slot_for_user.return_value = DerivationSlot(
            derivation_index=1, user_id="user-1", address_space="EVM", address=ADDRESS_1
        )
        db = AsyncMock()
        svc = DepositAddressService(deriver, repo=repo)

        result = await svc.request_deposit_address(db, "user-1", "BSC20", "USDT")

        assert result.address == ADDRESS_1
        assert result.is_newly_allocated is True
        repo.next_derivation_index.assert_not_called()
        repo.insert_slot.assert_not_called()

    async def test_race_lost_after_lock_returns_winner(self, deriver: AddressDeriver) -> None:
        repo = AsyncMock()
        repo.get_deposit_address.side_effect = [None, _deposit("ERC20")]
        db = AsyncMock()
        svc = DepositAddressService(deriver, repo=repo)

        result = await svc.request_deposit_address(db, "user-1", "ERC20", "USDT")

        assert result.is_newly_allocated is False
        repo.insert_deposit_address.assert_not_called()
        db.commit.assert_awaited_once()

    async def test_failure_rolls_back(self, deriver: AddressDeriver) -> None:
        repo = AsyncMock()
        repo.get_deposit_address.return_value = None
        repo.get_slot_for_user.return_value = None
        repo.next_derivation_index.return_value = 1
        repo.insert_slot.side_effect = RuntimeError("unique violation")
        db = AsyncMock()
        svc = DepositAddressService(deriver, repo=repo)

        with pytest.raises(RuntimeError):
            await svc.request_deposit_address(db, "user-1", "ERC20", "USDT")
        db.rollback.assert_awaited_once()
        db.commit.assert_not_called()


class TestStatus:
    def test_blockchain_status_lists_networks(self, deriver: AddressDeriver) -> None:
        status = DepositAddressService(deriver, repo=MagicMock()).blockchain_status()
        assert status["initialized"] is True
        assert status["networks"] == ["Arbitrum", "BSC20", "ERC20", "Optimism"]

    def test_blockchain_status_master_wallet_per_network(self, deriver: AddressDeriver) -> None:
        status = DepositAddressService(deriver, repo=MagicMock()).blockchain_status()
        wallets = {w["network"]: w for w in status["master_wallets"]}  # type: ignore[union-attr]
        assert set(wallets) == {"Arbitrum", "BSC20", "ERC20", "Optimism"}
        assert {w["address"] for w in wallets.values()} == {status["master_address"]}
        assert wallets["BSC20"]["chain_id"] == 56

    def test_blockchain_status_uninitialized(self) -> None:
        disabled = AddressDeriver(HdWalletConfig(mnemonic=None))
        status = DepositAddressService(disabled, repo=MagicMock()).blockchain_status()
        assert status["initialized"] is False
        assert status["master_wallets"] == []

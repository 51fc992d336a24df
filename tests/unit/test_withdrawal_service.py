"""Unit tests for WithdrawalService: preconditions, approve/reject, state machine."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.cw_common.enums import LedgerEntryType, WithdrawalStatus
from src.cw_common.errors import (
    AlreadyProcessedError,
    BelowMinimumError,
    InsufficientBalanceError,
    InvalidActionError,
    InvalidAddressError,
    InvalidAmountError,
    NotFoundError,
    UnsupportedNetworkError,
)
from src.cw_network.domain.models import NetworkConfig
from src.cw_withdrawal.application.service import WithdrawalService
from src.cw_withdrawal.domain.models import WithdrawalRequest

TO_ADDRESS = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
REQUEST_ID = "7d2c4f0e-3b9a-4f55-9a52-6f3f0a1c9b11"


def _db() -> AsyncMock:
    db = AsyncMock()
    db.add = MagicMock()  # AsyncSession.add is synchronous
    return db


def _request(status: str = "pending", amount: str = "40", fee: str = "2") -> WithdrawalRequest:
    return WithdrawalRequest(
        id=REQUEST_ID,
        user_id="user-1",
        symbol="USDT",
        network="ERC20",
        amount=Decimal(amount),
        fee=Decimal(fee),
        net_amount=Decimal(amount) - Decimal(fee),
        to_address=TO_ADDRESS,
        status=status,
    )


def _service(
    balance: str = "100",
    fee: str = "2",
    minimum: str = "10",
) -> tuple[WithdrawalService, AsyncMock, AsyncMock]:
    repo = AsyncMock()
    ledger = AsyncMock()
    ledger.get_balance.return_value = Decimal(balance)
    networks = AsyncMock()
    networks.get_or_default.return_value = NetworkConfig(
        network="ERC20", withdrawal_fee=Decimal(fee), min_withdrawal=Decimal(minimum)
    )
    svc = WithdrawalService(
        repo=repo, ledger_repo=ledger, network_repo=networks, fee_account="PLATFORM_FEE"
    )
    return svc, repo, ledger


class TestCreate:
    async def test_creates_pending_with_frozen_net_amount(self) -> None:
        svc, repo, _ = _service()
        repo.insert.return_value = _request()
        db = _db()

        result = await svc.create(db, "user-1", "USDT", "ERC20", Decimal("40"), TO_ADDRESS.lower())

        assert result.status == WithdrawalStatus.PENDING.value
        kwargs = repo.insert.await_args.kwargs
        assert kwargs["fee"] == Decimal("2")
        assert kwargs["net_amount"] == Decimal("38")
        # Stored checksummed even when submitted lower-case
        assert kwargs["to_address"] == TO_ADDRESS
        db.commit.assert_awaited_once()

    async def test_creation_moves_no_funds(self) -> None:
        svc, repo, ledger = _service()
        repo.insert.return_value = _request()
        await svc.create(_db(), "user-1", "USDT", "ERC20", Decimal("40"), TO_ADDRESS)
        ledger.append.assert_not_called()

    @pytest.mark.parametrize("amount", ["0", "-5"])
    async def test_non_positive_amount(self, amount: str) -> None:
        svc, repo, _ = _service()
        with pytest.raises(InvalidAmountError):
            await svc.create(_db(), "user-1", "USDT", "ERC20", Decimal(amount), TO_ADDRESS)
        repo.insert.assert_not_called()

    async def test_invalid_address(self) -> None:
        svc, repo, _ = _service()
        with pytest.raises(InvalidAddressError):
            await svc.create(_db(), "user-1", "USDT", "ERC20", Decimal("40"), "0x1234")
        repo.insert.assert_not_called()

    async def test_unsupported_network(self) -> None:
        svc, repo, _ = _service()
        with pytest.raises(UnsupportedNetworkError):
            await svc.create(_db(), "user-1", "USDT", "TRC20", Decimal("40"), TO_ADDRESS)
        repo.insert.assert_not_called()

    async def test_below_minimum(self) -> None:
        svc, repo, _ = _service(minimum="10")
        with pytest.raises(BelowMinimumError) as exc_info:
            await svc.create(_db(), "user-1", "USDT", "ERC20", Decimal("5"), TO_ADDRESS)
        assert exc_info.value.message == "Minimum withdrawal is 10 USDT"
        repo.insert.assert_not_called()

    async def test_amount_not_exceeding_fee(self) -> None:
        svc, repo, _ = _service(fee="2", minimum="0")
        with pytest.raises(InvalidAmountError):
            await svc.create(_db(), "user-1", "USDT", "ERC20", Decimal("2"), TO_ADDRESS)
        repo.insert.assert_not_called()

    async def test_insufficient_balance_reports_state(self) -> None:
        svc, repo, _ = _service(balance="5", fee="0", minimum="0")
        with pytest.raises(InsufficientBalanceError) as exc_info:
            await svc.create(_db(), "user-1", "USDT", "ERC20", Decimal("10"), TO_ADDRESS)
        assert exc_info.value.details == {"balance": "5", "required": "10"}
        repo.insert.assert_not_called()

    async def test_fee_counts_toward_required_balance(self) -> None:
        svc, _, _ = _service(balance="41", fee="2", minimum="10")
        with pytest.raises(InsufficientBalanceError) as exc_info:
            await svc.create(_db(), "user-1", "USDT", "ERC20", Decimal("40"), TO_ADDRESS)
        assert exc_info.value.required == Decimal("42")

    async def test_wide_amount_required_and_net_are_exact(self) -> None:
        svc, repo, _ = _service(balance="20000000000", fee="0.5", minimum="0")
        repo.insert.return_value = _request()
        amount = Decimal("10000000000.000000000000000001")

        await svc.create(_db(), "user-1", "USDT", "ERC20", amount, TO_ADDRESS)

        assert repo.insert.await_args.kwargs["net_amount"] == Decimal(
            "9999999999.500000000000000001"
        )

    async def test_wide_required_balance_is_exact(self) -> None:
        svc, _, _ = _service(balance="10000000000.500000000000000001", fee="0.5", minimum="0")
        with pytest.raises(InsufficientBalanceError) as exc_info:
            await svc.create(
                _db(), "user-1", "USDT", "ERC20", Decimal("10000000000.000000000000000002"), TO_ADDRESS
            )
        assert exc_info.value.required == Decimal("10000000000.500000000000000002")

    async def test_insert_failure_rolls_back(self) -> None:
        svc, repo, _ = _service()
        repo.insert.side_effect = RuntimeError("db down")
        db = _db()
        with pytest.raises(RuntimeError):
            await svc.create(db, "user-1", "USDT", "ERC20", Decimal("40"), TO_ADDRESS)
        db.rollback.assert_awaited_once()


class TestApprove:
    async def test_debits_amount_and_credits_fee(self) -> None:
        svc, repo, ledger = _service()
        repo.mark_completed.return_value = _request(status="completed")
        db = _db()

        result = await svc.approve(db, REQUEST_ID, "admin-1", tx_hash="0xabc")

        assert result.status == "completed"
        user_call, fee_call = ledger.append.await_args_list
        assert user_call.args[1:5] == ("user-1", "USDT", Decimal("-40"), LedgerEntryType.WITHDRAWAL)
        assert user_call.args[5].reference_id == REQUEST_ID
        assert user_call.args[5].tx_hash == "0xabc"
        assert fee_call.args[1:5] == ("PLATFORM_FEE", "USDT", Decimal("2"), LedgerEntryType.FEE_REVENUE)
        db.add.assert_called_once()
        audit = db.add.call_args.args[0]
        assert audit.action_type == "withdrawal_approve"
        assert audit.details["net_amount"] == "38"
        db.commit.assert_awaited_once()

    async def test_zero_fee_skips_fee_entry(self) -> None:
        svc, repo, ledger = _service()
        repo.mark_completed.return_value = _request(status="completed", fee="0")
        await svc.approve(_db(), REQUEST_ID, "admin-1")
        assert ledger.append.await_count == 1

    async def test_insufficient_balance_rolls_back(self) -> None:
        svc, repo, ledger = _service()
        repo.mark_completed.return_value = _request(status="completed")
        ledger.append.side_effect = InsufficientBalanceError(40, 10)
        db = _db()

        with pytest.raises(InsufficientBalanceError):
            await svc.approve(db, REQUEST_ID, "admin-1")
        db.rollback.assert_awaited_once()
        db.commit.assert_not_called()
        db.add.assert_not_called()

    async def test_missing_request(self) -> None:
        svc, repo, ledger = _service()
        repo.mark_completed.return_value = None
        repo.get.return_value = None
        db = _db()
        with pytest.raises(NotFoundError):
            await svc.approve(db, REQUEST_ID, "admin-1")
        ledger.append.assert_not_called()
        db.rollback.assert_awaited_once()

    @pytest.mark.parametrize("status", ["completed", "rejected"])
    async def test_already_processed(self, status: str) -> None:
        svc, repo, ledger = _service()
        repo.mark_completed.return_value = None
        repo.get.return_value = _request(status=status)
        with pytest.raises(AlreadyProcessedError) as exc_info:
            await svc.approve(_db(), REQUEST_ID, "admin-1")
        assert exc_info.value.details == {"status": status}
        ledger.append.assert_not_called()


class TestReject:
    async def test_no_ledger_change(self) -> None:
        svc, repo, ledger = _service()
        rejected = _request(status="rejected")
        rejected.rejection_reason = "suspicious"
        repo.mark_rejected.return_value = rejected
        db = _db()

        result = await svc.reject(db, REQUEST_ID, "admin-1", "suspicious")

        assert result.rejection_reason == "suspicious"
        ledger.append.assert_not_called()
        assert db.add.call_args.args[0].action_type == "withdrawal_reject"
        db.commit.assert_awaited_once()

    async def test_reject_after_approve(self) -> None:
        svc, repo, _ = _service()
        repo.mark_rejected.return_value = None
        repo.get.return_value = _request(status="completed")
        with pytest.raises(AlreadyProcessedError):
            await svc.reject(_db(), REQUEST_ID, "admin-1", "late")


class TestProcess:
    async def test_dispatches_approve(self) -> None:
        svc, repo, _ = _service()
        repo.mark_completed.return_value = _request(status="completed")
        result = await svc.process(_db(), REQUEST_ID, "admin-1", "approve", tx_hash="0x1")
        assert result.status == "completed"
        repo.mark_completed.assert_awaited_once()

    async def test_dispatches_reject_with_note_as_reason(self) -> None:
        svc, repo, _ = _service()
        repo.mark_rejected.return_value = _request(status="rejected")
        await svc.process(_db(), REQUEST_ID, "admin-1", "reject", note="bad address")
        assert repo.mark_rejected.await_args.args[3] == "bad address"

    async def test_unknown_action(self) -> None:
        svc, repo, _ = _service()
        with pytest.raises(InvalidActionError):
            await svc.process(_db(), REQUEST_ID, "admin-1", "cancel")
        repo.mark_completed.assert_not_called()
        repo.mark_rejected.assert_not_called()


class TestDomainModel:
    def test_ensure_pending(self) -> None:
        _request("pending").ensure_pending()
        with pytest.raises(AlreadyProcessedError):
            _request("completed").ensure_pending()

    def test_is_terminal(self) -> None:
        assert _request("pending").is_terminal is False
        assert _request("rejected").is_terminal is True

"""Ledger invariants exercised against an in-memory repository.

The fake mirrors LedgerRepository's contract: one lock per (user, symbol)
stands in for the row lock the guarded UPDATE takes in PostgreSQL.
"""

import asyncio
import random
from collections import defaultdict
from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from src.cw_common.amounts import ZERO
from src.cw_common.enums import LedgerEntryType, ReferenceType
from src.cw_common.errors import InsufficientBalanceError
from src.cw_ledger.application.service import LedgerService
from src.cw_ledger.domain.models import LedgerEntry, LedgerReference
from src.cw_ledger.infrastructure.persistence import validate_delta

REF = LedgerReference(reference_type=ReferenceType.ADMIN_ACTION.value)


class InMemoryLedgerRepository:
    def __init__(self) -> None:
        self.entries: list[LedgerEntry] = []
        self.balances: dict[tuple[str, str], Decimal] = {}
        self._locks: dict[tuple[str, str], asyncio.Lock] = defaultdict(asyncio.Lock)

    async def append(self, db, user_id, symbol, delta, entry_type, reference):  # type: ignore[no-untyped-def]
        validate_delta(delta, entry_type)
        key = (user_id, symbol)
        async with self._locks[key]:
            before = self.balances.get(key, ZERO)
            await asyncio.sleep(0)  # yield between read and write
            after = before + delta
            if after < ZERO:
                raise InsufficientBalanceError(abs(delta), before)
            entry = LedgerEntry(
                id=len(self.entries) + 1,
                user_id=user_id,
                symbol=symbol,
                entry_type=entry_type.value,
                amount=abs(delta),
                balance_before=before,
                balance_after=after,
                reference_type=reference.reference_type,
                created_at=datetime.now(UTC),
            )
            self.entries.append(entry)
            self.balances[key] = after
            return entry

    async def get_balance(self, db, user_id, symbol):  # type: ignore[no-untyped-def]
        return self.balances.get((user_id, symbol), ZERO)

    async def list_balances(self, db, user_id):  # type: ignore[no-untyped-def]
        return {s: b for (u, s), b in self.balances.items() if u == user_id}

    async def latest_logged_balance(self, db, user_id, symbol):  # type: ignore[no-untyped-def]
        for e in reversed(self.entries):
            if e.user_id == user_id and e.symbol == symbol:
                return e.balance_after
        return ZERO


@pytest.fixture
def repo() -> InMemoryLedgerRepository:
    return InMemoryLedgerRepository()


@pytest.fixture
def svc(repo: InMemoryLedgerRepository) -> LedgerService:
    return LedgerService(repo=repo)  # type: ignore[arg-type]


class TestSumProperty:
    async def test_balance_equals_sum_of_signed_entries(
        self, repo: InMemoryLedgerRepository, svc: LedgerService
    ) -> None:
        rng = random.Random(20261019)
        db = AsyncMock()
        for _ in range(300):
            user = rng.choice(["u1", "u2"])
            symbol = rng.choice(["USDT", "ETH"])
            amount = Decimal(rng.randint(1, 5000)) / 100
            entry_type = rng.choice(list(LedgerEntryType))
            delta = amount * entry_type.sign
            try:
                await svc.append(db, user, symbol, delta, entry_type, REF)
            except InsufficientBalanceError:
                pass

        for user in ("u1", "u2"):
            for symbol in ("USDT", "ETH"):
                signed_sum = sum(
                    (e.signed_amount for e in repo.entries
                     if e.user_id == user and e.symbol == symbol),
                    ZERO,
                )
                balance = await svc.current_balance(db, user, symbol)
                assert balance == signed_sum
                assert balance >= ZERO
                assert await svc.balance_from_log(db, user, symbol) == balance

    async def test_entries_chain_before_to_after(
        self, repo: InMemoryLedgerRepository, svc: LedgerService
    ) -> None:
        db = AsyncMock()
        await svc.append(db, "u1", "USDT", Decimal("100"), LedgerEntryType.DEPOSIT, REF)
        await svc.append(db, "u1", "USDT", Decimal("-40"), LedgerEntryType.WITHDRAWAL, REF)
        await svc.append(db, "u1", "USDT", Decimal("2.5"), LedgerEntryType.EARNING, REF)

        previous = ZERO
        for e in repo.entries:
            assert e.balance_before == previous
            assert e.balance_after == e.balance_before + e.signed_amount
            previous = e.balance_after
        assert previous == Decimal("62.5")

    async def test_rejected_debit_leaves_no_trace(
        self, repo: InMemoryLedgerRepository, svc: LedgerService
    ) -> None:
        db = AsyncMock()
        await svc.append(db, "u1", "USDT", Decimal("5"), LedgerEntryType.DEPOSIT, REF)
        with pytest.raises(InsufficientBalanceError) as exc_info:
            await svc.append(db, "u1", "USDT", Decimal("-10"), LedgerEntryType.WITHDRAWAL, REF)
        assert exc_info.value.details == {"balance": "5", "required": "10"}
        assert len(repo.entries) == 1
        assert await svc.current_balance(db, "u1", "USDT") == Decimal("5")


class TestConcurrentDebits:
    async def test_only_one_of_two_overlapping_debits_succeeds(
        self, repo: InMemoryLedgerRepository, svc: LedgerService
    ) -> None:
        db = AsyncMock()
        await svc.append(db, "u1", "USDT", Decimal("100"), LedgerEntryType.DEPOSIT, REF)

        results = await asyncio.gather(
            svc.append(db, "u1", "USDT", Decimal("-60"), LedgerEntryType.WITHDRAWAL, REF),
            svc.append(db, "u1", "USDT", Decimal("-60"), LedgerEntryType.WITHDRAWAL, REF),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, InsufficientBalanceError)]
        successes = [r for r in results if isinstance(r, LedgerEntry)]
        assert len(successes) == 1
        assert len(failures) == 1
        assert await svc.current_balance(db, "u1", "USDT") == Decimal("40")

    async def test_credits_on_different_keys_do_not_interfere(
        self, repo: InMemoryLedgerRepository, svc: LedgerService
    ) -> None:
        db = AsyncMock()
        await asyncio.gather(*[
            svc.append(db, f"u{i % 3}", "USDT", Decimal("1"), LedgerEntryType.DEPOSIT, REF)
            for i in range(30)
        ])
        assert await svc.all_balances(db, "u0") == {"USDT": Decimal("10")}
        assert await svc.all_balances(db, "u1") == {"USDT": Decimal("10")}

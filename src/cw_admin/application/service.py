"""Admin application service.

Every mutation commits together with its admin_actions row. Withdrawal
processing delegates to WithdrawalService, which owns that workflow.
"""

import logging
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.cw_admin.application.schemas import (
    ConsistencyReport,
    ConsistencyViolation,
    UserOverviewResponse,
)
from src.cw_admin.domain.models import AdminAction
from src.cw_admin.infrastructure.audit import list_admin_actions, write_admin_action
from src.cw_common.amounts import ZERO, amount_to_display, negate_amount
from src.cw_common.datetime_utils import utc_now
from src.cw_common.enums import (
    AdjustDirection,
    AdminActionType,
    LedgerEntryType,
    ReferenceType,
)
from src.cw_common.errors import InvalidActionError, InvalidAmountError
from src.cw_ledger.domain.models import LedgerEntry, LedgerReference
from src.cw_ledger.application.service import LedgerService
from src.cw_ledger.domain.repository import LedgerRepositoryProtocol
from src.cw_ledger.infrastructure.persistence import LedgerRepository
from src.cw_network.domain.models import NetworkConfig
from src.cw_network.infrastructure.persistence import NetworkConfigRepository
from src.cw_wallet.application.schemas import DepositAddressItem
from src.cw_wallet.domain.repository import DepositAddressRepositoryProtocol
from src.cw_wallet.infrastructure.persistence import DepositAddressRepository
from src.cw_withdrawal.application.schemas import WithdrawalResponse
from src.cw_withdrawal.application.service import WithdrawalService
from src.cw_withdrawal.domain.models import WithdrawalRequest

logger = logging.getLogger(__name__)

ADMIN_LOG_LIMIT = 100
OVERVIEW_WITHDRAWAL_LIMIT = 20

_ENTRY_TYPE_FOR = {
    AdjustDirection.CREDIT: LedgerEntryType.ADMIN_CREDIT,
    AdjustDirection.DEBIT: LedgerEntryType.ADMIN_DEBIT,
}
_ACTION_TYPE_FOR = {
    AdjustDirection.CREDIT: AdminActionType.BALANCE_CREDIT,
    AdjustDirection.DEBIT: AdminActionType.BALANCE_DEBIT,
}


class AdminService:
    def __init__(
        self,
        withdrawals: WithdrawalService | None = None,
        ledger_repo: LedgerRepositoryProtocol | None = None,
        deposit_repo: DepositAddressRepositoryProtocol | None = None,
        network_repo: NetworkConfigRepository | None = None,
    ) -> None:
        self._ledger: LedgerRepositoryProtocol = ledger_repo or LedgerRepository()
        self._balances = LedgerService(self._ledger)
        self._deposits: DepositAddressRepositoryProtocol = (
            deposit_repo or DepositAddressRepository()
        )
        self._networks = network_repo or NetworkConfigRepository()
        self._withdrawals = withdrawals or WithdrawalService(
            ledger_repo=self._ledger, network_repo=self._networks
        )

    # ------------------------------------------------------------------
    # Balances
    # ------------------------------------------------------------------

    async def adjust_balance(
        self,
        db: AsyncSession,
        admin_id: str,
        target_user_id: str,
        symbol: str,
        amount: Decimal,
        direction: AdjustDirection | str,
        note: str | None = None,
    ) -> LedgerEntry:
        try:
            direction = AdjustDirection(direction)
        except ValueError:
            raise InvalidActionError(str(direction), expected=("credit", "debit")) from None
        if amount <= ZERO:
            raise InvalidAmountError("adjustment amount must be positive")

        note = note or f"Admin {direction.value} by {admin_id}"
        delta = amount if direction is AdjustDirection.CREDIT else negate_amount(amount)
        try:
            entry = await self._ledger.append(
                db,
                target_user_id,
                symbol,
                delta,
                _ENTRY_TYPE_FOR[direction],
                LedgerReference(
                    reference_type=ReferenceType.ADMIN_ACTION.value,
                    admin_id=admin_id,
                    note=note,
                ),
            )
            await write_admin_action(
                admin_id=admin_id,
                target_user_id=target_user_id,
                action_type=_ACTION_TYPE_FOR[direction],
                details={
                    "symbol": symbol,
                    "amount": amount,
                    "balance_before": entry.balance_before,
                    "balance_after": entry.balance_after,
                    "note": note,
                },
                db=db,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "Admin %s %s %s %s for user %s: %s -> %s",
            admin_id,
            direction.value,
            amount,
            symbol,
            target_user_id,
            entry.balance_before,
            entry.balance_after,
        )
        return entry

    # ------------------------------------------------------------------
    # Withdrawals
    # ------------------------------------------------------------------

    async def list_pending_withdrawals(self, db: AsyncSession) -> list[WithdrawalRequest]:
        return await self._withdrawals.list_pending(db)

    async def process_withdrawal(
        self,
        db: AsyncSession,
        admin_id: str,
        request_id: str,
        action: str,
        tx_hash: str | None = None,
        note: str | None = None,
    ) -> WithdrawalRequest:
        return await self._withdrawals.process(
            db, request_id, admin_id, action, tx_hash=tx_hash, note=note
        )

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    async def list_admin_actions(
        self, db: AsyncSession, limit: int = ADMIN_LOG_LIMIT
    ) -> list[AdminAction]:
        return await list_admin_actions(db, limit)

    async def user_overview(self, db: AsyncSession, user_id: str) -> UserOverviewResponse:
        balances = await self._balances.all_balances(db, user_id)
        inconsistent = [
            symbol
            for symbol, balance in balances.items()
            if await self._balances.balance_from_log(db, user_id, symbol) != balance
        ]
        if inconsistent:
            logger.error("User %s balance projection drifted for %s", user_id, inconsistent)
        addresses = await self._deposits.list_deposit_addresses(db, user_id)
        withdrawals = await self._withdrawals.list_for_user(
            db, user_id, limit=OVERVIEW_WITHDRAWAL_LIMIT
        )
        return UserOverviewResponse(
            user_id=user_id,
            balances={s: amount_to_display(b) for s, b in balances.items()},
            deposit_addresses=[DepositAddressItem.from_domain(a) for a in addresses],
            recent_withdrawals=[WithdrawalResponse.from_domain(w) for w in withdrawals],
            inconsistent_symbols=inconsistent,
        )

    # ------------------------------------------------------------------
    # Network configuration
    # ------------------------------------------------------------------

    async def list_network_configs(self, db: AsyncSession) -> list[NetworkConfig]:
        return await self._networks.list_all(db)

    async def update_network_config(
        self,
        db: AsyncSession,
        admin_id: str,
        network: str,
        changes: dict[str, Any],
    ) -> NetworkConfig:
        try:
            updated = await self._networks.update(db, network, changes)
            await write_admin_action(
                admin_id=admin_id,
                target_user_id=None,
                action_type=AdminActionType.NETWORK_CONFIG_UPDATE,
                details={"network": network, "changes": changes},
                db=db,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Admin %s updated %s config: %s", admin_id, network, sorted(changes))
        return updated

    # ------------------------------------------------------------------
    # Invariants
    # ------------------------------------------------------------------

    async def verify_ledger_consistency(self, db: AsyncSession) -> ConsistencyReport:
        """Every ledger_balances row must equal balance_after of its latest entry."""
        mismatches = await self._ledger.find_projection_mismatches(db)
        violations = [
            ConsistencyViolation(
                user_id=m.user_id,
                symbol=m.symbol,
                projected_balance=amount_to_display(m.projected_balance),
                log_balance=(
                    amount_to_display(m.log_balance) if m.log_balance is not None else None
                ),
            )
            for m in mismatches
        ]
        if violations:
            logger.error("Ledger consistency check found %d violation(s)", len(violations))
            for v in violations:
                logger.error(
                    "Projection mismatch user=%s symbol=%s projected=%s log=%s",
                    v.user_id,
                    v.symbol,
                    v.projected_balance,
                    v.log_balance,
                )
        return ConsistencyReport(
            ok=not violations,
            checked_at=utc_now().isoformat(),
            violations=violations,
        )

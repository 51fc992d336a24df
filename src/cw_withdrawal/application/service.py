"""WithdrawalService — request creation and the approve/reject workflow.

Creation only validates and records a pending request; no funds move. On
approval the user is debited the full requested amount and the network fee is
credited to the platform fee account, in the same transaction as the status
change and the audit row. If the debit fails (balance spent since creation)
the whole transaction rolls back and the request stays pending.
"""

import logging
from decimal import Decimal
from typing import NoReturn

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.cw_admin.infrastructure.audit import write_admin_action
from src.cw_common.amounts import ZERO, add_amounts, negate_amount
from src.cw_common.enums import (
    AdminActionType,
    LedgerEntryType,
    ReferenceType,
    WithdrawalAction,
)
from src.cw_common.errors import (
    BelowMinimumError,
    InsufficientBalanceError,
    InternalError,
    InvalidActionError,
    InvalidAddressError,
    InvalidAmountError,
    NotFoundError,
    UnsupportedNetworkError,
)
from src.cw_ledger.domain.models import LedgerReference
from src.cw_ledger.domain.repository import LedgerRepositoryProtocol
from src.cw_ledger.infrastructure.persistence import LedgerRepository
from src.cw_network.infrastructure.persistence import NetworkConfigRepository
from src.cw_wallet.domain.deriver import AddressDeriver
from src.cw_wallet.domain.networks import address_space_of
from src.cw_withdrawal.domain.models import WithdrawalRequest, compute_net_amount
from src.cw_withdrawal.domain.repository import WithdrawalRepositoryProtocol
from src.cw_withdrawal.infrastructure.persistence import WithdrawalRepository

logger = logging.getLogger(__name__)

USER_HISTORY_LIMIT = 50


class WithdrawalService:
    def __init__(
        self,
        repo: WithdrawalRepositoryProtocol | None = None,
        ledger_repo: LedgerRepositoryProtocol | None = None,
        network_repo: NetworkConfigRepository | None = None,
        fee_account: str | None = None,
    ) -> None:
        self._repo: WithdrawalRepositoryProtocol = repo or WithdrawalRepository()
        self._ledger: LedgerRepositoryProtocol = ledger_repo or LedgerRepository()
        self._networks = network_repo or NetworkConfigRepository()
        self._fee_account = fee_account or settings.PLATFORM_FEE_USER_ID

    # ------------------------------------------------------------------
    # User side
    # ------------------------------------------------------------------

    async def create(
        self,
        db: AsyncSession,
        user_id: str,
        symbol: str,
        network: str,
        amount: Decimal,
        to_address: str,
    ) -> WithdrawalRequest:
        if amount <= ZERO:
            raise InvalidAmountError("withdrawal amount must be positive")
        if not AddressDeriver.is_valid_address(to_address):
            raise InvalidAddressError(to_address)
        if address_space_of(network) is None:
            raise UnsupportedNetworkError(network)

        config = await self._networks.get_or_default(db, network)
        if amount < config.min_withdrawal:
            raise BelowMinimumError(config.min_withdrawal, amount, symbol)
        if amount <= config.withdrawal_fee:
            raise InvalidAmountError(
                f"amount must exceed the {network} withdrawal fee"
            )

        required = add_amounts(amount, config.withdrawal_fee)
        balance = await self._ledger.get_balance(db, user_id, symbol)
        if balance < required:
            raise InsufficientBalanceError(required=required, available=balance)

        try:
            request = await self._repo.insert(
                db,
                user_id=user_id,
                symbol=symbol,
                network=network,
                amount=amount,
                fee=config.withdrawal_fee,
                net_amount=compute_net_amount(amount, config.withdrawal_fee),
                to_address=AddressDeriver.normalize_address(to_address),
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "Withdrawal %s created: user=%s %s %s on %s",
            request.id,
            user_id,
            amount,
            symbol,
            network,
        )
        return request

    async def list_for_user(
        self, db: AsyncSession, user_id: str, limit: int = USER_HISTORY_LIMIT
    ) -> list[WithdrawalRequest]:
        return await self._repo.list_for_user(db, user_id, limit)

    # ------------------------------------------------------------------
    # Admin side
    # ------------------------------------------------------------------

    async def list_pending(self, db: AsyncSession) -> list[WithdrawalRequest]:
        return await self._repo.list_pending(db)

    async def approve(
        self,
        db: AsyncSession,
        request_id: str,
        admin_id: str,
        tx_hash: str | None = None,
        note: str | None = None,
    ) -> WithdrawalRequest:
        try:
            request = await self._repo.mark_completed(db, request_id, admin_id, tx_hash, note)
            if request is None:
                await self._raise_not_pending(db, request_id)

            reference = LedgerReference(
                reference_type=ReferenceType.WITHDRAWAL.value,
                reference_id=request.id,
                network=request.network,
                tx_hash=tx_hash,
                admin_id=admin_id,
                note=note,
            )
            await self._ledger.append(
                db,
                request.user_id,
                request.symbol,
                negate_amount(request.amount),
                LedgerEntryType.WITHDRAWAL,
                reference,
            )
            if request.fee > ZERO:
                await self._ledger.append(
                    db,
                    self._fee_account,
                    request.symbol,
                    request.fee,
                    LedgerEntryType.FEE_REVENUE,
                    LedgerReference(
                        reference_type=ReferenceType.WITHDRAWAL.value,
                        reference_id=request.id,
                        network=request.network,
                        admin_id=admin_id,
                        note=f"Withdrawal fee from {request.user_id}",
                    ),
                )
            await write_admin_action(
                admin_id=admin_id,
                target_user_id=request.user_id,
                action_type=AdminActionType.WITHDRAWAL_APPROVE,
                details={
                    "request_id": request.id,
                    "symbol": request.symbol,
                    "network": request.network,
                    "amount": request.amount,
                    "fee": request.fee,
                    "net_amount": request.net_amount,
                    "tx_hash": tx_hash,
                    "note": note,
                },
                db=db,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Withdrawal %s approved by %s", request.id, admin_id)
        return request

    async def reject(
        self,
        db: AsyncSession,
        request_id: str,
        admin_id: str,
        reason: str | None = None,
    ) -> WithdrawalRequest:
        try:
            request = await self._repo.mark_rejected(db, request_id, admin_id, reason)
            if request is None:
                await self._raise_not_pending(db, request_id)

            await write_admin_action(
                admin_id=admin_id,
                target_user_id=request.user_id,
                action_type=AdminActionType.WITHDRAWAL_REJECT,
                details={
                    "request_id": request.id,
                    "symbol": request.symbol,
                    "amount": request.amount,
                    "reason": reason,
                },
                db=db,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Withdrawal %s rejected by %s", request.id, admin_id)
        return request

    async def process(
        self,
        db: AsyncSession,
        request_id: str,
        admin_id: str,
        action: str,
        tx_hash: str | None = None,
        note: str | None = None,
    ) -> WithdrawalRequest:
        try:
            parsed = WithdrawalAction(action)
        except ValueError:
            raise InvalidActionError(action) from None
        if parsed is WithdrawalAction.APPROVE:
            return await self.approve(db, request_id, admin_id, tx_hash=tx_hash, note=note)
        return await self.reject(db, request_id, admin_id, reason=note)

    async def _raise_not_pending(self, db: AsyncSession, request_id: str) -> NoReturn:
        """The conditional update matched nothing: tell missing from terminal."""
        existing = await self._repo.get(db, request_id)
        if existing is None:
            raise NotFoundError("Withdrawal request", request_id)
        existing.ensure_pending()
        raise InternalError(f"Withdrawal request {request_id} is pending but could not be updated")

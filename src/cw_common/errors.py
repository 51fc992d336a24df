"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Wallet / address derivation
  2xxx: Ledger / balance
  3xxx: Withdrawal workflow
  4xxx: Lookup
  9xxx: System / auth

Every business rule violation is raised as a typed AppError and surfaced to the
caller unchanged. `details` carries current-state fields (balance, required, ...)
for client-side messaging; amounts are rendered as strings to keep precision.
"""

from decimal import Decimal
from typing import Any

from src.cw_common.amounts import amount_to_display


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        self.details = details
        super().__init__(message)


def _fmt(amount: Decimal | int) -> str:
    return amount_to_display(Decimal(amount))


# --- 1xxx: Wallet ---

class UninitializedWalletError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "HD wallet not initialized: deposits are disabled", 503)


class InvalidAddressError(AppError):
    def __init__(self, address: str) -> None:
        super().__init__(
            1002, "Invalid withdrawal address", 422, {"address": address}
        )


class UnsupportedNetworkError(AppError):
    def __init__(self, network: str) -> None:
        super().__init__(
            1003, f"Unsupported network: {network}", 422, {"network": network}
        )


# --- 2xxx: Ledger ---

class InsufficientBalanceError(AppError):
    def __init__(self, required: Decimal | int, available: Decimal | int) -> None:
        super().__init__(
            2001,
            f"Insufficient balance: required {_fmt(required)}, available {_fmt(available)}",
            422,
            {"balance": _fmt(available), "required": _fmt(required)},
        )
        self.required = Decimal(required)
        self.available = Decimal(available)


class InvalidAmountError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2002, f"Invalid amount: {detail}", 422)


# --- 3xxx: Withdrawal ---

class BelowMinimumError(AppError):
    def __init__(self, minimum: Decimal, amount: Decimal, symbol: str) -> None:
        super().__init__(
            3001,
            f"Minimum withdrawal is {_fmt(minimum)} {symbol}",
            422,
            {"minimum": _fmt(minimum), "amount": _fmt(amount)},
        )


class AlreadyProcessedError(AppError):
    def __init__(self, request_id: str, status: str) -> None:
        super().__init__(
            3002,
            f"Withdrawal request {request_id} already processed (status={status})",
            409,
            {"status": status},
        )


class InvalidActionError(AppError):
    def __init__(self, action: str, expected: tuple[str, ...] = ("approve", "reject")) -> None:
        super().__init__(
            3003, f"Invalid action: {action} (expected {' or '.join(expected)})", 422
        )


# --- 4xxx: Lookup ---

class NotFoundError(AppError):
    def __init__(self, kind: str, identifier: str) -> None:
        super().__init__(4004, f"{kind} not found: {identifier}", 404)


# --- 9xxx: System / auth ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class TransientStoreError(AppError):
    """Lock timeout / dropped connection. Only reads are retried on this."""

    def __init__(self) -> None:
        super().__init__(9003, "Storage temporarily unavailable", 503)


class UnauthorizedError(AppError):
    def __init__(self) -> None:
        super().__init__(9401, "Invalid or expired token", 401)


class ForbiddenError(AppError):
    def __init__(self) -> None:
        super().__init__(9403, "Admin access required", 403)

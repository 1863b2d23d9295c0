"""Error taxonomy for marketplace transactions.

Every failure aborts the whole transaction and carries an ErrorCode so
clients can tell failures apart without parsing messages.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    NOT_OWNER = "not_owner"

    ALREADY_INITIALIZED = "already_initialized"
    AUCTION_EXISTS = "auction_exists"
    ALREADY_LISTED = "already_listed"

    REGISTRY_NOT_FOUND = "registry_not_found"
    BID_TOO_LOW = "bid_too_low"
    AUCTION_NOT_ENDED = "auction_not_ended"
    NO_AUCTION = "no_auction"
    INVALID_PRICE = "invalid_price"
    INSUFFICIENT_PAYMENT = "insufficient_payment"
    SAME_OWNER = "same_owner"
    NOT_FOR_SALE = "not_for_sale"
    INSUFFICIENT_FUNDS = "insufficient_funds"

    ASSET_NOT_FOUND = "asset_not_found"


class MarketError(Exception):
    """Base exception for aborted marketplace transactions."""

    def __init__(self, code: ErrorCode, message: str = "") -> None:
        super().__init__(message or code.value)
        self.code = code


class AuthorizationError(MarketError):
    """Raised when the caller is not the required owner."""

    def __init__(self, message: str = "") -> None:
        super().__init__(ErrorCode.NOT_OWNER, message)


class StateConflictError(MarketError):
    """Raised when the target is already in the requested state."""

    pass


class PreconditionError(MarketError):
    """Raised when an operation's precondition does not hold."""

    pass


class RegistryNotFoundError(PreconditionError):
    """Raised when an account has no initialized registry."""

    def __init__(self, account: str) -> None:
        super().__init__(
            ErrorCode.REGISTRY_NOT_FOUND, f"No registry initialized for {account}"
        )
        self.account = account


class InsufficientFundsError(PreconditionError):
    """Raised by the balance store when a sender cannot cover a transfer."""

    def __init__(self, account: str, balance: int, amount: int) -> None:
        super().__init__(
            ErrorCode.INSUFFICIENT_FUNDS,
            f"{account} holds {balance}, cannot transfer {amount}",
        )
        self.account = account
        self.balance = balance
        self.amount = amount


class AssetNotFoundError(MarketError, IndexError):
    """Raised when an asset id is outside the registry."""

    def __init__(self, asset_id: int, length: int) -> None:
        super().__init__(
            ErrorCode.ASSET_NOT_FOUND,
            f"Asset {asset_id} out of range for registry of length {length}",
        )
        self.asset_id = asset_id


class InvalidTransactionError(Exception):
    """Raised when a submitted transaction cannot be decoded."""

    pass

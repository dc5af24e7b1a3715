"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Wallet session
  3xxx: Market
  4xxx: Trade
  5xxx: Position / claim
  6xxx: Transaction
  7xxx: Token claim
  9xxx: System

Domain-rule violations (InvalidAmountError, MarketClosedError,
AlreadySettledError, InvalidStateError) are never retried.
StoreUnavailableError is the only retryable kind.
"""


class AppError(Exception):
    """Base application error."""

    retryable: bool = False

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


class NotFoundError(AppError):
    """Unknown market / position / transaction id."""


# --- 1xxx: Wallet session ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Wallet session is invalid or expired", 401)


class InvalidWalletAddressError(AppError):
    def __init__(self, address: str) -> None:
        super().__init__(1006, f"Invalid wallet address: {address}", 422)


class UnsupportedChainError(AppError):
    def __init__(self, chain_id: str) -> None:
        super().__init__(1007, f"Unsupported chain: {chain_id}", 422)


# --- 3xxx: Market ---

class MarketNotFoundError(NotFoundError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3001, f"Market not found: {market_id}", 404)


class MarketClosedError(AppError):
    def __init__(self, market_id: str, reason: str = "not active") -> None:
        super().__init__(3002, f"Market is closed for trading ({reason}): {market_id}", 422)


class AlreadySettledError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3003, f"Market is already settled: {market_id}", 409)


class MarketNotExpiredError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3004, f"Market has not expired yet: {market_id}", 422)


class InvalidMarketError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3005, f"Invalid market: {detail}", 422)


class PriceUnavailableError(NotFoundError):
    def __init__(self, asset_name: str) -> None:
        super().__init__(3006, f"No price available for asset: {asset_name}", 404)


# --- 4xxx: Trade ---

class InvalidAmountError(AppError):
    def __init__(self, amount: object) -> None:
        super().__init__(4001, f"Amount must be positive with at most 8 decimal places, got {amount}", 422)


# --- 5xxx: Position / claim ---

class PositionNotFoundError(NotFoundError):
    def __init__(self, position_id: str) -> None:
        super().__init__(5001, f"Position not found: {position_id}", 404)


class InvalidStateError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(5002, f"Position cannot be claimed: {detail}", 409)


# --- 6xxx: Transaction ---

class TransactionNotFoundError(NotFoundError):
    def __init__(self, tx_hash: str) -> None:
        super().__init__(6001, f"Transaction not found: {tx_hash}", 404)


# --- 7xxx: Token claim ---

class TokenClaimExistsError(AppError):
    def __init__(self, field: str) -> None:
        super().__init__(7001, f"This {field} has already registered for a token grant", 409)


class TokenClaimNotFoundError(NotFoundError):
    def __init__(self, email: str) -> None:
        super().__init__(7002, f"No token claim registered for {email}", 404)


class InvalidEmailError(AppError):
    def __init__(self, email: str) -> None:
        super().__init__(7003, f"Invalid email address: {email}", 422)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class StoreUnavailableError(AppError):
    retryable = True

    def __init__(self, detail: str = "Datastore unavailable") -> None:
        super().__init__(9003, detail, 503)

"""Unified Rosetta error codes and custom exceptions.

Every error rendered by the API carries a small, stable integer code.
Client tooling branches on these codes, so existing values never change;
new errors are appended at the end.

  0-2:   Service (unimplemented / offline / upstream chain)
  3-4:   Public key
  5-11:  Construction intent, options and metadata
  12-16: Transactions and signatures
  17-20: Request / lookup
"""

from typing import Any


class AppError(Exception):
    """Base application error, rendered as a Rosetta error payload."""

    def __init__(
        self,
        code: int,
        message: str,
        retriable: bool = False,
        details: dict[str, Any] | None = None,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.retriable = retriable
        self.details = details
        self.http_status = http_status
        super().__init__(message)


# --- 0-2: Service ---

class UnimplementedError(AppError):
    def __init__(self) -> None:
        super().__init__(0, "Endpoint not implemented")


class UnavailableOfflineError(AppError):
    def __init__(self) -> None:
        super().__init__(1, "Endpoint unavailable offline")


class ChainError(AppError):
    def __init__(self, context: str | None = None) -> None:
        details = {"context": context} if context is not None else None
        super().__init__(2, "Kava error", details=details)


# --- 3-4: Public key ---

class UnsupportedCurveTypeError(AppError):
    def __init__(self, curve_type: str | None = None) -> None:
        details = {"curve_type": curve_type} if curve_type is not None else None
        super().__init__(3, "Unsupported Curve Type", details=details)


class PublicKeyNilError(AppError):
    def __init__(self) -> None:
        super().__init__(4, "Public Key is nil")


# --- 5-11: Construction intent ---

class NoOperationsError(AppError):
    def __init__(self) -> None:
        super().__init__(5, "No operations provided")


class UnclearIntentError(AppError):
    def __init__(self, context: str | None = None) -> None:
        details = {"context": context} if context is not None else None
        super().__init__(6, "Unable to parse intent", details=details)


class InvalidCurrencyAmountError(AppError):
    def __init__(self, value: str | None = None) -> None:
        details = {"value": value} if value is not None else None
        super().__init__(7, "Invalid currency amount", details=details)


class UnsupportedCurrencyError(AppError):
    def __init__(self, symbol: str | None = None) -> None:
        details = {"symbol": symbol} if symbol is not None else None
        super().__init__(8, "Unsupported currency", details=details)


class InvalidAddressError(AppError):
    def __init__(self, address: str | None = None) -> None:
        details = {"address": address} if address is not None else None
        super().__init__(9, "Invalid address", details=details)


class InvalidOptionsError(AppError):
    def __init__(self, fields: list[str]) -> None:
        super().__init__(10, "Invalid options", details={"fields": fields})


class InvalidMetadataError(AppError):
    def __init__(self, fields: list[str]) -> None:
        super().__init__(11, "Invalid metadata", details={"fields": fields})


# --- 12-16: Transactions and signatures ---

class InvalidTxError(AppError):
    def __init__(self, context: str | None = None) -> None:
        details = {"context": context} if context is not None else None
        super().__init__(12, "Invalid transaction", details=details)


class MissingPublicKeyError(AppError):
    def __init__(self, required: int, provided: int) -> None:
        super().__init__(
            13,
            "Missing public key",
            details={"required": required, "provided": provided},
        )


class MissingSignatureError(AppError):
    def __init__(self, required: int, provided: int) -> None:
        super().__init__(
            14,
            "Missing signature",
            details={"required": required, "provided": provided},
        )


class InvalidPublicKeyError(AppError):
    def __init__(self, context: str | None = None) -> None:
        details = {"context": context} if context is not None else None
        super().__init__(15, "Invalid public key", details=details)


class InvalidSignatureError(AppError):
    def __init__(self, context: str | None = None) -> None:
        details = {"context": context} if context is not None else None
        super().__init__(16, "Invalid signature", details=details)


# --- 17-20: Request / lookup ---

class InvalidNetworkError(AppError):
    def __init__(self, network: str | None = None) -> None:
        details = {"network": network} if network is not None else None
        super().__init__(17, "Invalid network identifier", details=details)


class InvalidRequestError(AppError):
    def __init__(self, errors: list[Any] | None = None) -> None:
        details = {"errors": errors} if errors is not None else None
        super().__init__(18, "Invalid request", details=details)


class BlockNotFoundError(AppError):
    def __init__(self, context: str | None = None) -> None:
        details = {"context": context} if context is not None else None
        super().__init__(19, "Block not found", details=details)


class TransactionNotFoundError(AppError):
    def __init__(self, tx_hash: str) -> None:
        super().__init__(20, "Transaction not found", details={"hash": tx_hash})


# Every error the service can return, in code order (for /network/options)
ALL_ERRORS: list[AppError] = [
    UnimplementedError(),
    UnavailableOfflineError(),
    ChainError(),
    UnsupportedCurveTypeError(),
    PublicKeyNilError(),
    NoOperationsError(),
    UnclearIntentError(),
    InvalidCurrencyAmountError(),
    UnsupportedCurrencyError(),
    InvalidAddressError(),
    InvalidOptionsError([]),
    InvalidMetadataError([]),
    InvalidTxError(),
    MissingPublicKeyError(0, 0),
    MissingSignatureError(0, 0),
    InvalidPublicKeyError(),
    InvalidSignatureError(),
    InvalidNetworkError(),
    InvalidRequestError(),
    BlockNotFoundError(),
    TransactionNotFoundError(""),
]

from __future__ import annotations

from typing import Any


class ProteusError(Exception):
    pass


class ConfigError(ProteusError):
    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(message)


class RemoteReadError(ProteusError):
    """A view call against the ledger failed (transport error, missing contract, bad output)."""

    def __init__(self, target: str, call: str, cause: Exception | None = None):
        self.target = target
        self.call = call
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Remote read {call}() on {target} failed{detail}")


class RemoteWriteError(ProteusError):
    """A state-changing call was rejected, failed to broadcast, or reverted."""

    def __init__(
        self,
        target: str,
        call: str,
        cause: Exception | None = None,
        message: str | None = None,
    ):
        self.target = target
        self.call = call
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(message or f"Remote write {call}() on {target} failed{detail}")


class TransactionRevertedError(RemoteWriteError):
    def __init__(
        self,
        txn_hash: str,
        receipt: dict[str, Any] | None = None,
        message: str | None = None,
        *,
        target: str = "unknown",
        call: str = "unknown",
    ):
        self.txn_hash = txn_hash
        self.receipt = receipt or {}
        super().__init__(
            target,
            call,
            message=message or f"Transaction reverted: {txn_hash}",
        )


class InsufficientBalanceError(ProteusError):
    """Locally detected precondition: a balance does not cover a quoted cost.

    The roll pipeline never raises this; it records it as the reason a stage
    was skipped.
    """

    def __init__(self, symbol: str, required: int, available: int):
        self.symbol = symbol
        self.required = required
        self.available = available
        super().__init__(
            f"insufficient {symbol}: required {required}, available {available}"
        )

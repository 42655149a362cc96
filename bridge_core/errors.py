"""Error taxonomy shared by every bridge component."""

from typing import Optional


class BridgeError(RuntimeError):
    """Base class for failures surfaced by the bridge client."""


class PreconditionFailedError(BridgeError):
    """Raised when an operation requires a deployed account that does not exist."""


class AccountNotDeployedError(PreconditionFailedError):
    """Raised when the ledger reports that a contract is not deployed."""

    def __init__(self, address: Optional[str] = None, message: Optional[str] = None) -> None:
        self.address = address
        if message is None:
            message = (
                f"No deployed account for {address}." if address else "Contract not deployed."
            )
        super().__init__(message)


class BlockNotFoundError(PreconditionFailedError):
    """Raised when the requested block is unknown to the ledger."""


class TransportError(BridgeError):
    """Raised when the RPC endpoint is unreachable or fails the request."""


class ProtocolError(TransportError):
    """Raised when the RPC endpoint answers with a malformed or unexpected reply."""


class RevertedError(BridgeError):
    """Raised when execution or invocation failed on-chain."""

    def __init__(self, reason: Optional[str] = None) -> None:
        self.reason = reason
        super().__init__(f"Execution reverted: {reason}" if reason else "Execution reverted.")


class TransactionNotFoundError(BridgeError):
    """Raised when the ledger does not (yet) know a transaction hash."""


class ConfirmationTimeoutError(BridgeError):
    """Raised when receipt polling exceeds its bound.

    The transaction's fate is unknown: it may still be included later.
    """

    def __init__(self, transaction_hash: str, last_state: str) -> None:
        self.transaction_hash = transaction_hash
        self.last_state = last_state
        super().__init__(
            f"Timed out waiting for {transaction_hash}; last observed state {last_state}."
        )


class StateTransitionError(BridgeError):
    """Raised when the confirmation state machine receives an illegal move."""


class ConfigurationError(ValueError):
    """Raised when the system configuration is incomplete or invalid."""


class InvalidAddressError(ValueError):
    """Raised when a value cannot be interpreted as an Ethereum address."""


class InvalidBlockReferenceError(ValueError):
    """Raised when a block reference cannot be parsed or translated."""


class FeltRangeError(ValueError):
    """Raised when a value does not fit the ledger's field."""


class TransactionDecodeError(ValueError):
    """Raised when a raw signed transaction cannot be decoded."""

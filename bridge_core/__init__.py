from .blocks import BlockReference, BlockTag
from .config import BridgeSettings, EntrypointSelectors, Network, SystemConfiguration
from .errors import (
    AccountNotDeployedError,
    BlockNotFoundError,
    BridgeError,
    ConfigurationError,
    ConfirmationTimeoutError,
    FeltRangeError,
    InvalidAddressError,
    InvalidBlockReferenceError,
    PreconditionFailedError,
    ProtocolError,
    RevertedError,
    StateTransitionError,
    TransactionDecodeError,
    TransactionNotFoundError,
    TransportError,
)
from .models import (
    Deployed,
    NotDeployed,
    Receipt,
    ReceiptStatus,
    ResolutionResult,
    SubmittedTransactionHandle,
    normalize_address,
)

__all__ = [
    "AccountNotDeployedError",
    "BlockNotFoundError",
    "BlockReference",
    "BlockTag",
    "BridgeError",
    "BridgeSettings",
    "ConfigurationError",
    "ConfirmationTimeoutError",
    "Deployed",
    "EntrypointSelectors",
    "FeltRangeError",
    "InvalidAddressError",
    "InvalidBlockReferenceError",
    "Network",
    "NotDeployed",
    "PreconditionFailedError",
    "ProtocolError",
    "Receipt",
    "ReceiptStatus",
    "ResolutionResult",
    "RevertedError",
    "StateTransitionError",
    "SubmittedTransactionHandle",
    "SystemConfiguration",
    "TransactionDecodeError",
    "TransactionNotFoundError",
    "TransportError",
    "normalize_address",
]

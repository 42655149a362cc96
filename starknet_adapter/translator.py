"""Normalize StarkNet failures into the bridge error taxonomy."""

import logging
from typing import Any, Optional

from bridge_core.errors import (
    AccountNotDeployedError,
    BlockNotFoundError,
    BridgeError,
    ProtocolError,
    RevertedError,
    TransactionNotFoundError,
)

from .provider import StarknetRpcError

logger = logging.getLogger(__name__)

CONTRACT_NOT_FOUND = 20
BLOCK_NOT_FOUND = 24
INVALID_TXN_HASH = 25
TXN_HASH_NOT_FOUND = 29

_REVERT_CODES = frozenset(
    {
        1,  # FAILED_TO_RECEIVE_TXN
        21,  # INVALID_MESSAGE_SELECTOR
        22,  # INVALID_CALL_DATA
        40,  # CONTRACT_ERROR
        41,  # TRANSACTION_EXECUTION_ERROR
        52,  # INVALID_TRANSACTION_NONCE
        55,  # VALIDATION_FAILURE
    }
)


class ErrorTranslator:
    """Single mapping from ledger failures to bridge errors.

    Every component routes failures through ``translate`` so that the
    "not deployed" condition is recognized the same way everywhere.
    """

    def translate(
        self, exc: StarknetRpcError, operation: str, subject: Optional[str] = None
    ) -> BridgeError:
        if exc.code == CONTRACT_NOT_FOUND:
            return AccountNotDeployedError(subject)
        if exc.code == BLOCK_NOT_FOUND:
            return BlockNotFoundError(f"{operation}: block not found.")
        if exc.code == INVALID_TXN_HASH:
            return ProtocolError(f"{operation}: malformed transaction hash {subject}.")
        if exc.code == TXN_HASH_NOT_FOUND:
            return TransactionNotFoundError(f"{operation}: transaction {subject} not found.")
        if exc.code in _REVERT_CODES:
            reason = revert_reason(exc.data) or exc.message or None
            logger.warning(f"{operation} reverted (code {exc.code}): {reason}")
            return RevertedError(reason)
        logger.warning(f"{operation}: RPC error {exc.code} {exc.message}")
        return ProtocolError(f"{operation} failed with RPC error {exc.code}: {exc.message}")


def revert_reason(data: Any) -> Optional[str]:
    """Extract the most specific reason a ledger error or receipt carries."""

    if data is None:
        return None
    if isinstance(data, str):
        return data or None
    if isinstance(data, dict):
        for key in ("revert_error", "revert_reason", "execution_error", "message"):
            value = data.get(key)
            if value:
                return value if isinstance(value, str) else str(value)
    return str(data)

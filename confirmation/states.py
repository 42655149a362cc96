"""Confirmation states and receipt observations."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from bridge_core.errors import FeltRangeError, ProtocolError
from bridge_core.felt import to_felt
from starknet_adapter.translator import revert_reason


class ConfirmationState(Enum):
    SUBMITTED = "SUBMITTED"
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    TIMED_OUT = "TIMED_OUT"

    @property
    def terminal(self) -> bool:
        return self in (
            ConfirmationState.ACCEPTED,
            ConfirmationState.REJECTED,
            ConfirmationState.TIMED_OUT,
        )


_ACCEPTED_STATUSES = frozenset({"ACCEPTED_ON_L2", "ACCEPTED_ON_L1"})


@dataclass(frozen=True)
class ReceiptObservation:
    """What one poll of the ledger revealed about a transaction."""

    state: ConfirmationState
    block_hash: Optional[int] = None
    block_number: Optional[int] = None
    revert_reason: Optional[str] = None
    actual_fee: Optional[int] = None

    @classmethod
    def not_found(cls) -> "ReceiptObservation":
        return cls(state=ConfirmationState.SUBMITTED)

    @classmethod
    def from_receipt(cls, receipt: Dict[str, Any]) -> "ReceiptObservation":
        """Classify a ``starknet_getTransactionReceipt`` reply.

        Handles both the single ``status`` field of older nodes and the
        ``finality_status``/``execution_status`` pair of newer ones.
        """

        status = receipt.get("finality_status") or receipt.get("status")
        execution_status = receipt.get("execution_status")
        block_hash = _optional_int(receipt.get("block_hash"))
        block_number = _optional_int(receipt.get("block_number"))
        fee = _fee(receipt.get("actual_fee"))

        if execution_status == "REVERTED" or status in ("REJECTED", "REVERTED"):
            reason = receipt.get("revert_reason") or revert_reason(receipt.get("status_data"))
            return cls(
                state=ConfirmationState.REJECTED,
                block_hash=block_hash,
                block_number=block_number,
                revert_reason=reason,
                actual_fee=fee,
            )
        if status in _ACCEPTED_STATUSES and block_hash is not None:
            return cls(
                state=ConfirmationState.ACCEPTED,
                block_hash=block_hash,
                block_number=block_number,
                actual_fee=fee,
            )
        return cls(state=ConfirmationState.PENDING)


def _optional_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return to_felt(value)
    except FeltRangeError as exc:
        raise ProtocolError(f"Malformed receipt field: {value!r}") from exc


def _fee(value: Any) -> Optional[int]:
    # Newer nodes report {"amount": ..., "unit": ...}.
    if isinstance(value, dict):
        value = value.get("amount")
    return _optional_int(value)

"""Domain models shared by the bridge components."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Union

from eth_utils import is_hex_address, to_checksum_address

from .errors import InvalidAddressError, RevertedError
from .felt import Felt, to_hex

_ADDRESS_BOUND = 2**160

AddressLike = Union[str, bytes, int]


def normalize_address(value: AddressLike) -> str:
    """Return the EIP-55 checksum form of an Ethereum address."""

    if isinstance(value, bool):
        raise InvalidAddressError(f"Not an Ethereum address: {value!r}")
    if isinstance(value, int):
        if not 0 <= value < _ADDRESS_BOUND:
            raise InvalidAddressError(f"Value {value} does not fit in 20 bytes.")
        return to_checksum_address(value.to_bytes(20, "big"))
    if isinstance(value, (bytes, bytearray)):
        if len(value) != 20:
            raise InvalidAddressError(f"Expected 20 address bytes, got {len(value)}.")
        return to_checksum_address(bytes(value))
    if isinstance(value, str) and is_hex_address(value):
        return to_checksum_address(value)
    raise InvalidAddressError(f"Not an Ethereum address: {value!r}")


def address_to_felt(value: AddressLike) -> Felt:
    return int(normalize_address(value), 16)


def felt_to_address(value: Felt) -> str:
    if not 0 <= value < _ADDRESS_BOUND:
        raise InvalidAddressError(f"Felt {value} is not a 20-byte address.")
    return normalize_address(value)


@dataclass(frozen=True)
class Deployed:
    starknet_address: Felt

    @property
    def is_deployed(self) -> bool:
        return True


@dataclass(frozen=True)
class NotDeployed:
    @property
    def is_deployed(self) -> bool:
        return False


ResolutionResult = Union[Deployed, NotDeployed]


@dataclass(frozen=True)
class SubmittedTransactionHandle:
    """Opaque identifier of a submitted invocation."""

    transaction_hash: Felt
    sender: str
    starknet_sender: Felt

    @property
    def hex_hash(self) -> str:
        return to_hex(self.transaction_hash)


class ReceiptStatus(Enum):
    SUCCEEDED = "SUCCEEDED"
    REVERTED = "REVERTED"


@dataclass(frozen=True)
class Receipt:
    transaction_hash: Felt
    status: ReceiptStatus
    block_hash: Optional[Felt] = None
    block_number: Optional[int] = None
    revert_reason: Optional[str] = None
    actual_fee: Optional[int] = None

    @property
    def succeeded(self) -> bool:
        return self.status == ReceiptStatus.SUCCEEDED

    def raise_for_status(self) -> "Receipt":
        if not self.succeeded:
            raise RevertedError(self.revert_reason)
        return self

    def to_dict(self) -> Dict[str, object]:
        return {
            "transactionHash": to_hex(self.transaction_hash),
            "status": "0x1" if self.succeeded else "0x0",
            "blockHash": to_hex(self.block_hash) if self.block_hash is not None else None,
            "blockNumber": hex(self.block_number) if self.block_number is not None else None,
            "revertReason": self.revert_reason,
            "actualFee": hex(self.actual_fee) if self.actual_fee is not None else None,
        }

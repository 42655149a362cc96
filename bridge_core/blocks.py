"""Ethereum block references and their StarkNet block identifiers.

The emulated chain produces exactly one EVM block per StarkNet block, so
block numbers map one-to-one. Tags without a StarkNet counterpart
(``safe``, ``finalized``) resolve to ``latest``; ``earliest`` is block zero.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Union

from .errors import FeltRangeError, InvalidBlockReferenceError
from .felt import to_felt, to_hex


class BlockTag(Enum):
    LATEST = "latest"
    PENDING = "pending"
    EARLIEST = "earliest"
    SAFE = "safe"
    FINALIZED = "finalized"


StarknetBlockId = Union[str, Dict[str, Union[int, str]]]


@dataclass(frozen=True)
class BlockReference:
    tag: Optional[BlockTag] = None
    number: Optional[int] = None
    block_hash: Optional[int] = None

    def __post_init__(self) -> None:
        given = [value for value in (self.tag, self.number, self.block_hash) if value is not None]
        if len(given) != 1:
            raise InvalidBlockReferenceError(
                "A block reference needs exactly one of tag, number or hash."
            )
        if self.number is not None and self.number < 0:
            raise InvalidBlockReferenceError("Block number must be non-negative.")
        if self.block_hash is not None and not 0 <= self.block_hash < 2**256:
            raise InvalidBlockReferenceError("Block hash must fit in 32 bytes.")

    @classmethod
    def latest(cls) -> "BlockReference":
        return cls(tag=BlockTag.LATEST)

    @classmethod
    def pending(cls) -> "BlockReference":
        return cls(tag=BlockTag.PENDING)

    @classmethod
    def parse(cls, value: "BlockLike") -> "BlockReference":
        """Accept a reference, tag name, number, hex number, block hash or dict."""

        if value is None:
            return cls.latest()
        if isinstance(value, BlockReference):
            return value
        if isinstance(value, BlockTag):
            return cls(tag=value)
        if isinstance(value, bool):
            raise InvalidBlockReferenceError(f"Unsupported block reference: {value!r}")
        if isinstance(value, int):
            return cls(number=value)
        if isinstance(value, dict):
            return _parse_dict(value)
        if isinstance(value, str):
            return _parse_string(value)
        raise InvalidBlockReferenceError(f"Unsupported block reference: {value!r}")

    def to_starknet(self) -> StarknetBlockId:
        if self.tag is not None:
            if self.tag == BlockTag.PENDING:
                return "pending"
            if self.tag == BlockTag.EARLIEST:
                return {"block_number": 0}
            return "latest"
        if self.number is not None:
            return {"block_number": self.number}
        try:
            return {"block_hash": to_hex(to_felt(self.block_hash))}
        except FeltRangeError as exc:
            raise InvalidBlockReferenceError(
                f"Block hash {hex(self.block_hash)} is outside the StarkNet field."
            ) from exc


BlockLike = Union[BlockReference, BlockTag, int, str, Dict[str, object], None]


def _parse_string(value: str) -> BlockReference:
    text = value.strip().lower()
    for tag in BlockTag:
        if tag.value == text:
            return BlockReference(tag=tag)
    if not text.startswith("0x"):
        if text.isdigit():
            return BlockReference(number=int(text))
        raise InvalidBlockReferenceError(f"Unsupported block reference: {value!r}")
    try:
        parsed = int(text, 16)
    except ValueError as exc:
        raise InvalidBlockReferenceError(f"Unsupported block reference: {value!r}") from exc
    # 32-byte hex strings are hashes, anything shorter is a number.
    if len(text) == 66:
        return BlockReference(block_hash=parsed)
    return BlockReference(number=parsed)


def _parse_dict(value: Dict[str, object]) -> BlockReference:
    if "blockHash" in value:
        raw = value["blockHash"]
        if not isinstance(raw, str):
            raise InvalidBlockReferenceError("blockHash must be a hex string.")
        try:
            return BlockReference(block_hash=int(raw, 16))
        except ValueError as exc:
            raise InvalidBlockReferenceError(f"Invalid block hash: {raw!r}") from exc
    if "blockNumber" in value:
        reference = BlockReference.parse(value["blockNumber"])  # type: ignore[arg-type]
        if reference.block_hash is not None:
            raise InvalidBlockReferenceError("blockNumber must not be a hash.")
        return reference
    raise InvalidBlockReferenceError(f"Unsupported block reference: {value!r}")

"""Conversions between Ethereum values and StarkNet field elements."""

from typing import Iterable, List, Sequence, Tuple, Union

from eth_utils import keccak

from .errors import FeltRangeError, ProtocolError

FIELD_PRIME = 2**251 + 17 * 2**192 + 1

_MASK_250 = 2**250 - 1
_UINT128 = 2**128
_UINT256 = 2**256

Felt = int


def to_felt(value: Union[int, str]) -> Felt:
    """Parse an int or hex string and check that it lies in the field."""

    if isinstance(value, str):
        try:
            value = int(value, 16) if value.lower().startswith("0x") else int(value)
        except ValueError as exc:
            raise FeltRangeError(f"Not a field element: {value!r}") from exc
    if isinstance(value, bool) or not isinstance(value, int):
        raise FeltRangeError(f"Not a field element: {value!r}")
    if value < 0 or value >= FIELD_PRIME:
        raise FeltRangeError(f"Value {value} is outside the field.")
    return value


def to_hex(value: Felt) -> str:
    return hex(to_felt(value))


def get_selector_from_name(name: str) -> Felt:
    """StarkNet keccak of an entrypoint name: keccak-256 masked to 250 bits."""

    return int.from_bytes(keccak(text=name), "big") & _MASK_250


def split_uint256(value: int) -> Tuple[Felt, Felt]:
    if value < 0 or value >= _UINT256:
        raise FeltRangeError(f"Value {value} does not fit in 256 bits.")
    return value % _UINT128, value // _UINT128


def join_uint256(low: Felt, high: Felt) -> int:
    if not 0 <= low < _UINT128 or not 0 <= high < _UINT128:
        raise ProtocolError(f"Malformed Uint256 limbs: low={low} high={high}.")
    return low + high * _UINT128


def bytes_to_felts(data: bytes) -> List[Felt]:
    """One byte per felt, the layout the emulation contracts expect."""

    return list(bytearray(data))


def felts_to_bytes(felts: Iterable[Felt]) -> bytes:
    values = list(felts)
    for value in values:
        if not 0 <= value < 256:
            raise ProtocolError(f"Expected a byte-sized felt, got {value}.")
    return bytes(values)


def decode_length_prefixed_bytes(felts: Sequence[Felt]) -> bytes:
    """Decode ``[len, b0, b1, ...]`` into ``len`` bytes."""

    if not felts:
        raise ProtocolError("Expected a length-prefixed byte array, got an empty reply.")
    length = felts[0]
    body = felts[1:]
    if length != len(body):
        raise ProtocolError(
            f"Byte array length prefix {length} does not match payload size {len(body)}."
        )
    return felts_to_bytes(body)

"""Decoded Ethereum transaction model."""

from dataclasses import dataclass
from typing import Optional, Tuple

from bridge_core.felt import Felt, split_uint256


@dataclass(frozen=True)
class DecodedTransaction:
    """Fields of a signed Ethereum transaction, sender already recovered."""

    tx_type: int
    sender: str
    nonce: int
    to: Optional[str]
    value: int
    data: bytes
    gas_limit: int
    gas_price: int
    chain_id: Optional[int]
    v: int
    r: int
    s: int
    raw: bytes

    @property
    def is_contract_creation(self) -> bool:
        return self.to is None

    def signature_felts(self) -> Tuple[Felt, ...]:
        """Signature as ``(r_low, r_high, s_low, s_high, v)`` field elements."""

        r_low, r_high = split_uint256(self.r)
        s_low, s_high = split_uint256(self.s)
        return (r_low, r_high, s_low, s_high, self.v)

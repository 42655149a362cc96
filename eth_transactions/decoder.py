"""Decode raw signed Ethereum transactions and recover their sender.

Supports legacy (optionally EIP-155), EIP-2930 (``0x01``) and EIP-1559
(``0x02``) envelopes. Signature recovery is delegated to ``eth-account``.
"""

from typing import List, Optional, Union

import rlp
from eth_account import Account
from rlp.exceptions import RLPException

from bridge_core.errors import TransactionDecodeError
from bridge_core.models import normalize_address

from .models import DecodedTransaction

LEGACY_TX_TYPE = 0
ACCESS_LIST_TX_TYPE = 1
DYNAMIC_FEE_TX_TYPE = 2

RawSignedTransaction = Union[bytes, str]


def decode_transaction(raw: RawSignedTransaction) -> DecodedTransaction:
    payload = _as_bytes(raw)
    if not payload:
        raise TransactionDecodeError("Empty transaction payload.")

    first = payload[0]
    if first >= 0xC0:
        tx_type = LEGACY_TX_TYPE
        body = payload
    elif first in (ACCESS_LIST_TX_TYPE, DYNAMIC_FEE_TX_TYPE):
        tx_type = first
        body = payload[1:]
    else:
        raise TransactionDecodeError(f"Unsupported transaction type 0x{first:02x}.")

    try:
        items = rlp.decode(body)
    except RLPException as exc:
        raise TransactionDecodeError("Transaction is not valid RLP.") from exc
    if not isinstance(items, list):
        raise TransactionDecodeError("Transaction RLP must be a list.")

    if tx_type == LEGACY_TX_TYPE:
        fields = _legacy_fields(items)
    elif tx_type == ACCESS_LIST_TX_TYPE:
        fields = _access_list_fields(items)
    else:
        fields = _dynamic_fee_fields(items)

    return DecodedTransaction(
        tx_type=tx_type,
        sender=recover_sender(payload),
        raw=payload,
        **fields,
    )


def recover_sender(raw: RawSignedTransaction) -> str:
    try:
        sender = Account.recover_transaction(_as_bytes(raw))
    except Exception as exc:
        raise TransactionDecodeError(f"Cannot recover transaction sender: {exc}") from exc
    return normalize_address(sender)


def _legacy_fields(items: List[object]) -> dict:
    _expect_length(items, 9, "legacy")
    nonce, gas_price, gas, to, value, data, v, r, s = items
    v_int = _int(v, "v")
    chain_id: Optional[int] = None
    if v_int >= 35:
        chain_id = (v_int - 35) // 2
    return {
        "nonce": _int(nonce, "nonce"),
        "gas_price": _int(gas_price, "gasPrice"),
        "gas_limit": _int(gas, "gas"),
        "to": _address(to),
        "value": _int(value, "value"),
        "data": _bytes(data, "data"),
        "chain_id": chain_id,
        "v": v_int,
        "r": _int(r, "r"),
        "s": _int(s, "s"),
    }


def _access_list_fields(items: List[object]) -> dict:
    _expect_length(items, 11, "EIP-2930")
    chain_id, nonce, gas_price, gas, to, value, data, _, y_parity, r, s = items
    return {
        "nonce": _int(nonce, "nonce"),
        "gas_price": _int(gas_price, "gasPrice"),
        "gas_limit": _int(gas, "gas"),
        "to": _address(to),
        "value": _int(value, "value"),
        "data": _bytes(data, "data"),
        "chain_id": _int(chain_id, "chainId"),
        "v": _int(y_parity, "yParity"),
        "r": _int(r, "r"),
        "s": _int(s, "s"),
    }


def _dynamic_fee_fields(items: List[object]) -> dict:
    _expect_length(items, 12, "EIP-1559")
    chain_id, nonce, _, max_fee, gas, to, value, data, _, y_parity, r, s = items
    return {
        "nonce": _int(nonce, "nonce"),
        "gas_price": _int(max_fee, "maxFeePerGas"),
        "gas_limit": _int(gas, "gas"),
        "to": _address(to),
        "value": _int(value, "value"),
        "data": _bytes(data, "data"),
        "chain_id": _int(chain_id, "chainId"),
        "v": _int(y_parity, "yParity"),
        "r": _int(r, "r"),
        "s": _int(s, "s"),
    }


def _expect_length(items: List[object], expected: int, kind: str) -> None:
    if len(items) != expected:
        raise TransactionDecodeError(
            f"{kind} transaction has {len(items)} fields, expected {expected}."
        )


def _bytes(value: object, name: str) -> bytes:
    if not isinstance(value, bytes):
        raise TransactionDecodeError(f"Field {name} must be a byte string.")
    return value


def _int(value: object, name: str) -> int:
    return int.from_bytes(_bytes(value, name), "big")


def _address(value: object) -> Optional[str]:
    raw = _bytes(value, "to")
    if not raw:
        return None
    if len(raw) != 20:
        raise TransactionDecodeError(f"Destination must be 20 bytes, got {len(raw)}.")
    return normalize_address(raw)


def _as_bytes(raw: RawSignedTransaction) -> bytes:
    if isinstance(raw, (bytes, bytearray)):
        return bytes(raw)
    if isinstance(raw, str):
        text = raw[2:] if raw.startswith(("0x", "0X")) else raw
        try:
            return bytes.fromhex(text)
        except ValueError as exc:
            raise TransactionDecodeError("Raw transaction is not valid hex.") from exc
    raise TransactionDecodeError(f"Unsupported raw transaction type {type(raw).__name__}.")

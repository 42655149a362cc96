"""StarkNet JSON-RPC provider used by every adapter component."""

import asyncio
import itertools
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence

import aiohttp

from bridge_core.blocks import StarknetBlockId
from bridge_core.errors import ProtocolError, TransportError
from bridge_core.felt import Felt, to_felt, to_hex

logger = logging.getLogger(__name__)


class StarknetRpcError(Exception):
    """A JSON-RPC error object returned by the StarkNet node."""

    def __init__(self, code: int, message: str, data: Any = None) -> None:
        self.code = code
        self.message = message
        self.data = data
        super().__init__(f"StarkNet RPC error {code}: {message}")


@dataclass(frozen=True)
class InvokeTransaction:
    sender_address: Felt
    calldata: Sequence[Felt]
    signature: Sequence[Felt]
    nonce: int
    max_fee: int
    version: int = 1

    def to_rpc(self) -> Dict[str, object]:
        return {
            "type": "INVOKE",
            "sender_address": to_hex(self.sender_address),
            "calldata": [hex(value) for value in self.calldata],
            "max_fee": hex(self.max_fee),
            "version": hex(self.version),
            "signature": [hex(value) for value in self.signature],
            "nonce": hex(self.nonce),
        }


class StarknetProvider(Protocol):
    async def call(
        self,
        contract_address: Felt,
        entry_point_selector: Felt,
        calldata: Sequence[Felt],
        block_id: StarknetBlockId,
    ) -> List[Felt]:
        ...

    async def get_nonce(self, contract_address: Felt, block_id: StarknetBlockId) -> int:
        ...

    async def add_invoke_transaction(self, transaction: InvokeTransaction) -> Felt:
        ...

    async def get_transaction_receipt(self, transaction_hash: Felt) -> Dict[str, Any]:
        ...

    async def block_number(self) -> int:
        ...

    async def chain_id(self) -> int:
        ...


class JsonRpcProvider:
    """aiohttp-backed StarkNet JSON-RPC client.

    The session is opened lazily and shared by concurrent requests; call
    ``close`` (or use ``async with``) to release it.
    """

    def __init__(
        self,
        endpoint: str,
        request_timeout: float = 30.0,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self._endpoint = endpoint
        self._timeout = aiohttp.ClientTimeout(total=request_timeout)
        self._session = session
        self._owns_session = session is None
        self._ids = itertools.count(1)

    @property
    def endpoint(self) -> str:
        return self._endpoint

    async def __aenter__(self) -> "JsonRpcProvider":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    async def call(
        self,
        contract_address: Felt,
        entry_point_selector: Felt,
        calldata: Sequence[Felt],
        block_id: StarknetBlockId,
    ) -> List[Felt]:
        result = await self.request(
            "starknet_call",
            {
                "request": {
                    "contract_address": to_hex(contract_address),
                    "entry_point_selector": to_hex(entry_point_selector),
                    "calldata": [hex(value) for value in calldata],
                },
                "block_id": block_id,
            },
        )
        if not isinstance(result, list):
            raise ProtocolError(f"starknet_call returned {type(result).__name__}, expected a list.")
        return [_parse_felt(value) for value in result]

    async def get_nonce(self, contract_address: Felt, block_id: StarknetBlockId) -> int:
        result = await self.request(
            "starknet_getNonce",
            {"block_id": block_id, "contract_address": to_hex(contract_address)},
        )
        return _parse_felt(result)

    async def add_invoke_transaction(self, transaction: InvokeTransaction) -> Felt:
        result = await self.request(
            "starknet_addInvokeTransaction",
            {"invoke_transaction": transaction.to_rpc()},
        )
        if not isinstance(result, dict) or "transaction_hash" not in result:
            raise ProtocolError("starknet_addInvokeTransaction reply lacks a transaction hash.")
        return _parse_felt(result["transaction_hash"])

    async def get_transaction_receipt(self, transaction_hash: Felt) -> Dict[str, Any]:
        result = await self.request(
            "starknet_getTransactionReceipt",
            {"transaction_hash": to_hex(transaction_hash)},
        )
        if not isinstance(result, dict):
            raise ProtocolError("starknet_getTransactionReceipt reply is not an object.")
        return result

    async def block_number(self) -> int:
        return _parse_felt(await self.request("starknet_blockNumber", []))

    async def chain_id(self) -> int:
        return _parse_felt(await self.request("starknet_chainId", []))

    async def request(self, method: str, params: object) -> Any:
        """Send one JSON-RPC request and return its ``result`` member."""

        request_id = next(self._ids)
        payload = {"jsonrpc": "2.0", "id": request_id, "method": method, "params": params}
        logger.debug(f"-> {method} #{request_id}")
        session = self._get_session()
        try:
            async with session.post(self._endpoint, json=payload) as response:
                if response.status >= 400:
                    body = await response.text()
                    raise TransportError(
                        f"{method} failed with HTTP {response.status}: {body[:200]}"
                    )
                try:
                    reply = await response.json(content_type=None)
                except ValueError as exc:
                    raise ProtocolError(f"{method} returned a non-JSON body.") from exc
        except aiohttp.ClientError as exc:
            raise TransportError(f"{method} could not reach {self._endpoint}: {exc}") from exc
        except asyncio.TimeoutError as exc:
            raise TransportError(f"{method} timed out against {self._endpoint}.") from exc

        if not isinstance(reply, dict):
            raise ProtocolError(f"{method} returned a malformed JSON-RPC envelope.")
        error = reply.get("error")
        if error is not None:
            if not isinstance(error, dict) or "code" not in error:
                raise ProtocolError(f"{method} returned a malformed error object.")
            logger.debug(f"<- {method} #{request_id} error {error.get('code')}")
            raise StarknetRpcError(
                int(error["code"]), str(error.get("message", "")), error.get("data")
            )
        if "result" not in reply:
            raise ProtocolError(f"{method} reply has neither result nor error.")
        logger.debug(f"<- {method} #{request_id}")
        return reply["result"]

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session


def _parse_felt(value: object) -> Felt:
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ProtocolError(f"Expected a field element, got {value!r}.")
    try:
        return to_felt(value)
    except ValueError as exc:
        raise ProtocolError(f"Expected a field element, got {value!r}.") from exc

"""Answer Ethereum state queries from StarkNet contract state.

Accounts without a deployed contract read as zero (empty code), the way
Ethereum tooling expects. Any other failure is raised, including a missing
fee token.
"""

import logging
from typing import Awaitable, Callable, Optional, TypeVar

from bridge_core.blocks import BlockLike, BlockReference
from bridge_core.config import SystemConfiguration
from bridge_core.errors import AccountNotDeployedError, ProtocolError
from bridge_core.felt import (
    Felt,
    decode_length_prefixed_bytes,
    join_uint256,
    split_uint256,
    to_hex,
)
from bridge_core.models import AddressLike, Deployed, normalize_address

from .provider import StarknetProvider, StarknetRpcError
from .resolver import AddressResolver
from .translator import ErrorTranslator

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StateReader:
    def __init__(
        self,
        provider: StarknetProvider,
        config: SystemConfiguration,
        resolver: Optional[AddressResolver] = None,
        translator: Optional[ErrorTranslator] = None,
    ) -> None:
        self._provider = provider
        self._config = config
        self._translator = translator or ErrorTranslator()
        self._resolver = resolver or AddressResolver(provider, config, self._translator)

    async def nonce(self, address: AddressLike, block: BlockLike = None) -> int:
        async def read(starknet_address: Felt, block_id) -> int:
            return await self._provider.get_nonce(starknet_address, block_id)

        return await self._read("nonce", address, block, read, 0)

    async def balance(self, address: AddressLike, block: BlockLike = None) -> int:
        selector = self._config.entrypoints.selector("balance_of")
        fee_token = self._config.fee_token_address

        async def read(starknet_address: Felt, block_id) -> int:
            try:
                result = await self._provider.call(
                    fee_token, selector, [starknet_address], block_id
                )
            except StarknetRpcError as exc:
                error = self._translator.translate(exc, "balance", to_hex(fee_token))
                if isinstance(error, AccountNotDeployedError):
                    raise ProtocolError(f"Fee token {to_hex(fee_token)} is not deployed.") from exc
                raise error from exc
            return _decode_uint256(result, "balanceOf")

        return await self._read("balance", address, block, read, 0)

    async def get_code(self, address: AddressLike, block: BlockLike = None) -> bytes:
        selector = self._config.entrypoints.selector("bytecode")

        async def read(starknet_address: Felt, block_id) -> bytes:
            result = await self._provider.call(starknet_address, selector, [], block_id)
            return decode_length_prefixed_bytes(result)

        return await self._read("get_code", address, block, read, b"")

    async def storage_at(self, address: AddressLike, slot: int, block: BlockLike = None) -> int:
        selector = self._config.entrypoints.selector("storage")
        key_low, key_high = split_uint256(slot)

        async def read(starknet_address: Felt, block_id) -> int:
            result = await self._provider.call(
                starknet_address, selector, [key_low, key_high], block_id
            )
            return _decode_uint256(result, "storage")

        return await self._read("storage_at", address, block, read, 0)

    async def _read(
        self,
        operation: str,
        address: AddressLike,
        block: BlockLike,
        read: Callable[[Felt, object], Awaitable[T]],
        empty: T,
    ) -> T:
        checksum = normalize_address(address)
        block_id = BlockReference.parse(block).to_starknet()
        resolution = await self._resolver.resolve_at(checksum, block_id)
        if not isinstance(resolution, Deployed):
            return empty
        try:
            return await read(resolution.starknet_address, block_id)
        except StarknetRpcError as exc:
            error = self._translator.translate(exc, operation, checksum)
            if isinstance(error, AccountNotDeployedError):
                logger.debug(f"{operation}: {checksum} registered but not deployed at {block_id}")
                return empty
            raise error from exc


def _decode_uint256(result, entrypoint: str) -> int:
    if len(result) != 2:
        raise ProtocolError(f"{entrypoint} returned {len(result)} values, expected a Uint256.")
    return join_uint256(result[0], result[1])

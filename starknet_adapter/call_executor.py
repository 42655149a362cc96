"""Read-only EVM execution against a historical StarkNet state."""

import logging
from typing import Optional, Union

from bridge_core.blocks import BlockLike, BlockReference
from bridge_core.config import SystemConfiguration
from bridge_core.errors import AccountNotDeployedError, PreconditionFailedError, ProtocolError
from bridge_core.felt import bytes_to_felts, decode_length_prefixed_bytes, to_hex
from bridge_core.models import AddressLike, Deployed, normalize_address

from .provider import StarknetProvider, StarknetRpcError
from .resolver import AddressResolver
from .translator import ErrorTranslator

logger = logging.getLogger(__name__)

DEFAULT_CALL_GAS_LIMIT = 2**64 - 1


class CallExecutor:
    """Simulates an ``eth_call``.

    Unlike state reads, a call against an undeployed address fails with
    ``PreconditionFailedError``: there is no code to run.
    """

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
        self._selector = config.entrypoints.selector("execute")

    async def call(
        self,
        address: AddressLike,
        calldata: Union[bytes, str],
        block: BlockLike = None,
        value: int = 0,
        gas_limit: int = DEFAULT_CALL_GAS_LIMIT,
        gas_price: int = 0,
    ) -> bytes:
        checksum = normalize_address(address)
        data = _as_bytes(calldata)
        block_id = BlockReference.parse(block).to_starknet()

        resolution = await self._resolver.resolve_at(checksum, block_id)
        if not isinstance(resolution, Deployed):
            raise PreconditionFailedError(f"Cannot execute call: {checksum} is not deployed.")

        arguments = [
            resolution.starknet_address,
            gas_limit,
            gas_price,
            value,
            len(data),
            *bytes_to_felts(data),
        ]
        logger.debug(f"call {checksum} with {len(data)} bytes at {block_id}")
        try:
            result = await self._provider.call(
                self._config.kakarot_address, self._selector, arguments, block_id
            )
        except StarknetRpcError as exc:
            error = self._translator.translate(exc, "call", checksum)
            if isinstance(error, AccountNotDeployedError):
                kakarot = to_hex(self._config.kakarot_address)
                raise ProtocolError(f"Core contract {kakarot} is not deployed.") from exc
            raise error from exc
        return decode_length_prefixed_bytes(result)


def _as_bytes(calldata: Union[bytes, str]) -> bytes:
    if isinstance(calldata, (bytes, bytearray)):
        return bytes(calldata)
    text = calldata[2:] if calldata.startswith(("0x", "0X")) else calldata
    try:
        return bytes.fromhex(text)
    except ValueError as exc:
        raise ValueError(f"Calldata is not valid hex: {calldata!r}") from exc

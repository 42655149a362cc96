"""Resolve Ethereum addresses to deployed StarkNet account contracts."""

import logging
from typing import Optional

from bridge_core.blocks import BlockLike, BlockReference, StarknetBlockId
from bridge_core.config import SystemConfiguration
from bridge_core.errors import AccountNotDeployedError, ProtocolError
from bridge_core.felt import to_hex
from bridge_core.models import (
    AddressLike,
    Deployed,
    NotDeployed,
    ResolutionResult,
    address_to_felt,
    normalize_address,
)

from .provider import StarknetProvider, StarknetRpcError
from .translator import ErrorTranslator

logger = logging.getLogger(__name__)


class AddressResolver:
    """Looks up the account registry; an unregistered address is ``NotDeployed``."""

    def __init__(
        self,
        provider: StarknetProvider,
        config: SystemConfiguration,
        translator: Optional[ErrorTranslator] = None,
    ) -> None:
        self._provider = provider
        self._config = config
        self._translator = translator or ErrorTranslator()
        self._selector = config.entrypoints.selector("resolve_address")

    async def resolve(self, address: AddressLike, block: BlockLike = None) -> ResolutionResult:
        return await self.resolve_at(address, BlockReference.parse(block).to_starknet())

    async def resolve_at(self, address: AddressLike, block_id: StarknetBlockId) -> ResolutionResult:
        evm_address = address_to_felt(address)
        registry = self._config.account_registry_address
        try:
            result = await self._provider.call(registry, self._selector, [evm_address], block_id)
        except StarknetRpcError as exc:
            error = self._translator.translate(exc, "resolve", to_hex(registry))
            if isinstance(error, AccountNotDeployedError):
                # The registry itself is missing: that is a broken deployment,
                # not an empty account.
                raise ProtocolError(
                    f"Account registry {to_hex(registry)} is not deployed."
                ) from exc
            raise error from exc

        if len(result) != 1:
            raise ProtocolError(
                f"Account registry returned {len(result)} values, expected one address."
            )
        starknet_address = result[0]
        if starknet_address == 0:
            logger.debug(f"{normalize_address(address)} has no deployed account")
            return NotDeployed()
        return Deployed(starknet_address)

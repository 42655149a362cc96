"""Ethereum-facing client over the StarkNet EVM emulation."""

import logging
from typing import Optional, Union

from bridge_core.blocks import BlockLike, BlockReference
from bridge_core.config import SystemConfiguration
from bridge_core.felt import Felt
from bridge_core.models import AddressLike, Receipt, ResolutionResult, SubmittedTransactionHandle
from confirmation.poller import ReceiptPoller
from confirmation.policy import PollingPolicy
from eth_transactions.decoder import RawSignedTransaction
from starknet_adapter.call_executor import DEFAULT_CALL_GAS_LIMIT, CallExecutor
from starknet_adapter.provider import JsonRpcProvider, StarknetProvider, StarknetRpcError
from starknet_adapter.resolver import AddressResolver
from starknet_adapter.state_reader import StateReader
from starknet_adapter.submitter import TransactionSubmitter
from starknet_adapter.translator import ErrorTranslator

logger = logging.getLogger(__name__)

TransactionRef = Union[SubmittedTransactionHandle, Felt, str]


class BridgeClient:
    """Answers Ethereum queries and submits Ethereum transactions via StarkNet.

    Holds no mutable state besides the provider connection; the
    configuration is frozen and may be shared by concurrent operations.
    Reads that must agree with each other should pin the same explicit
    block (see ``pin_block``).
    """

    def __init__(
        self,
        config: SystemConfiguration,
        provider: Optional[StarknetProvider] = None,
        polling: Optional[PollingPolicy] = None,
        poller: Optional[ReceiptPoller] = None,
    ) -> None:
        self._config = config
        self._provider = provider or JsonRpcProvider(config.endpoint, config.request_timeout)
        translator = self._translator = ErrorTranslator()
        self._resolver = AddressResolver(self._provider, config, translator)
        self._state = StateReader(self._provider, config, self._resolver, translator)
        self._executor = CallExecutor(self._provider, config, self._resolver, translator)
        self._submitter = TransactionSubmitter(self._provider, config, self._resolver, translator)
        self._poller = poller or ReceiptPoller(self._provider, polling, translator)

    @property
    def config(self) -> SystemConfiguration:
        return self._config

    @property
    def provider(self) -> StarknetProvider:
        return self._provider

    async def __aenter__(self) -> "BridgeClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        close = getattr(self._provider, "close", None)
        if close is not None:
            await close()

    async def resolve(self, address: AddressLike, block: BlockLike = None) -> ResolutionResult:
        return await self._resolver.resolve(address, block)

    async def nonce(self, address: AddressLike, block: BlockLike = None) -> int:
        return await self._state.nonce(address, block)

    async def balance(self, address: AddressLike, block: BlockLike = None) -> int:
        return await self._state.balance(address, block)

    async def get_code(self, address: AddressLike, block: BlockLike = None) -> bytes:
        return await self._state.get_code(address, block)

    async def storage_at(self, address: AddressLike, slot: int, block: BlockLike = None) -> int:
        return await self._state.storage_at(address, slot, block)

    async def call(
        self,
        address: AddressLike,
        calldata: Union[bytes, str],
        block: BlockLike = None,
        value: int = 0,
        gas_limit: int = DEFAULT_CALL_GAS_LIMIT,
        gas_price: int = 0,
    ) -> bytes:
        return await self._executor.call(address, calldata, block, value, gas_limit, gas_price)

    async def send_transaction(self, raw: RawSignedTransaction) -> SubmittedTransactionHandle:
        return await self._submitter.send_transaction(raw)

    async def transaction_receipt(
        self, transaction: TransactionRef, policy: Optional[PollingPolicy] = None
    ) -> Receipt:
        """Wait until the transaction is final; raises ``ConfirmationTimeoutError``."""

        return await self._poller.wait_for_receipt(transaction, policy)

    async def get_transaction_receipt(self, transaction: TransactionRef) -> Optional[Receipt]:
        """Non-blocking variant: ``None`` while the transaction is not final."""

        return await self._poller.current_receipt(transaction)

    async def block_number(self) -> int:
        try:
            return await self._provider.block_number()
        except StarknetRpcError as exc:
            raise self._translator.translate(exc, "block_number") from exc

    async def chain_id(self) -> int:
        try:
            return await self._provider.chain_id()
        except StarknetRpcError as exc:
            raise self._translator.translate(exc, "chain_id") from exc

    async def pin_block(self) -> BlockReference:
        """Current block as an explicit reference for consistent multi-reads."""

        number = await self.block_number()
        logger.debug(f"pinned block {number}")
        return BlockReference(number=number)

"""Translate signed Ethereum transactions into StarkNet invocations."""

import logging
from typing import List, Optional

from bridge_core.blocks import BlockReference
from bridge_core.config import SystemConfiguration
from bridge_core.errors import FeltRangeError, PreconditionFailedError, TransactionDecodeError
from bridge_core.felt import Felt, bytes_to_felts, to_felt, to_hex
from bridge_core.models import Deployed, SubmittedTransactionHandle, address_to_felt
from eth_transactions.decoder import RawSignedTransaction, decode_transaction
from eth_transactions.models import DecodedTransaction

from .provider import InvokeTransaction, StarknetProvider, StarknetRpcError
from .resolver import AddressResolver
from .translator import ErrorTranslator

logger = logging.getLogger(__name__)


class TransactionSubmitter:
    """Submits from the sender's account contract and returns immediately."""

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
        self._selector = config.entrypoints.selector("send_transaction")

    async def send_transaction(self, raw: RawSignedTransaction) -> SubmittedTransactionHandle:
        tx = decode_transaction(raw)

        resolution = await self._resolver.resolve_at(
            tx.sender, BlockReference.pending().to_starknet()
        )
        if not isinstance(resolution, Deployed):
            raise PreconditionFailedError(
                f"Sender {tx.sender} has no deployed account; deploy it before sending."
            )

        invoke = self.build_invoke(tx, resolution.starknet_address)
        try:
            transaction_hash = await self._provider.add_invoke_transaction(invoke)
        except StarknetRpcError as exc:
            raise self._translator.translate(exc, "send_transaction", tx.sender) from exc

        logger.info(
            f"submitted {to_hex(transaction_hash)} from {tx.sender} nonce {tx.nonce}"
        )
        return SubmittedTransactionHandle(
            transaction_hash=transaction_hash,
            sender=tx.sender,
            starknet_sender=resolution.starknet_address,
        )

    def build_invoke(self, tx: DecodedTransaction, starknet_sender: Felt) -> InvokeTransaction:
        return InvokeTransaction(
            sender_address=starknet_sender,
            calldata=self.encode_calldata(tx),
            signature=list(tx.signature_felts()),
            nonce=tx.nonce,
            max_fee=self._config.max_fee,
        )

    def encode_calldata(self, tx: DecodedTransaction) -> List[Felt]:
        """Account multicall wrapping one ``eth_send_transaction`` call."""

        destination = address_to_felt(tx.to) if tx.to is not None else 0
        arguments = [
            destination,
            tx.gas_limit,
            tx.gas_price,
            tx.value,
            len(tx.data),
            *bytes_to_felts(tx.data),
        ]
        calldata = [1, self._config.kakarot_address, self._selector, len(arguments), *arguments]
        try:
            return [to_felt(value) for value in calldata]
        except FeltRangeError as exc:
            raise TransactionDecodeError(
                f"Transaction from {tx.sender} carries a value the ledger cannot represent: {exc}"
            ) from exc

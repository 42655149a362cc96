"""Bounded receipt polling driven by the confirmation state machine."""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional, Union

from bridge_core.errors import ConfirmationTimeoutError, TransactionNotFoundError
from bridge_core.felt import Felt, to_felt, to_hex
from bridge_core.models import Receipt, ReceiptStatus, SubmittedTransactionHandle
from starknet_adapter.provider import StarknetProvider, StarknetRpcError
from starknet_adapter.translator import ErrorTranslator

from .policy import PollingPolicy
from .states import ConfirmationState, ReceiptObservation
from .tracker import ConfirmationTracker

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]
Clock = Callable[[], float]


class ReceiptPoller:
    """Polls a transaction until it is accepted, rejected or the policy runs out.

    ``sleep`` and ``clock`` are injectable so termination can be tested
    without waiting. Cancelling ``wait_for_receipt`` only stops observing;
    the submitted transaction is unaffected.
    """

    def __init__(
        self,
        provider: StarknetProvider,
        policy: Optional[PollingPolicy] = None,
        translator: Optional[ErrorTranslator] = None,
        sleep: Sleep = asyncio.sleep,
        clock: Clock = time.monotonic,
    ) -> None:
        self._provider = provider
        self._policy = policy or PollingPolicy()
        self._translator = translator or ErrorTranslator()
        self._sleep = sleep
        self._clock = clock

    @property
    def policy(self) -> PollingPolicy:
        return self._policy

    async def wait_for_receipt(
        self,
        transaction: Union[SubmittedTransactionHandle, Felt, str],
        policy: Optional[PollingPolicy] = None,
    ) -> Receipt:
        transaction_hash = _transaction_hash(transaction)
        policy = policy or self._policy
        tracker = ConfirmationTracker()
        deadline = self._clock() + policy.timeout
        delays = policy.delays()
        attempt = 0

        while True:
            attempt += 1
            observation = await self.observe(transaction_hash)
            state = tracker.observe(observation)
            logger.debug(f"{to_hex(transaction_hash)} poll {attempt}: {state.value}")

            if state.terminal:
                receipt = _to_receipt(transaction_hash, observation)
                logger.info(
                    f"{to_hex(transaction_hash)} {receipt.status.value} after {attempt} polls"
                )
                return receipt

            delay = next(delays, None)
            if delay is None or self._clock() + delay > deadline:
                last_state = tracker.state
                tracker.time_out()
                logger.warning(
                    f"{to_hex(transaction_hash)} still {last_state.value} after {attempt} polls"
                )
                raise ConfirmationTimeoutError(to_hex(transaction_hash), last_state.value)
            await self._sleep(delay)

    async def observe(
        self, transaction: Union[SubmittedTransactionHandle, Felt, str]
    ) -> ReceiptObservation:
        """Query the ledger once."""

        transaction_hash = _transaction_hash(transaction)
        try:
            raw = await self._provider.get_transaction_receipt(transaction_hash)
        except StarknetRpcError as exc:
            error = self._translator.translate(exc, "transaction_receipt", to_hex(transaction_hash))
            if isinstance(error, TransactionNotFoundError):
                return ReceiptObservation.not_found()
            raise error from exc
        return ReceiptObservation.from_receipt(raw)

    async def current_receipt(
        self, transaction: Union[SubmittedTransactionHandle, Felt, str]
    ) -> Optional[Receipt]:
        """Receipt if the transaction is already final, otherwise ``None``."""

        transaction_hash = _transaction_hash(transaction)
        observation = await self.observe(transaction_hash)
        if observation.state in (ConfirmationState.ACCEPTED, ConfirmationState.REJECTED):
            return _to_receipt(transaction_hash, observation)
        return None


def _to_receipt(transaction_hash: Felt, observation: ReceiptObservation) -> Receipt:
    status = (
        ReceiptStatus.SUCCEEDED
        if observation.state == ConfirmationState.ACCEPTED
        else ReceiptStatus.REVERTED
    )
    return Receipt(
        transaction_hash=transaction_hash,
        status=status,
        block_hash=observation.block_hash,
        block_number=observation.block_number,
        revert_reason=observation.revert_reason,
        actual_fee=observation.actual_fee,
    )


def _transaction_hash(transaction: Union[SubmittedTransactionHandle, Felt, str]) -> Felt:
    if isinstance(transaction, SubmittedTransactionHandle):
        return transaction.transaction_hash
    return to_felt(transaction)

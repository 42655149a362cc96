"""Explicit confirmation state machine for one submitted transaction."""

from typing import Dict, FrozenSet, Optional, Tuple

from bridge_core.errors import StateTransitionError

from .states import ConfirmationState, ReceiptObservation

_ALLOWED: Dict[ConfirmationState, FrozenSet[ConfirmationState]] = {
    ConfirmationState.SUBMITTED: frozenset(
        {
            ConfirmationState.SUBMITTED,
            ConfirmationState.PENDING,
            ConfirmationState.ACCEPTED,
            ConfirmationState.REJECTED,
            ConfirmationState.TIMED_OUT,
        }
    ),
    ConfirmationState.PENDING: frozenset(
        {
            ConfirmationState.PENDING,
            ConfirmationState.ACCEPTED,
            ConfirmationState.REJECTED,
            ConfirmationState.TIMED_OUT,
        }
    ),
    ConfirmationState.ACCEPTED: frozenset(),
    ConfirmationState.REJECTED: frozenset(),
    ConfirmationState.TIMED_OUT: frozenset(),
}


class ConfirmationTracker:
    """Submitted -> Pending -> {Accepted | Rejected | TimedOut}."""

    def __init__(self) -> None:
        self._state = ConfirmationState.SUBMITTED
        self._history: Tuple[ConfirmationState, ...] = (ConfirmationState.SUBMITTED,)
        self._last: Optional[ReceiptObservation] = None

    @property
    def state(self) -> ConfirmationState:
        return self._state

    @property
    def history(self) -> Tuple[ConfirmationState, ...]:
        return self._history

    @property
    def last_observation(self) -> Optional[ReceiptObservation]:
        return self._last

    def observe(self, observation: ReceiptObservation) -> ConfirmationState:
        target = observation.state
        if target == ConfirmationState.TIMED_OUT:
            raise StateTransitionError("Timeouts are decided by the poller, not observed.")
        # A node may briefly stop reporting a pending transaction; keep PENDING.
        if self._state == ConfirmationState.PENDING and target == ConfirmationState.SUBMITTED:
            target = ConfirmationState.PENDING
        self._move(target)
        self._last = observation
        return self._state

    def time_out(self) -> ConfirmationState:
        self._move(ConfirmationState.TIMED_OUT)
        return self._state

    def _move(self, target: ConfirmationState) -> None:
        if target not in _ALLOWED[self._state]:
            raise StateTransitionError(
                f"Illegal confirmation transition {self._state.value} -> {target.value}."
            )
        self._state = target
        if self._history[-1] != target:
            self._history = self._history + (target,)

from .poller import ReceiptPoller
from .policy import PollingPolicy
from .states import ConfirmationState, ReceiptObservation
from .tracker import ConfirmationTracker

__all__ = [
    "ConfirmationState",
    "ConfirmationTracker",
    "PollingPolicy",
    "ReceiptObservation",
    "ReceiptPoller",
]

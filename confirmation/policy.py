"""Receipt polling policy."""

from dataclasses import dataclass
from typing import Iterator


@dataclass(frozen=True)
class PollingPolicy:
    interval: float = 1.0
    max_attempts: int = 60
    backoff: float = 1.0
    max_interval: float = 10.0
    timeout: float = 120.0

    def __post_init__(self) -> None:
        if self.interval <= 0:
            raise ValueError("interval must be positive.")
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1.")
        if self.backoff < 1:
            raise ValueError("backoff must be at least 1.")
        if self.max_interval < self.interval:
            raise ValueError("max_interval must not be smaller than interval.")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive.")

    def delays(self) -> Iterator[float]:
        """Delays between consecutive polls (``max_attempts - 1`` of them)."""

        delay = self.interval
        for _ in range(self.max_attempts - 1):
            yield delay
            delay = min(delay * self.backoff, self.max_interval)

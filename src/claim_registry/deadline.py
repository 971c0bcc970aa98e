"""Wall-clock budget shared by every remote call of one invocation."""

from __future__ import annotations

import time
from collections.abc import Callable

from claim_registry.errors import DeletionTimeout

DEFAULT_TIMEOUT_SECONDS = 60.0


class Deadline:
    """A fixed point in time after which remote calls must not start.

    The deadline is created once per invocation and passed down explicitly;
    each call checks it before sending and uses ``remaining()`` as its
    transport timeout so an in-flight request is cut off at expiry.
    """

    def __init__(self, seconds: float = DEFAULT_TIMEOUT_SECONDS, *, clock: Callable[[], float] = time.monotonic) -> None:
        self.seconds = seconds
        self._clock = clock
        self._expires_at = clock() + seconds

    def remaining(self) -> float:
        return max(0.0, self._expires_at - self._clock())

    def expired(self) -> bool:
        return self._clock() >= self._expires_at

    def check(self, step: str) -> None:
        """Raise DeletionTimeout if the budget is spent before *step* starts."""
        if self.expired():
            raise DeletionTimeout(step, self.seconds)

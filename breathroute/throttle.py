"""
Request throttle for the air-quality collaborator.

Air-quality providers enforce request-rate limits, so readings along one
route are fetched one after another with a small fixed gap between calls.
The clock and sleep functions are injected so the policy can be exercised in
tests without real wall-clock delay.
"""

import time
from typing import Callable, Optional


class RequestThrottle:
    """
    Enforces a minimum interval between successive calls to `wait()`.

    The first call returns immediately. Each later call sleeps for whatever
    remains of `min_interval` since the previous call returned.

    Not thread-safe: use one throttle per sequential fetch loop.
    """

    def __init__(
        self,
        min_interval: float = 0.2,
        sleep: Callable[[float], None] = time.sleep,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        if min_interval < 0:
            raise ValueError("min_interval must be >= 0")
        self.min_interval = min_interval
        self._sleep = sleep
        self._monotonic = monotonic
        self._last_call: Optional[float] = None

    def wait(self) -> float:
        """
        Blocks until the next call is allowed.

        Returns:
            The number of seconds slept (0.0 if no wait was needed)
        """
        slept = 0.0
        if self._last_call is not None:
            remaining = self.min_interval - (self._monotonic() - self._last_call)
            if remaining > 0:
                self._sleep(remaining)
                slept = remaining
        self._last_call = self._monotonic()
        return slept

    def reset(self) -> None:
        """Forgets the previous call so the next `wait()` returns immediately."""
        self._last_call = None

"""
Bounded polling helper.

All waiting in the bootstrap pipeline goes through poll_until: a fixed number
of attempts separated by a fixed sleep, with no backoff.
"""

import logging
import time
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class PollResult:
    """Outcome of a bounded polling loop."""

    def __init__(self, succeeded: bool, value: Any = None, attempts: int = 0):
        self.succeeded = succeeded
        self.value = value  # last value produced by the probe
        self.attempts = attempts

    def __bool__(self) -> bool:
        return self.succeeded

    def __repr__(self) -> str:
        status = "succeeded" if self.succeeded else "timed out"
        return f"PollResult({status} after {self.attempts} attempt(s), value={self.value!r})"


def poll_until(
    probe: Callable[[], Any],
    predicate: Callable[[Any], bool],
    attempts: int,
    interval: float,
    description: Optional[str] = None,
) -> PollResult:
    """
    Call probe until predicate accepts its result or the attempt budget runs out.

    Args:
        probe: Zero-argument callable producing the value to test
        predicate: Returns True when the value means "done"
        attempts: Maximum number of probe calls
        interval: Seconds to sleep between attempts
        description: Optional label used in debug logging

    Returns:
        PollResult: succeeded is True when the predicate matched; value holds
        the last probed value either way
    """
    value = None
    label = description or getattr(probe, "__name__", "probe")

    for attempt in range(1, attempts + 1):
        value = probe()
        if predicate(value):
            logger.debug("%s: done after %d attempt(s)", label, attempt)
            return PollResult(True, value, attempt)

        logger.debug("%s: attempt %d/%d not ready (%r)", label, attempt, attempts, value)
        if attempt < attempts:
            time.sleep(interval)

    return PollResult(False, value, attempts)

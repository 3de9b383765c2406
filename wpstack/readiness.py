from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

from .errors import ReadinessTimeoutError


logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 30
DEFAULT_DELAY = 2.0

Probe = Callable[[], bool]


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded, fixed-delay retry (no backoff, no jitter)."""

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    delay: float = DEFAULT_DELAY

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.delay < 0:
            raise ValueError("delay must not be negative")


def wait_until_ready(
    probe: Probe,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    delay: float = DEFAULT_DELAY,
    sleep: Callable[[float], None] = time.sleep,
    target: str = "dependency",
) -> int:
    """Call ``probe`` until it returns True.

    Sleeps ``delay`` seconds between attempts only. Returns the attempt number
    that succeeded; raises ReadinessTimeoutError once ``max_attempts`` probes
    have failed.
    """
    policy = RetryPolicy(max_attempts=max_attempts, delay=delay)
    for attempt in range(1, policy.max_attempts + 1):
        if probe():
            logger.debug("%s ready after %d attempt(s)", target, attempt)
            return attempt
        logger.debug("%s not ready (attempt %d/%d)", target, attempt, policy.max_attempts)
        if attempt < policy.max_attempts:
            sleep(policy.delay)
    raise ReadinessTimeoutError(policy.max_attempts, target=target)

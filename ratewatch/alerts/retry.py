"""Fixed-delay retry for alert store writes."""

import logging
import time
from typing import Callable

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class RetryPolicy(BaseModel):
    """How many times to attempt a write and how long to wait in between."""

    max_attempts: int = Field(default=3, ge=1, description="Total attempts")
    delay_seconds: float = Field(default=1.0, ge=0, description="Pause between attempts")

    model_config = {"frozen": True}


def retry_call(
    fn: Callable[[], bool],
    attempts: int = 3,
    delay: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
    describe: str = "operation",
) -> bool:
    """Call ``fn`` until it reports success.

    A falsy return value or a raised exception both count as a failed
    attempt. ``sleep(delay)`` runs between attempts, never after the last.

    Args:
        fn: Zero-argument callable returning truthy on success.
        attempts: Maximum number of calls.
        delay: Seconds to wait between attempts.
        sleep: Sleep function, injectable for tests.
        describe: Label used in log messages.

    Returns:
        True if some attempt succeeded, False once all attempts failed.
    """
    for attempt in range(1, attempts + 1):
        try:
            if fn():
                logger.debug("%s succeeded (attempt %d)", describe, attempt)
                return True
            logger.warning("%s failed (attempt %d/%d)", describe, attempt, attempts)
        except Exception as e:
            logger.warning(
                "%s raised %s (attempt %d/%d)", describe, e, attempt, attempts
            )

        if attempt < attempts:
            sleep(delay)

    return False

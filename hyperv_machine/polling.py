"""Bounded, cancellable polling for externally observed state."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, TypeVar

from hyperv_machine.errors import PollCancelledError, PollTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def poll_until(
    probe: Callable[[], T],
    *,
    interval: float = 1.0,
    timeout: float | None = None,
    cancel: threading.Event | None = None,
    description: str = "condition",
) -> T:
    """Call ``probe`` until it returns a truthy value and return that value.

    Args:
        probe: Zero-argument callable. Exceptions it raises propagate.
        interval: Seconds to wait between attempts.
        timeout: Overall deadline in seconds; ``None`` waits indefinitely.
        cancel: Event that aborts the wait as soon as it is set.
        description: What is being waited for, used in errors and logs.

    Raises:
        PollTimeoutError: The deadline passed before the probe succeeded.
        PollCancelledError: ``cancel`` was set.
    """
    deadline = None if timeout is None else time.monotonic() + timeout
    attempts = 0

    while True:
        if cancel is not None and cancel.is_set():
            raise PollCancelledError(description)

        attempts += 1
        result = probe()
        if result:
            logger.debug("%s observed after %d attempt(s)", description, attempts)
            return result

        wait = interval
        if deadline is not None:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise PollTimeoutError(description, timeout)
            wait = min(interval, remaining)

        if cancel is not None:
            if cancel.wait(wait):
                raise PollCancelledError(description)
        elif wait > 0:
            time.sleep(wait)

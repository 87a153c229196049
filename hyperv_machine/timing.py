"""Duration tracking for driver operations and hypervisor commands.

``TimedOperation`` wraps a block, observes its wall time on a Prometheus
histogram and logs one record with the outcome. Instrumentation problems are
logged and dropped; the wrapped block's own exception always propagates.

    with TimedOperation(
        histogram=machine_operation_duration,
        error_counter=machine_operation_errors,
        labels={"operation": "start", "status": "auto"},
        log_event="machine_operation",
        log_extras={"machine": "crc"},
    ):
        driver.start()
"""
from __future__ import annotations

import logging
import time

logger = logging.getLogger(__name__)

# Label value replaced by "success" or "error" once the block finishes.
AUTO_STATUS = "auto"


class TimedOperation:
    """Context manager recording how long a block took and whether it raised."""

    def __init__(
        self,
        *,
        histogram=None,
        error_counter=None,
        labels: dict[str, str] | None = None,
        log_event: str = "timed_operation",
        log_extras: dict | None = None,
        log_level: int = logging.INFO,
    ):
        self.histogram = histogram
        self.error_counter = error_counter
        self.labels = dict(labels or {})
        self.log_event = log_event
        self.log_extras = dict(log_extras or {})
        self.log_level = log_level
        self.duration_ms: int = 0
        self.success: bool = True
        self._started: float = 0.0

    def __enter__(self) -> "TimedOperation":
        self._started = time.monotonic()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        seconds = time.monotonic() - self._started
        self.duration_ms = int(seconds * 1000)
        self.success = exc_type is None

        self._observe(seconds)
        self._log(exc_val)
        return False

    def _resolved_labels(self) -> dict[str, str]:
        resolved = dict(self.labels)
        if resolved.get("status") == AUTO_STATUS:
            resolved["status"] = "success" if self.success else "error"
        return resolved

    def _observe(self, seconds: float) -> None:
        try:
            if self.histogram is not None:
                self.histogram.labels(**self._resolved_labels()).observe(seconds)
            if self.error_counter is not None and not self.success:
                operation = self.labels.get("operation", "unknown")
                self.error_counter.labels(operation=operation).inc()
        except Exception as e:
            logger.warning("Could not record %s metric: %s", self.log_event, e)

    def _log(self, error: BaseException | None) -> None:
        record = {
            "event": self.log_event,
            "duration_ms": self.duration_ms,
            "success": self.success,
            **self.labels,
            **self.log_extras,
        }
        if error is not None:
            record["error"] = str(error)
        try:
            logger.log(
                self.log_level,
                "%s %s in %d ms",
                self.log_event,
                "finished" if self.success else "failed",
                self.duration_ms,
                extra=record,
            )
        except Exception as e:
            logger.debug("Could not log %s: %s", self.log_event, e)

"""Prometheus metrics for the Hyper-V machine driver.

Exposes durations for machine lifecycle operations and the individual
hypervisor commands they issue. The /metrics endpoint serves these in
Prometheus exposition format.
"""
from __future__ import annotations

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Histogram,
    generate_latest,
)

machine_operation_duration = Histogram(
    "hyperv_machine_operation_seconds",
    "Duration of machine lifecycle operations",
    ["operation", "status"],
    buckets=(0.5, 1, 2, 5, 10, 30, 60, 120, 300, 600, float("inf")),
)

machine_operation_errors = Counter(
    "hyperv_machine_operation_errors_total",
    "Total machine lifecycle operation errors",
    ["operation"],
)

hyperv_command_duration = Histogram(
    "hyperv_machine_command_seconds",
    "Duration of individual Hyper-V commands",
    ["operation", "status"],
    buckets=(0.1, 0.25, 0.5, 1, 2, 5, 10, 30, 60, float("inf")),
)


def get_metrics() -> tuple[bytes, str]:
    """Generate Prometheus metrics output."""
    return generate_latest(REGISTRY), CONTENT_TYPE_LATEST

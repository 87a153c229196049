"""Network resolution for Hyper-V machines."""

from hyperv_machine.network.resolver import NetworkResolver

__all__ = ["NetworkResolver"]

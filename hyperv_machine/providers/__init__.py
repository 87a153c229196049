"""Machine drivers.

Concrete drivers live in their own modules (``hyperv_machine.providers.hyperv``)
so that helpers such as the reconciler can import the naming helpers without
pulling in a driver implementation.
"""

from hyperv_machine.providers.base import ENGINE_PORT, Driver
from hyperv_machine.providers.naming import disk_path, resolve_store_path

__all__ = [
    "Driver",
    "ENGINE_PORT",
    "disk_path",
    "resolve_store_path",
]

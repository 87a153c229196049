"""Derived filesystem paths for machine resources.

Paths are always computed from the descriptor and never stored on it.
"""

import os

from hyperv_machine.schemas import MachineDescriptor


def resolve_store_path(descriptor: MachineDescriptor, file: str = ".") -> str:
    """Resolve ``file`` inside the machine's store directory."""
    return os.path.join(descriptor.store_path, file)


def disk_path(descriptor: MachineDescriptor) -> str:
    """Disk image path.

    Format: <store_path>/<machine_name>.<image_format>
    """
    return resolve_store_path(
        descriptor, f"{descriptor.machine_name}.{descriptor.image_format}"
    )

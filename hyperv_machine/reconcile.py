"""Reconcile a running machine against an updated descriptor.

Only memory, CPU count and disk capacity are converged; every other field
of the new descriptor is adopted as-is once those commands succeed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from hyperv_machine.backend.base import CommandBackend
from hyperv_machine.backend.commands import ResizeVHD, SetVMMemory, SetVMProcessor
from hyperv_machine.errors import CommandExecutionError
from hyperv_machine.providers.naming import disk_path
from hyperv_machine.schemas import MachineDescriptor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfigDiff:
    """Which reconcilable fields differ between two descriptors."""
    memory: bool = False
    cpu: bool = False
    disk_capacity: bool = False

    @property
    def empty(self) -> bool:
        return not (self.memory or self.cpu or self.disk_capacity)


def diff_descriptors(old: MachineDescriptor, new: MachineDescriptor) -> ConfigDiff:
    return ConfigDiff(
        memory=new.memory != old.memory,
        cpu=new.cpu != old.cpu,
        disk_capacity=new.disk_capacity != old.disk_capacity,
    )


def reconcile(
    backend: CommandBackend,
    old: MachineDescriptor,
    new: MachineDescriptor,
) -> MachineDescriptor:
    """Issue one command per changed field and return the adopted descriptor.

    The first failing command aborts reconciliation; the caller keeps ``old``.
    Commands address the machine by its current name and disk path.
    """
    diff = diff_descriptors(old, new)
    name = old.machine_name

    if diff.memory:
        logger.debug("Updating memory from %d MB to %d MB", old.memory, new.memory)
        try:
            backend.execute(SetVMMemory(name, startup_mb=new.memory))
        except CommandExecutionError as e:
            logger.warning("Failed to update memory to %d MB: %s", new.memory, e)
            raise

    if diff.cpu:
        logger.debug("Updating CPU count from %d to %d", old.cpu, new.cpu)
        try:
            backend.execute(SetVMProcessor(name, new.cpu))
        except CommandExecutionError as e:
            logger.warning("Failed to set CPU count to %d: %s", new.cpu, e)
            raise

    if diff.disk_capacity:
        logger.debug(
            "Resizing disk from %d bytes to %d bytes",
            old.disk_capacity, new.disk_capacity,
        )
        try:
            backend.execute(ResizeVHD(disk_path(old), new.disk_capacity))
        except CommandExecutionError as e:
            logger.warning("Failed to set disk size to %d: %s", new.disk_capacity, e)
            raise

    return new

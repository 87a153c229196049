"""Hyper-V machine driver.

Drives the full lifecycle of one Hyper-V VM through a command backend.
Hyper-V is the source of truth for VM state: nothing about the state is
cached locally, only the last observed IP address.

Multi-step operations fail fast and are never rolled back. A create that
fails after New-VM leaves the VM defined on the host; callers inspect
get_state() and decide what to do.
"""

from __future__ import annotations

import logging
import shutil
import threading

from hyperv_machine.backend.base import CommandBackend
from hyperv_machine.backend.commands import (
    AddVMHardDiskDrive,
    Command,
    NewVM,
    RemoveVM,
    RemoveVMNetworkAdapter,
    SetVMMemory,
    SetVMNetworkAdapter,
    SetVMProcessor,
    StartVM,
    StopVM,
)
from hyperv_machine.backend.powershell import PowerShellBackend
from hyperv_machine.config import Settings, settings
from hyperv_machine.errors import (
    DiskImageCopyError,
    HostNotRunningError,
    NoSwitchConfiguredError,
)
from hyperv_machine.metrics import machine_operation_duration, machine_operation_errors
from hyperv_machine.network.resolver import NetworkResolver
from hyperv_machine.polling import poll_until
from hyperv_machine.preflight import run_preflight
from hyperv_machine.providers.base import Driver
from hyperv_machine.providers.naming import disk_path, resolve_store_path
from hyperv_machine.reconcile import reconcile
from hyperv_machine.schemas import MachineDescriptor
from hyperv_machine.state import MachineState, query_state
from hyperv_machine.timing import TimedOperation

logger = logging.getLogger(__name__)


class HypervDriver(Driver):
    """Lifecycle controller for a single Hyper-V VM."""

    def __init__(
        self,
        descriptor: MachineDescriptor,
        backend: CommandBackend | None = None,
        *,
        poll_interval: float | None = None,
        ip_wait_timeout: float | None = None,
        stop_wait_timeout: float | None = None,
        cancel: threading.Event | None = None,
    ):
        self.descriptor = descriptor
        self.backend = backend or PowerShellBackend(
            settings.powershell_path, settings.command_timeout
        )
        self.poll_interval = settings.poll_interval if poll_interval is None else poll_interval
        self.ip_wait_timeout = (
            settings.ip_wait_timeout if ip_wait_timeout is None else ip_wait_timeout
        )
        self.stop_wait_timeout = (
            settings.stop_wait_timeout if stop_wait_timeout is None else stop_wait_timeout
        )
        self.cancel = cancel
        self.network = NetworkResolver(self.backend, poll_interval=self.poll_interval)

    @classmethod
    def from_settings(
        cls,
        config: Settings | None = None,
        backend: CommandBackend | None = None,
        **kwargs,
    ) -> "HypervDriver":
        """Build a driver whose descriptor is bound from configuration."""
        config = config or settings
        driver = cls(
            MachineDescriptor(
                machine_name=config.machine_name,
                store_path=config.store_path,
            ),
            backend,
            **kwargs,
        )
        driver.set_config_from_settings(config)
        return driver

    @property
    def driver_name(self) -> str:
        return "hyperv"

    def set_config_from_settings(self, config: Settings) -> None:
        """Bind the driver options onto the held descriptor before create()."""
        self.descriptor = self.descriptor.model_copy(
            update={
                "virtual_switch": config.virtual_switch,
                "memory": config.memory,
                "cpu": config.cpu_count,
                "mac_address": config.static_macaddress,
                "disable_dynamic_memory": config.disable_dynamic_memory,
                "bundle_url": config.bundlepath_url,
                "image_source_path": config.image_source_path or self.descriptor.image_source_path,
                "image_format": config.image_format,
                "disk_capacity": config.disk_capacity,
            }
        )

    # --- Helpers ---

    @property
    def machine_name(self) -> str:
        return self.descriptor.machine_name

    def _run(self, command: Command) -> str:
        return self.backend.execute(command)

    def _timed(self, operation: str) -> TimedOperation:
        return TimedOperation(
            histogram=machine_operation_duration,
            error_counter=machine_operation_errors,
            labels={"operation": operation, "status": "auto"},
            log_event="machine_operation",
            log_extras={"machine": self.machine_name},
        )

    def _wait_for_ip(self) -> str:
        return self.network.wait_for_ip(
            self.machine_name,
            self.descriptor.virtual_switch,
            self.get_ip,
            timeout=self.ip_wait_timeout,
            cancel=self.cancel,
        )

    def _wait_stopped(self) -> None:
        logger.info("Waiting for host to stop...")
        poll_until(
            lambda: self.get_state() != MachineState.RUNNING,
            interval=self.poll_interval,
            timeout=self.stop_wait_timeout,
            cancel=self.cancel,
            description=f"{self.machine_name} to stop",
        )

    # --- Preflight ---

    def pre_create_check(self) -> None:
        with self._timed("pre_create_check"):
            run_preflight(self.backend, self.network, self.descriptor.virtual_switch)

    # --- Lifecycle ---

    def create(self) -> None:
        with self._timed("create"):
            d = self.descriptor
            target_disk = disk_path(d)
            try:
                shutil.copyfile(d.image_source_path, target_disk)
            except OSError as e:
                raise DiskImageCopyError(d.image_source_path, target_disk, str(e)) from e

            switch = None
            if d.virtual_switch:
                switch = self.network.choose_switch(d.virtual_switch)
                logger.info("Using switch %r", switch)

            logger.info("Creating VM...")
            self._run(NewVM(d.machine_name, resolve_store_path(d), d.memory, switch))

            if not d.virtual_switch:
                self._run(RemoveVMNetworkAdapter(d.machine_name))

            if d.disable_dynamic_memory:
                self._run(SetVMMemory(d.machine_name, dynamic_memory_enabled=False))

            if d.cpu > 1:
                self._run(SetVMProcessor(d.machine_name, d.cpu))

            if d.virtual_switch and d.mac_address:
                self._run(SetVMNetworkAdapter(d.machine_name, d.mac_address))

            self._run(AddVMHardDiskDrive(d.machine_name, target_disk))

            logger.info("Starting VM...")
            self._start()

    def start(self) -> None:
        with self._timed("start"):
            self._start()

    def _start(self) -> None:
        self._run(StartVM(self.machine_name))

        if not self.descriptor.virtual_switch:
            return

        self.descriptor.ip_address = self._wait_for_ip()

    def stop(self) -> None:
        with self._timed("stop"):
            self._run(StopVM(self.machine_name))
            self._wait_stopped()
            self.descriptor.ip_address = ""

    def kill(self) -> None:
        with self._timed("kill"):
            self._kill()

    def _kill(self) -> None:
        self._run(StopVM(self.machine_name, force=True))
        self._wait_stopped()
        self.descriptor.ip_address = ""

    def restart(self) -> None:
        with self._timed("restart"):
            super().restart()

    def remove(self) -> None:
        with self._timed("remove"):
            if self.get_state() == MachineState.RUNNING:
                self._kill()
            self._run(RemoveVM(self.machine_name))

    # --- Queries ---

    def get_state(self) -> MachineState:
        return query_state(self.backend, self.machine_name)

    def get_ip(self) -> str:
        if self.get_state() != MachineState.RUNNING:
            raise HostNotRunningError(self.machine_name)
        if not self.descriptor.virtual_switch:
            raise NoSwitchConfiguredError()
        return self.network.query_ip(self.machine_name)

    # --- Configuration updates ---

    def update_config(self, new: MachineDescriptor) -> None:
        with self._timed("update_config"):
            adopted = reconcile(self.backend, self.descriptor, new)
            self.descriptor = adopted

"""Virtual switch selection and IP discovery."""

from __future__ import annotations

import logging
import threading
from typing import Callable

from hyperv_machine.backend.base import CommandBackend
from hyperv_machine.backend.commands import GetVMIPAddress, ListSwitches
from hyperv_machine.backend.parsing import parse_lines
from hyperv_machine.errors import (
    IPNotFoundError,
    MachineError,
    NoSwitchConfiguredError,
    SwitchNotFoundError,
)
from hyperv_machine.polling import poll_until

logger = logging.getLogger(__name__)


class NetworkResolver:
    """Resolves virtual switches and VM addresses through a command backend."""

    def __init__(self, backend: CommandBackend, poll_interval: float = 1.0):
        self._backend = backend
        self._poll_interval = poll_interval

    def list_switches(self) -> list[str]:
        return parse_lines(self._backend.execute(ListSwitches()))

    def choose_switch(self, requested: str) -> str:
        """Return ``requested`` if it exactly names an existing switch."""
        if not requested:
            raise NoSwitchConfiguredError()

        if requested not in self.list_switches():
            raise SwitchNotFoundError(requested)
        return requested

    def query_ip(self, machine_name: str) -> str:
        """First IP address of the VM's first network adapter."""
        lines = parse_lines(self._backend.execute(GetVMIPAddress(machine_name)))
        if not lines:
            raise IPNotFoundError(machine_name)
        return lines[0]

    def wait_for_ip(
        self,
        machine_name: str,
        requested_switch: str,
        probe: Callable[[], str],
        *,
        timeout: float | None = None,
        cancel: threading.Event | None = None,
    ) -> str:
        """Poll ``probe`` until it yields a non-empty address.

        Driver errors from the probe (VM still booting, no lease yet) are
        treated as "not yet"; anything else propagates.
        """
        if not requested_switch:
            raise NoSwitchConfiguredError()

        logger.info("Waiting for host to start...")

        def _attempt() -> str:
            try:
                return probe()
            except MachineError as e:
                logger.debug("No IP yet for %s: %s", machine_name, e)
                return ""

        return poll_until(
            _attempt,
            interval=self._poll_interval,
            timeout=timeout,
            cancel=cancel,
            description=f"an IP address on {machine_name}",
        )

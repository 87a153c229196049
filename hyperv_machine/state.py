"""Canonical VM state as reported by Hyper-V."""

from __future__ import annotations

import logging
from enum import Enum

from hyperv_machine.backend.base import CommandBackend
from hyperv_machine.backend.commands import GetVMState
from hyperv_machine.backend.parsing import parse_lines
from hyperv_machine.errors import CommandExecutionError, StateQueryError

logger = logging.getLogger(__name__)


class MachineState(str, Enum):
    """Three-valued VM state used by the driver."""
    RUNNING = "running"
    STOPPED = "stopped"
    UNKNOWN = "unknown"


# Hyper-V status tokens recognized by the driver. Everything else
# (Paused, Saved, Starting, ...) is deliberately reported as UNKNOWN.
_STATE_MAP = {
    "Running": MachineState.RUNNING,
    "Off": MachineState.STOPPED,
}


def query_state(backend: CommandBackend, machine_name: str) -> MachineState:
    """Fetch and map the VM status; only the first output line is considered."""
    try:
        stdout = backend.execute(GetVMState(machine_name))
    except CommandExecutionError as e:
        logger.debug("State query for %s failed: %s", machine_name, e)
        raise StateQueryError(machine_name) from e

    lines = parse_lines(stdout)
    if not lines:
        return MachineState.UNKNOWN
    return _STATE_MAP.get(lines[0], MachineState.UNKNOWN)

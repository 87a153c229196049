"""Host prerequisite checks run before a VM is created.

Checks run in order and the first failure stops the chain:
1. PowerShell is resolvable
2. The Hyper-V PowerShell module is installed
3. The caller is a Hyper-V or Windows administrator
4. The requested virtual switch exists (skipped when none is requested)
"""

from __future__ import annotations

import logging
from typing import Callable

from hyperv_machine.backend.base import CommandBackend
from hyperv_machine.backend.commands import (
    GetHypervModule,
    IsHypervAdministrator,
    IsWindowsAdministrator,
)
from hyperv_machine.backend.parsing import parse_lines
from hyperv_machine.errors import (
    CommandExecutionError,
    HypervisorUnavailableError,
    PermissionDeniedError,
    ToolNotFoundError,
)
from hyperv_machine.network.resolver import NetworkResolver

logger = logging.getLogger(__name__)


def _first_line(backend: CommandBackend, command) -> str:
    lines = parse_lines(backend.execute(command))
    return lines[0] if lines else ""


def check_tool(backend: CommandBackend) -> None:
    if not backend.is_available():
        raise ToolNotFoundError()


def check_hypervisor(backend: CommandBackend) -> None:
    try:
        module = _first_line(backend, GetHypervModule())
    except CommandExecutionError as e:
        raise HypervisorUnavailableError(str(e)) from e
    if module != "Hyper-V":
        raise HypervisorUnavailableError()


def is_hyperv_administrator(backend: CommandBackend) -> bool:
    """Member of "Hyper-V Administrators"; a failed query counts as no."""
    try:
        return _first_line(backend, IsHypervAdministrator()) == "1"
    except CommandExecutionError as e:
        logger.debug("Hyper-V administrators lookup failed: %s", e)
        return False


def is_windows_administrator(backend: CommandBackend) -> bool:
    try:
        return _first_line(backend, IsWindowsAdministrator()) == "True"
    except CommandExecutionError as e:
        logger.debug("Windows administrator lookup failed: %s", e)
        return False


def check_administrator(backend: CommandBackend) -> None:
    if is_hyperv_administrator(backend):
        return
    if not is_windows_administrator(backend):
        raise PermissionDeniedError()


def run_preflight(
    backend: CommandBackend,
    resolver: NetworkResolver,
    virtual_switch: str,
) -> None:
    """Run every check in order, raising the first failure."""
    checks: list[tuple[str, Callable[[], object]]] = [
        ("tool", lambda: check_tool(backend)),
        ("hypervisor", lambda: check_hypervisor(backend)),
        ("administrator", lambda: check_administrator(backend)),
    ]
    if virtual_switch:
        checks.append(("virtual_switch", lambda: resolver.choose_switch(virtual_switch)))

    for name, check in checks:
        logger.debug("Preflight check: %s", name)
        check()
    logger.info("Preflight checks passed")

"""PowerShell command backend for Hyper-V."""

from __future__ import annotations

import logging
import shutil
import subprocess

from hyperv_machine.backend.base import CommandBackend
from hyperv_machine.backend.commands import Command
from hyperv_machine.errors import CommandExecutionError
from hyperv_machine.metrics import hyperv_command_duration
from hyperv_machine.timing import TimedOperation

logger = logging.getLogger(__name__)

POWERSHELL_EXECUTABLE = "powershell.exe"


def find_powershell(configured: str = "") -> str | None:
    """Resolve the PowerShell executable.

    An explicitly configured path wins; otherwise PATH is searched.
    """
    if configured:
        return shutil.which(configured) or None
    return shutil.which(POWERSHELL_EXECUTABLE)


class PowerShellBackend(CommandBackend):
    """Runs Hyper-V cmdlets through ``powershell.exe``."""

    name = "powershell"

    def __init__(self, powershell_path: str = "", timeout: float | None = 300.0):
        self._powershell = find_powershell(powershell_path)
        self._timeout = timeout

    @property
    def powershell(self) -> str | None:
        return self._powershell

    def is_available(self) -> bool:
        return self._powershell is not None

    def _argv(self, script: str) -> list[str]:
        return [self._powershell, "-NoProfile", "-NonInteractive", script]

    def execute(self, command: Command) -> str:
        script = command.render()
        if self._powershell is None:
            raise CommandExecutionError(script, None, f"{POWERSHELL_EXECUTABLE} not found")

        logger.debug("[executing ==>] %s", script)
        with TimedOperation(
            histogram=hyperv_command_duration,
            labels={"operation": command.operation.value, "status": "auto"},
            log_event="hyperv_command",
            log_level=logging.DEBUG,
        ):
            try:
                result = subprocess.run(
                    self._argv(script),
                    capture_output=True,
                    text=True,
                    encoding="utf-8",
                    errors="replace",
                    timeout=self._timeout,
                )
            except subprocess.TimeoutExpired as e:
                raise CommandExecutionError(
                    script, None, f"timed out after {self._timeout}s"
                ) from e
            except OSError as e:
                raise CommandExecutionError(script, None, str(e)) from e

            logger.debug("[stdout =====>] %s", result.stdout)
            logger.debug("[stderr =====>] %s", result.stderr)

            if result.returncode != 0:
                raise CommandExecutionError(script, result.returncode, result.stderr)

        return result.stdout

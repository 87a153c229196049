"""Exception hierarchy for the Hyper-V machine driver.

Every error raised by the driver derives from MachineError so callers can
catch the whole family at the HTTP boundary.
"""

from __future__ import annotations


class MachineError(Exception):
    """Base exception for machine driver operations."""

    pass


# --- Preflight ---


class PreflightError(MachineError):
    """A host prerequisite for creating a VM is missing."""

    pass


class ToolNotFoundError(PreflightError):
    """The hypervisor management tool could not be found on the host."""

    def __init__(self, tool: str = "powershell.exe"):
        self.tool = tool
        super().__init__(f"{tool} was not found in the PATH")


class HypervisorUnavailableError(PreflightError):
    """Hyper-V is not installed or not enabled."""

    def __init__(self, detail: str | None = None):
        message = "Hyper-V PowerShell Module is not available"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class PermissionDeniedError(PreflightError):
    """The caller is neither a Hyper-V administrator nor a Windows administrator."""

    def __init__(self):
        super().__init__(
            "Hyper-V commands have to be run as an Administrator "
            "or a member of the Hyper-V Administrators group"
        )


# --- Networking ---


class NoSwitchConfiguredError(MachineError):
    """An operation required a virtual switch but none was requested."""

    def __init__(self):
        super().__init__("no virtual switch given")


class SwitchNotFoundError(MachineError):
    """The requested virtual switch does not exist on the host."""

    def __init__(self, switch: str):
        self.switch = switch
        super().__init__(f"virtual switch {switch!r} not found")


class HostNotRunningError(MachineError):
    """The VM must be running for this operation."""

    def __init__(self, machine_name: str):
        self.machine_name = machine_name
        super().__init__(f"Host is not running: {machine_name}")


class IPNotFoundError(MachineError):
    """The VM is running but reports no IP address."""

    def __init__(self, machine_name: str):
        self.machine_name = machine_name
        super().__init__("IP not found")


# --- Backend ---


class StateQueryError(MachineError):
    """The hypervisor could not report the VM status."""

    def __init__(self, machine_name: str):
        self.machine_name = machine_name
        super().__init__("Failed to find the VM status")


class CommandExecutionError(MachineError):
    """A hypervisor command exited non-zero or could not be run."""

    def __init__(self, command: str, returncode: int | None, stderr: str = ""):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip() or "no error output"
        super().__init__(
            f"command {command!r} failed (exit {returncode}): {detail}"
        )


class DiskImageCopyError(MachineError):
    """The source disk image could not be copied into the store directory."""

    def __init__(self, source: str, target: str, detail: str):
        self.source = source
        self.target = target
        super().__init__(f"failed to copy disk image {source!r} to {target!r}: {detail}")


class ConfigUnmarshalError(MachineError):
    """An update payload could not be decoded into a machine descriptor."""

    pass


# --- Polling ---


class PollTimeoutError(MachineError):
    """A polling wait exceeded its deadline."""

    def __init__(self, description: str, timeout: float):
        self.description = description
        self.timeout = timeout
        super().__init__(f"timed out after {timeout:g}s waiting for {description}")


class PollCancelledError(MachineError):
    """A polling wait was cancelled by its caller."""

    def __init__(self, description: str):
        self.description = description
        super().__init__(f"cancelled while waiting for {description}")

"""Typed Hyper-V command vocabulary.

Each hypervisor operation is a frozen dataclass carrying typed parameters.
``Command.render()`` is the only place PowerShell text is produced; the
lifecycle code never assembles argument strings itself.
"""

from __future__ import annotations

from abc import ABC
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

BYTES_PER_MB = 1024 * 1024


class HypervOperation(str, Enum):
    """Kinds of hypervisor operations issued by the driver."""
    NEW_VM = "new_vm"
    START_VM = "start_vm"
    STOP_VM = "stop_vm"
    REMOVE_VM = "remove_vm"
    SET_MEMORY = "set_memory"
    SET_PROCESSOR = "set_processor"
    RESIZE_VHD = "resize_vhd"
    ADD_HARD_DISK = "add_hard_disk"
    REMOVE_NETWORK_ADAPTER = "remove_network_adapter"
    SET_NETWORK_ADAPTER = "set_network_adapter"
    LIST_SWITCHES = "list_switches"
    GET_STATE = "get_state"
    GET_IP = "get_ip"
    GET_HYPERV_MODULE = "get_hyperv_module"
    IS_HYPERV_ADMIN = "is_hyperv_admin"
    IS_WINDOWS_ADMIN = "is_windows_admin"


def quote(value: str) -> str:
    """Quote a value as a PowerShell single-quoted string literal."""
    return "'" + value.replace("'", "''") + "'"


def mb_to_bytes(mb: int) -> int:
    return mb * BYTES_PER_MB


@dataclass(frozen=True)
class Command(ABC):
    """A single hypervisor operation.

    Subclasses set ``operation`` and ``cmdlet`` and return their
    parameters from ``arguments()``. Query commands that are PowerShell
    expressions rather than cmdlet calls override ``render()`` instead.
    """

    operation: ClassVar[HypervOperation]
    cmdlet: ClassVar[str] = ""

    def arguments(self) -> list[str]:
        return []

    def render(self) -> str:
        return " ".join([self.cmdlet, *self.arguments()])


# --- VM lifecycle ---


@dataclass(frozen=True)
class NewVM(Command):
    operation = HypervOperation.NEW_VM
    cmdlet = "Hyper-V\\New-VM"

    name: str
    path: str
    memory_mb: int
    switch: str | None = None

    def arguments(self) -> list[str]:
        args = [
            quote(self.name),
            "-Path", quote(self.path),
            "-MemoryStartupBytes", str(mb_to_bytes(self.memory_mb)),
        ]
        if self.switch:
            args += ["-SwitchName", quote(self.switch)]
        return args


@dataclass(frozen=True)
class StartVM(Command):
    operation = HypervOperation.START_VM
    cmdlet = "Hyper-V\\Start-VM"

    name: str

    def arguments(self) -> list[str]:
        return [quote(self.name)]


@dataclass(frozen=True)
class StopVM(Command):
    """Graceful shutdown, or a hard power-off when ``force`` is set."""
    operation = HypervOperation.STOP_VM
    cmdlet = "Hyper-V\\Stop-VM"

    name: str
    force: bool = False

    def arguments(self) -> list[str]:
        args = [quote(self.name)]
        if self.force:
            args.append("-TurnOff")
        return args


@dataclass(frozen=True)
class RemoveVM(Command):
    operation = HypervOperation.REMOVE_VM
    cmdlet = "Hyper-V\\Remove-VM"

    name: str

    def arguments(self) -> list[str]:
        return [quote(self.name), "-Force"]


# --- Hardware settings ---


@dataclass(frozen=True)
class SetVMMemory(Command):
    """Set startup memory and/or toggle dynamic memory."""
    operation = HypervOperation.SET_MEMORY
    cmdlet = "Hyper-V\\Set-VMMemory"

    name: str
    startup_mb: int | None = None
    dynamic_memory_enabled: bool | None = None

    def arguments(self) -> list[str]:
        args = ["-VMName", quote(self.name)]
        if self.startup_mb is not None:
            args += ["-StartupBytes", str(mb_to_bytes(self.startup_mb))]
        if self.dynamic_memory_enabled is not None:
            args += [
                "-DynamicMemoryEnabled",
                "$true" if self.dynamic_memory_enabled else "$false",
            ]
        return args


@dataclass(frozen=True)
class SetVMProcessor(Command):
    operation = HypervOperation.SET_PROCESSOR
    cmdlet = "Hyper-V\\Set-VMProcessor"

    name: str
    count: int

    def arguments(self) -> list[str]:
        return [quote(self.name), "-Count", str(self.count)]


@dataclass(frozen=True)
class ResizeVHD(Command):
    operation = HypervOperation.RESIZE_VHD
    cmdlet = "Hyper-V\\Resize-VHD"

    path: str
    size_bytes: int

    def arguments(self) -> list[str]:
        return ["-Path", quote(self.path), "-SizeBytes", str(self.size_bytes)]


@dataclass(frozen=True)
class AddVMHardDiskDrive(Command):
    operation = HypervOperation.ADD_HARD_DISK
    cmdlet = "Hyper-V\\Add-VMHardDiskDrive"

    name: str
    path: str

    def arguments(self) -> list[str]:
        return ["-VMName", quote(self.name), "-Path", quote(self.path)]


# --- Networking ---


@dataclass(frozen=True)
class RemoveVMNetworkAdapter(Command):
    operation = HypervOperation.REMOVE_NETWORK_ADAPTER
    cmdlet = "Hyper-V\\Remove-VMNetworkAdapter"

    name: str

    def arguments(self) -> list[str]:
        return ["-VMName", quote(self.name)]


@dataclass(frozen=True)
class SetVMNetworkAdapter(Command):
    operation = HypervOperation.SET_NETWORK_ADAPTER
    cmdlet = "Hyper-V\\Set-VMNetworkAdapter"

    name: str
    static_mac: str

    def arguments(self) -> list[str]:
        return ["-VMName", quote(self.name), "-StaticMacAddress", quote(self.static_mac)]


@dataclass(frozen=True)
class ListSwitches(Command):
    """List virtual switch names, one per line, UTF-8 encoded."""
    operation = HypervOperation.LIST_SWITCHES

    def render(self) -> str:
        return (
            "[Console]::OutputEncoding = [Text.Encoding]::UTF8; "
            "(Hyper-V\\Get-VMSwitch).Name"
        )


# --- Queries ---


@dataclass(frozen=True)
class GetVMState(Command):
    operation = HypervOperation.GET_STATE

    name: str

    def render(self) -> str:
        return f"( Hyper-V\\Get-VM {quote(self.name)} ).state"


@dataclass(frozen=True)
class GetVMIPAddress(Command):
    """First IP address of the first network adapter."""
    operation = HypervOperation.GET_IP

    name: str

    def render(self) -> str:
        return f"(( Hyper-V\\Get-VM {quote(self.name)} ).networkadapters[0]).ipaddresses[0]"


@dataclass(frozen=True)
class GetHypervModule(Command):
    operation = HypervOperation.GET_HYPERV_MODULE

    def render(self) -> str:
        return "@(Get-Module -ListAvailable hyper-v).Name | Get-Unique"


@dataclass(frozen=True)
class IsHypervAdministrator(Command):
    """Count of "Hyper-V Administrators" (S-1-5-32-578) memberships."""
    operation = HypervOperation.IS_HYPERV_ADMIN

    def render(self) -> str:
        return (
            "@([Security.Principal.WindowsIdentity]::GetCurrent().Groups "
            "| Select-String -Pattern 'S-1-5-32-578').Count"
        )


@dataclass(frozen=True)
class IsWindowsAdministrator(Command):
    operation = HypervOperation.IS_WINDOWS_ADMIN

    def render(self) -> str:
        return (
            "@([Security.Principal.WindowsPrincipal]"
            "[Security.Principal.WindowsIdentity]::GetCurrent())"
            ".IsInRole([Security.Principal.WindowsBuiltInRole] 'Administrator')"
        )

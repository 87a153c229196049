"""Hypervisor command backends."""

from hyperv_machine.backend.base import CommandBackend
from hyperv_machine.backend.commands import Command, HypervOperation
from hyperv_machine.backend.parsing import parse_lines
from hyperv_machine.backend.powershell import PowerShellBackend

__all__ = [
    "Command",
    "CommandBackend",
    "HypervOperation",
    "PowerShellBackend",
    "parse_lines",
]

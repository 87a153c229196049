"""Command backend abstraction for hypervisor management."""

from __future__ import annotations

from abc import ABC, abstractmethod

from hyperv_machine.backend.commands import Command


class CommandBackend(ABC):
    """Abstract hypervisor command backend.

    A backend runs one command to completion and returns its raw stdout.
    Any failure raises CommandExecutionError; partial output is never
    returned and commands are never retried.
    """

    name: str = ""

    @abstractmethod
    def is_available(self) -> bool:
        """Return True if the management tool can be resolved on this host."""

    @abstractmethod
    def execute(self, command: Command) -> str:
        """Run ``command`` synchronously and return its stdout verbatim."""

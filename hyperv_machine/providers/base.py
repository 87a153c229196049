"""Base driver interface consumed by the provisioning tool."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import ValidationError

from hyperv_machine.errors import ConfigUnmarshalError
from hyperv_machine.schemas import MachineDescriptor
from hyperv_machine.state import MachineState

# Port the container engine listens on inside the machine.
ENGINE_PORT = 2376


class Driver(ABC):
    """Abstract base class for single-machine drivers.

    Every operation runs to completion before returning. Drivers are not
    thread-safe; callers must serialize access to one instance.
    """

    descriptor: MachineDescriptor

    @property
    @abstractmethod
    def driver_name(self) -> str:
        """Driver name (e.g., 'hyperv')."""
        ...

    @abstractmethod
    def pre_create_check(self) -> None:
        """Verify the host can create the machine; raise on the first problem."""
        ...

    @abstractmethod
    def create(self) -> None:
        """Create the machine and start it."""
        ...

    @abstractmethod
    def start(self) -> None:
        ...

    @abstractmethod
    def stop(self) -> None:
        """Gracefully stop the machine and wait until it is no longer running."""
        ...

    @abstractmethod
    def kill(self) -> None:
        """Forcefully power off the machine and wait until it is no longer running."""
        ...

    @abstractmethod
    def remove(self) -> None:
        ...

    @abstractmethod
    def get_state(self) -> MachineState:
        ...

    @abstractmethod
    def get_ip(self) -> str:
        ...

    @abstractmethod
    def update_config(self, new: MachineDescriptor) -> None:
        """Converge the machine to ``new`` and adopt it as the held descriptor."""
        ...

    def update_config_raw(self, raw: bytes | str) -> None:
        """Decode a JSON descriptor snapshot and reconcile against it."""
        try:
            new = MachineDescriptor.model_validate_json(raw)
        except ValidationError as e:
            raise ConfigUnmarshalError(f"invalid machine config: {e}") from e
        self.update_config(new)

    def restart(self) -> None:
        """Stop then start; a failed stop is raised and start is not attempted."""
        self.stop()
        self.start()

    def get_url(self) -> str:
        """Engine endpoint URL, or an empty string when no address is known yet."""
        ip = self.get_ip()
        if not ip:
            return ""
        host = f"[{ip}]" if ":" in ip else ip
        return f"tcp://{host}:{ENGINE_PORT}"

    def get_ssh_hostname(self) -> str:
        return self.get_ip()

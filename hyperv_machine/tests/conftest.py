from __future__ import annotations

import pytest

from hyperv_machine.backend.base import CommandBackend
from hyperv_machine.backend.commands import Command, HypervOperation
from hyperv_machine.config import settings
from hyperv_machine.errors import CommandExecutionError
from hyperv_machine.providers.hyperv import HypervDriver
from hyperv_machine.schemas import MachineDescriptor


class FakeBackend(CommandBackend):
    """Scripted command backend.

    Responses are queued per operation. Each call pops the next queued
    response; the last one is sticky so repeated polls keep seeing it.
    A queued exception is raised instead of returned. Operations with no
    script return empty output.
    """

    name = "fake"

    def __init__(self, available: bool = True):
        self.available = available
        self.commands: list[Command] = []
        self._responses: dict[HypervOperation, list[str | Exception]] = {}

    def respond(self, operation: HypervOperation, *outputs: str | Exception) -> "FakeBackend":
        self._responses[operation] = list(outputs)
        return self

    def fail(self, operation: HypervOperation, stderr: str = "boom") -> "FakeBackend":
        return self.respond(
            operation, CommandExecutionError(operation.value, 1, stderr)
        )

    def is_available(self) -> bool:
        return self.available

    def execute(self, command: Command) -> str:
        self.commands.append(command)
        queue = self._responses.get(command.operation)
        if not queue:
            return ""
        output = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(output, Exception):
            raise output
        return output

    @property
    def operations(self) -> list[HypervOperation]:
        return [c.operation for c in self.commands]

    def issued(self, operation: HypervOperation) -> list[Command]:
        return [c for c in self.commands if c.operation == operation]


@pytest.fixture(autouse=True)
def _fast_polling(monkeypatch):
    """Keep polling loops from sleeping during unit tests."""
    monkeypatch.setattr(settings, "poll_interval", 0.0)
    monkeypatch.setattr(settings, "ip_wait_timeout", 5.0)
    monkeypatch.setattr(settings, "stop_wait_timeout", 5.0)
    yield


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def source_image(tmp_path):
    """A fake source disk image outside the store directory."""
    image = tmp_path / "bundle" / "crc.vhdx"
    image.parent.mkdir()
    image.write_bytes(b"vhdx-image")
    return image


@pytest.fixture
def store_path(tmp_path):
    store = tmp_path / "machines" / "crc"
    store.mkdir(parents=True)
    return store


@pytest.fixture
def make_driver(backend, store_path, source_image):
    """Build a HypervDriver over the fake backend with descriptor overrides."""

    def _make(**fields) -> HypervDriver:
        values = {
            "machine_name": "crc",
            "store_path": str(store_path),
            "image_source_path": str(source_image),
        }
        values.update(fields)
        return HypervDriver(MachineDescriptor(**values), backend, poll_interval=0.0)

    return _make

"""Machine descriptor and HTTP protocol schemas.

These Pydantic models define the machine descriptor persisted by the
provisioning tool and the payloads exchanged over the driver's HTTP
surface.
"""

from pydantic import BaseModel, Field

from hyperv_machine.state import MachineState
from hyperv_machine.version import __version__

DEFAULT_MEMORY_MB = 8192
DEFAULT_CPU_COUNT = 4


class MachineDescriptor(BaseModel):
    """Desired and observed configuration of one VM.

    The VM state is intentionally absent: it is always queried from the
    hypervisor. ``ip_address`` is only meaningful while the VM runs with a
    virtual switch attached.
    """
    machine_name: str
    store_path: str = "."

    # Compute
    memory: int = DEFAULT_MEMORY_MB  # MB
    cpu: int = DEFAULT_CPU_COUNT

    # Network
    virtual_switch: str = ""  # Empty means no network adapter
    mac_address: str = ""
    ip_address: str = ""

    # Storage
    disk_capacity: int = 0  # bytes
    image_source_path: str = ""
    image_format: str = "vhdx"

    # Policy
    disable_dynamic_memory: bool = False

    bundle_url: str = ""


# --- HTTP responses ---


class HealthResponse(BaseModel):
    status: str = "ok"
    driver: str
    machine_name: str
    version: str = __version__
    commit: str = "unknown"


class StateResponse(BaseModel):
    machine_name: str
    state: MachineState


class IPResponse(BaseModel):
    machine_name: str
    ip_address: str


class URLResponse(BaseModel):
    machine_name: str
    url: str = Field(default="", description="Empty while the machine is not yet reachable")


class ActionResponse(BaseModel):
    """Result of a lifecycle action."""
    success: bool = True
    action: str
    machine: MachineDescriptor


class ErrorResponse(BaseModel):
    error: str
    detail: str

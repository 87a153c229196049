"""Hyper-V machine agent - HTTP surface for the machine driver.

The provisioning tool drives one Hyper-V VM through these endpoints:
- Lifecycle actions (preflight, create, start, stop, kill, restart, remove)
- State, IP and engine URL queries
- Configuration updates reconciled against the running VM
- Health and Prometheus metrics
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from hyperv_machine.config import settings
from hyperv_machine.errors import (
    CommandExecutionError,
    ConfigUnmarshalError,
    DiskImageCopyError,
    HostNotRunningError,
    IPNotFoundError,
    MachineError,
    NoSwitchConfiguredError,
    PollCancelledError,
    PollTimeoutError,
    PreflightError,
    StateQueryError,
    SwitchNotFoundError,
)
from hyperv_machine.logging_config import setup_logging
from hyperv_machine.metrics import get_metrics
from hyperv_machine.providers.base import Driver
from hyperv_machine.providers.hyperv import HypervDriver
from hyperv_machine.schemas import (
    ActionResponse,
    ErrorResponse,
    HealthResponse,
    IPResponse,
    MachineDescriptor,
    StateResponse,
    URLResponse,
)
from hyperv_machine.version import __version__, get_commit

setup_logging(settings.log_level)

logger = logging.getLogger(__name__)

# Order matters: the first matching class wins.
ERROR_STATUS: list[tuple[type[MachineError], int]] = [
    (NoSwitchConfiguredError, 400),
    (SwitchNotFoundError, 404),
    (HostNotRunningError, 409),
    (PollCancelledError, 409),
    (PreflightError, 412),
    (ConfigUnmarshalError, 422),
    (CommandExecutionError, 502),
    (StateQueryError, 502),
    (IPNotFoundError, 502),
    (PollTimeoutError, 504),
    (DiskImageCopyError, 500),
]

# Driver instances are not thread-safe; every call goes through this lock.
_driver_lock = threading.Lock()
# Guards lazy construction so concurrent first requests share one driver.
_driver_init_lock = threading.Lock()
_driver: Driver | None = None


def get_driver() -> Driver:
    """Lazy-initialize the machine driver from settings."""
    global _driver
    if _driver is None:
        with _driver_init_lock:
            if _driver is None:
                _driver = HypervDriver.from_settings(settings)
    return _driver


def set_driver(driver: Driver | None) -> None:
    """Replace the process-wide driver (used by embedding code and tests)."""
    global _driver
    _driver = driver


def _status_for(error: MachineError) -> int:
    for error_type, status in ERROR_STATUS:
        if isinstance(error, error_type):
            return status
    return 500


def _locked(fn: Callable[[Driver], object]):
    with _driver_lock:
        return fn(get_driver())


def _action(name: str, fn: Callable[[Driver], None]) -> ActionResponse:
    logger.info("Machine action: %s", name)

    def _run(driver: Driver) -> ActionResponse:
        fn(driver)
        return ActionResponse(action=name, machine=driver.descriptor)

    return _locked(_run)


app = FastAPI(
    title="Hyper-V Machine Agent",
    version=__version__,
)


@app.exception_handler(MachineError)
async def machine_error_handler(request: Request, exc: MachineError) -> JSONResponse:
    status = _status_for(exc)
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    else:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc)
    body = ErrorResponse(error=type(exc).__name__, detail=str(exc))
    return JSONResponse(status_code=status, content=body.model_dump())


# --- Health Endpoints ---

@app.get("/health")
def health() -> HealthResponse:
    driver = get_driver()
    return HealthResponse(
        driver=driver.driver_name,
        machine_name=driver.descriptor.machine_name,
        commit=get_commit(),
    )


@app.get("/metrics")
def metrics() -> Response:
    body, content_type = get_metrics()
    return Response(content=body, media_type=content_type)


# --- Query Endpoints ---

@app.get("/machine")
def get_machine() -> MachineDescriptor:
    return _locked(lambda d: d.descriptor)


@app.get("/machine/state")
def get_machine_state() -> StateResponse:
    return _locked(
        lambda d: StateResponse(machine_name=d.descriptor.machine_name, state=d.get_state())
    )


@app.get("/machine/ip")
def get_machine_ip() -> IPResponse:
    return _locked(
        lambda d: IPResponse(machine_name=d.descriptor.machine_name, ip_address=d.get_ip())
    )


@app.get("/machine/url")
def get_machine_url() -> URLResponse:
    return _locked(
        lambda d: URLResponse(machine_name=d.descriptor.machine_name, url=d.get_url())
    )


# --- Lifecycle Endpoints ---

@app.post("/machine/preflight")
def preflight() -> ActionResponse:
    return _action("preflight", lambda d: d.pre_create_check())


@app.post("/machine/create")
def create_machine() -> ActionResponse:
    """Run preflight checks, then create and start the machine."""

    def _create(driver: Driver) -> None:
        driver.pre_create_check()
        driver.create()

    return _action("create", _create)


@app.post("/machine/start")
def start_machine() -> ActionResponse:
    return _action("start", lambda d: d.start())


@app.post("/machine/stop")
def stop_machine() -> ActionResponse:
    return _action("stop", lambda d: d.stop())


@app.post("/machine/kill")
def kill_machine() -> ActionResponse:
    return _action("kill", lambda d: d.kill())


@app.post("/machine/restart")
def restart_machine() -> ActionResponse:
    return _action("restart", lambda d: d.restart())


@app.delete("/machine")
def remove_machine() -> ActionResponse:
    return _action("remove", lambda d: d.remove())


# --- Configuration Endpoints ---

@app.put("/machine/config")
async def update_machine_config(request: Request) -> ActionResponse:
    """Reconcile the machine against a full descriptor snapshot.

    The raw body is decoded by the driver so malformed payloads surface as
    ConfigUnmarshalError, the same as for any other driver caller.
    """
    raw = await request.body()
    # Reconciliation issues blocking hypervisor commands; keep it off the loop.
    return await run_in_threadpool(
        _action, "update_config", lambda d: d.update_config_raw(raw)
    )


# --- Entry point ---

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "hyperv_machine.main:app",
        host=settings.agent_host,
        port=settings.agent_port,
        reload=False,
        timeout_keep_alive=300,  # create/start block until the VM has an IP
    )

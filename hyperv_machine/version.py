"""Version and build information for the driver.

Release builds drop VERSION and GIT_SHA marker files next to this module.
Without them the version comes from installed package metadata and the
commit from HYPERV_MACHINE_GIT_SHA.
"""

import os
from importlib import metadata
from pathlib import Path

DISTRIBUTION_NAME = "hyperv-machine"


def _read_marker(name: str) -> str:
    """Contents of a build marker file beside this module, or ""."""
    path = Path(__file__).parent / name
    try:
        return path.read_text().strip()
    except OSError:
        return ""


def get_version() -> str:
    """Get the driver version (e.g., "0.1.0")."""
    version = _read_marker("VERSION")
    if version:
        return version

    try:
        return metadata.version(DISTRIBUTION_NAME)
    except metadata.PackageNotFoundError:
        return "0.0.0"


__version__ = get_version()


def get_commit() -> str:
    """Get the build commit SHA, or "unknown" for development checkouts."""
    return (
        os.getenv("HYPERV_MACHINE_GIT_SHA", "").strip()
        or _read_marker("GIT_SHA")
        or "unknown"
    )

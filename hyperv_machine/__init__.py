"""Hyper-V machine driver.

Manages the lifecycle of a single Hyper-V virtual machine:
- Create / start / stop / kill / restart / remove via PowerShell cmdlets
- Virtual switch selection and IP discovery
- Host preflight checks
- Reconciliation of configuration updates against the running VM
"""

from hyperv_machine.version import __version__

__all__ = ["__version__"]

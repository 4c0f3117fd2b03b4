"""netclass - Host connectivity classification and change monitoring."""

__version__ = "0.1.0"
__author__ = "netclass contributors"
__description__ = "Reports the host's connectivity class and pushes updates when it changes"

from netclass.core.types import ConnectivityClass, ConnectivitySnapshot, NetworkInterface
from netclass.services.connectivity_monitor import ConnectivityMonitor
from netclass.services.network_service import NetworkService

__all__ = [
    "ConnectivityClass",
    "ConnectivitySnapshot",
    "ConnectivityMonitor",
    "NetworkInterface",
    "NetworkService",
    "__version__",
]

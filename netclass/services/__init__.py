"""
Services subpackage - classification, monitoring and the exposed surfaces.

- classify: Reduces an interface list to a single connectivity class
- ConnectivityMonitor: Background poll loop emitting snapshots on change
- EventChannel: Single-slot push surface for snapshots
- NetworkService: Method-call surface plus event channel
"""

from netclass.services.classifier import classify, interface_medium
from netclass.services.connectivity_monitor import ConnectivityMonitor
from netclass.services.event_channel import EventChannel
from netclass.services.network_service import MethodResult, MethodStatus, NetworkService

__all__ = [
    "classify",
    "interface_medium",
    "ConnectivityMonitor",
    "EventChannel",
    "MethodResult",
    "MethodStatus",
    "NetworkService",
]

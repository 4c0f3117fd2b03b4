"""
Network Service - request/response and push surfaces over the monitor.

The GUI glue calls handle() with a method name and forwards results; it
subscribes to snapshot records through the event channel. Monitoring only
starts and stops through startNetworkMonitoring / stopNetworkMonitoring.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from loguru import logger

from netclass.core.config import Config
from netclass.core.constants import METHOD_CHANNEL
from netclass.core.protocols import InterfaceProvider
from netclass.core.types import ConnectivitySnapshot
from netclass.services.connectivity_monitor import ConnectivityMonitor
from netclass.services.event_channel import EventChannel
from netclass.utils.network_interface import get_interface_provider


class MethodStatus(Enum):
    """Outcome of a method call."""

    SUCCESS = "success"
    NOT_IMPLEMENTED = "not_implemented"
    ERROR = "error"


@dataclass(frozen=True)
class MethodResult:
    """Response to a single method call."""

    status: MethodStatus
    value: Any = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == MethodStatus.SUCCESS

    @classmethod
    def success(cls, value: Any = None) -> "MethodResult":
        return cls(MethodStatus.SUCCESS, value)

    @classmethod
    def not_implemented(cls, method: str) -> "MethodResult":
        return cls(MethodStatus.NOT_IMPLEMENTED, message=f"Method '{method}' is not implemented")

    @classmethod
    def error(cls, message: str) -> "MethodResult":
        return cls(MethodStatus.ERROR, message=message)


class NetworkService:
    """Owns the monitor and the event channel for one application."""

    def __init__(
        self,
        provider: Optional[InterfaceProvider] = None,
        events: Optional[EventChannel] = None,
        poll_interval: Optional[float] = None,
        cancellable_sleep: Optional[bool] = None,
    ):
        self.name = METHOD_CHANNEL
        self.events = events or EventChannel()

        monitor_kwargs = {}
        if cancellable_sleep is not None:
            monitor_kwargs["cancellable_sleep"] = cancellable_sleep
        self._monitor = ConnectivityMonitor(
            provider or get_interface_provider(),
            sink=self.events.send,
            poll_interval=poll_interval,
            **monitor_kwargs,
        )

        self._handlers: Dict[str, Callable[[], Any]] = {
            "isConnectedToWifiOrEthernet": self.is_connected_to_wifi_or_ethernet,
            "getNetworkType": self.get_network_type,
            "isConnected": self.is_connected,
            "startNetworkMonitoring": self.start_network_monitoring,
            "stopNetworkMonitoring": self.stop_network_monitoring,
        }

    @classmethod
    def from_config(cls, config: Config, provider: Optional[InterfaceProvider] = None) -> "NetworkService":
        """Build a service using the poll settings of a Config."""
        return cls(
            provider=provider,
            poll_interval=config.poll_interval,
            cancellable_sleep=config.cancellable_sleep,
        )

    @property
    def monitor(self) -> ConnectivityMonitor:
        return self._monitor

    @property
    def methods(self):
        return list(self._handlers)

    def handle(self, method: str, arguments: Any = None) -> MethodResult:
        """
        Dispatch a method call by name.

        Args:
            method: Method name as sent by the caller
            arguments: Ignored; none of the methods take arguments

        Returns:
            MethodResult; unknown names yield NOT_IMPLEMENTED, never an exception
        """
        handler = self._handlers.get(method)
        if handler is None:
            logger.debug(f"[NetworkService] Unknown method: {method}")
            return MethodResult.not_implemented(method)

        try:
            return MethodResult.success(handler())
        except Exception as e:
            logger.error(f"[NetworkService] Method {method} failed: {e}")
            return MethodResult.error(str(e))

    def snapshot(self) -> ConnectivitySnapshot:
        return self._monitor.current_snapshot()

    def is_connected_to_wifi_or_ethernet(self) -> bool:
        return self.snapshot().is_wifi_or_ethernet

    def get_network_type(self) -> str:
        return self.snapshot().network_type.value

    def is_connected(self) -> bool:
        return self.snapshot().is_connected

    def start_network_monitoring(self) -> None:
        self._monitor.start()

    def stop_network_monitoring(self) -> None:
        self._monitor.stop()

    def dispose(self) -> None:
        """Shut down: stops monitoring and detaches the listener."""
        self._monitor.close()
        self.events.cancel()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.dispose()

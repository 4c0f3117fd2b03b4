"""Core types and enums."""
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class OperationalState(Enum):
    """Operational state reported by the platform for an interface."""

    UP = "up"
    DOWN = "down"
    UNKNOWN = "unknown"

    def __str__(self):
        return self.value


class Medium(Enum):
    """Physical medium hint for an interface."""

    ETHERNET = "ethernet"
    WIFI = "wifi"
    MOBILE = "mobile"
    UNKNOWN = "unknown"

    def __str__(self):
        return self.value


class ConnectivityClass(Enum):
    """Coarse connectivity category, ordered by priority: ETHERNET > WIFI > MOBILE > NONE."""

    NONE = "none"
    MOBILE = "mobile"
    WIFI = "wifi"
    ETHERNET = "ethernet"

    @property
    def priority(self) -> int:
        """Rank used for ordering (higher wins)."""
        return _PRIORITY[self]

    def __lt__(self, other):
        if isinstance(other, ConnectivityClass):
            return self.priority < other.priority
        return NotImplemented

    def __le__(self, other):
        if isinstance(other, ConnectivityClass):
            return self.priority <= other.priority
        return NotImplemented

    def __gt__(self, other):
        if isinstance(other, ConnectivityClass):
            return self.priority > other.priority
        return NotImplemented

    def __ge__(self, other):
        if isinstance(other, ConnectivityClass):
            return self.priority >= other.priority
        return NotImplemented

    @classmethod
    def from_medium(cls, medium: Medium) -> "ConnectivityClass":
        """Map a concrete medium to its class (UNKNOWN maps to NONE)."""
        return _MEDIUM_TO_CLASS.get(medium, cls.NONE)

    def __str__(self):
        return self.value


_PRIORITY = {
    ConnectivityClass.NONE: 0,
    ConnectivityClass.MOBILE: 1,
    ConnectivityClass.WIFI: 2,
    ConnectivityClass.ETHERNET: 3,
}

_MEDIUM_TO_CLASS = {
    Medium.ETHERNET: ConnectivityClass.ETHERNET,
    Medium.WIFI: ConnectivityClass.WIFI,
    Medium.MOBILE: ConnectivityClass.MOBILE,
}


@dataclass(frozen=True)
class NetworkInterface:
    """
    A network interface as enumerated by a platform provider.

    wireless and link_type are raw platform signals; None means the platform
    could not tell.
    """

    name: str
    has_valid_address: bool
    operational_state: OperationalState = OperationalState.UNKNOWN
    medium_hint: Medium = Medium.UNKNOWN
    wireless: Optional[bool] = None
    link_type: Optional[int] = None

    @property
    def is_up(self) -> bool:
        return self.operational_state == OperationalState.UP


def now_millis() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class ConnectivitySnapshot:
    """Immutable point-in-time connectivity report."""

    network_type: ConnectivityClass
    timestamp_ms: int

    @classmethod
    def capture(cls, network_type: ConnectivityClass) -> "ConnectivitySnapshot":
        """Build a snapshot stamped with the current time."""
        return cls(network_type=network_type, timestamp_ms=now_millis())

    @property
    def is_connected(self) -> bool:
        return self.network_type != ConnectivityClass.NONE

    @property
    def is_wifi_or_ethernet(self) -> bool:
        return self.network_type in (ConnectivityClass.WIFI, ConnectivityClass.ETHERNET)

    def state_key(self) -> Tuple[bool, bool, ConnectivityClass]:
        """Fields compared for change detection (timestamp excluded)."""
        return self.is_connected, self.is_wifi_or_ethernet, self.network_type

    def to_dict(self) -> dict:
        """Structured record delivered to event subscribers."""
        return {
            "isConnected": self.is_connected,
            "isWifiOrEthernet": self.is_wifi_or_ethernet,
            "networkType": self.network_type.value,
            "timestamp": self.timestamp_ms,
        }

"""Protocols for type-safe dependency injection."""
from typing import List, Protocol

from netclass.core.types import NetworkInterface


class InterfaceProvider(Protocol):
    """Platform capability for enumerating network interfaces."""

    def list_active_interfaces(self) -> List[NetworkInterface]:
        """Enumerate interfaces currently known to the platform."""
        ...

    def has_any_connectivity(self) -> bool:
        """Cheap probe: is there any usable address or route at all."""
        ...

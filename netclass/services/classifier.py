"""Interface Classifier - reduces an interface list to a single connectivity class."""

import re
from typing import Iterable, Optional

from netclass.core.types import ConnectivityClass, Medium, NetworkInterface

# ARPHRD_ETHER: Ethernet-framed link (wired NICs, but also many Wi-Fi and USB modems)
LINK_TYPE_ETHER = 1

# Checked in order: wireless names first, so "wlan0" never matches the "en" rule
WIFI_NAME_PATTERNS = ("wl", "wlan", "wifi", "wi-fi")  # "Wi-Fi" is the Windows adapter name
ETHERNET_NAME_PATTERNS = ("eth", "en", "em")
MOBILE_NAME_PATTERNS = ("wwan", "ppp")
# USB tethering only counts as mobile when the link is known to be Ethernet-framed
ETHER_LINK_MOBILE_NAME_PATTERNS = MOBILE_NAME_PATTERNS + ("usb",)

_LOOPBACK_NAME = re.compile(r"^lo\d*$", re.IGNORECASE)


def is_loopback(interface: NetworkInterface) -> bool:
    """Return True for loopback interfaces (lo, lo0, Windows 'Loopback Pseudo-Interface')."""
    name = interface.name.strip()
    return bool(_LOOPBACK_NAME.match(name)) or name.lower().startswith("loopback")


def is_active(interface: NetworkInterface) -> bool:
    """An active interface is up, holds a valid address and is not loopback."""
    return interface.is_up and interface.has_valid_address and not is_loopback(interface)


def medium_from_name(name: str, mobile_patterns=MOBILE_NAME_PATTERNS) -> Optional[Medium]:
    """Guess the medium from common interface naming conventions."""
    lowered = name.lower()
    if any(pattern in lowered for pattern in WIFI_NAME_PATTERNS):
        return Medium.WIFI
    if any(pattern in lowered for pattern in ETHERNET_NAME_PATTERNS):
        return Medium.ETHERNET
    if any(pattern in lowered for pattern in mobile_patterns):
        return Medium.MOBILE
    return None


def interface_medium(interface: NetworkInterface) -> Medium:
    """
    Derive the medium of a single interface.

    Precedence:
    1. Explicit medium hint from the platform
    2. Wireless capability flag -> WIFI
    3. Ethernet-framed link type, refined by name
    4. Name heuristics alone when the link type is unknown
    5. ETHERNET as the conservative default

    Never returns Medium.UNKNOWN.
    """
    if interface.medium_hint != Medium.UNKNOWN:
        return interface.medium_hint

    if interface.wireless:
        return Medium.WIFI

    if interface.link_type == LINK_TYPE_ETHER:
        by_name = medium_from_name(interface.name, ETHER_LINK_MOBILE_NAME_PATTERNS)
    else:
        by_name = medium_from_name(interface.name)

    return by_name or Medium.ETHERNET


def classify(interfaces: Iterable[NetworkInterface]) -> ConnectivityClass:
    """
    Classify the host's connectivity from its interface list.

    The first ETHERNET interface wins immediately. Otherwise the best of
    WIFI > MOBILE seen wins, ties resolved by first seen. No active
    interface gives NONE.
    """
    best = ConnectivityClass.NONE

    for interface in interfaces:
        if not is_active(interface):
            continue

        current = ConnectivityClass.from_medium(interface_medium(interface))
        if current == ConnectivityClass.ETHERNET:
            return current
        if current > best:
            best = current

    return best

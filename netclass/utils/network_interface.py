"""Network interface providers - Cross-platform support."""
import ipaddress
import json
import os
import re
import socket
import subprocess
from typing import Dict, List, Optional, Tuple

import psutil
from loguru import logger

from netclass.core.constants import SUBPROCESS_TIMEOUT, SYSFS_NET_DIR
from netclass.core.types import Medium, NetworkInterface, OperationalState
from netclass.utils.platform_utils import Platform, PlatformUtils

# (medium_hint, wireless, link_type)
MediumSignals = Tuple[Medium, Optional[bool], Optional[int]]

NO_SIGNALS: MediumSignals = (Medium.UNKNOWN, None, None)

# IANA ifType values reported by Get-NetAdapter
WINDOWS_IF_TYPES = {
    6: Medium.ETHERNET,  # ethernetCsmacd
    62: Medium.ETHERNET,  # fastEther
    69: Medium.ETHERNET,  # fastEtherFX
    117: Medium.ETHERNET,  # gigabitEthernet
    71: Medium.WIFI,  # ieee80211
    243: Medium.MOBILE,  # wwanPP
    244: Medium.MOBILE,  # wwanPP2
    23: Medium.MOBILE,  # ppp
    28: Medium.MOBILE,  # slip
}

MACOS_MOBILE_PREFIXES = ("pdp_ip", "cellular")
MACOS_WIFI_PORTS = ("wi-fi", "airport")


def is_valid_ipv4(address: str) -> bool:
    """True for a usable IPv4 address (not 0.0.0.0, not loopback)."""
    try:
        ip = ipaddress.IPv4Address(address)
    except (ipaddress.AddressValueError, ValueError):
        return False
    return not (ip.is_unspecified or ip.is_loopback)


class PsutilInterfaceProvider:
    """
    Generic provider built on psutil.

    Subclasses add platform-specific medium signals and operational state.
    Interfaces are reported in the order the platform enumerates them and
    loopback is not filtered here (the classifier owns that rule).
    """

    def list_active_interfaces(self) -> List[NetworkInterface]:
        addresses = self._ipv4_addresses()
        stats = self._interface_stats()

        interfaces = []
        for name in addresses:
            medium_hint, wireless, link_type = self._medium_signals(name)
            interfaces.append(
                NetworkInterface(
                    name=name,
                    has_valid_address=any(is_valid_ipv4(ip) for ip in addresses[name]),
                    operational_state=self._operational_state(name, stats),
                    medium_hint=medium_hint,
                    wireless=wireless,
                    link_type=link_type,
                )
            )
        return interfaces

    def has_any_connectivity(self) -> bool:
        """Any non-loopback interface holding a valid IPv4 address."""
        try:
            addresses = self._ipv4_addresses()
        except Exception as e:
            logger.debug(f"[InterfaceProvider] Address lookup failed: {e}")
            return False
        return any(is_valid_ipv4(ip) for ips in addresses.values() for ip in ips)

    @staticmethod
    def _ipv4_addresses() -> Dict[str, List[str]]:
        result: Dict[str, List[str]] = {}
        for name, addrs in psutil.net_if_addrs().items():
            result[name] = [a.address for a in addrs if a.family == socket.AF_INET]
        return result

    @staticmethod
    def _interface_stats() -> dict:
        try:
            return psutil.net_if_stats()
        except Exception as e:
            logger.debug(f"[InterfaceProvider] Interface stats unavailable: {e}")
            return {}

    def _operational_state(self, name: str, stats: dict) -> OperationalState:
        stat = stats.get(name)
        if stat is None:
            return OperationalState.UNKNOWN
        return OperationalState.UP if stat.isup else OperationalState.DOWN

    def _medium_signals(self, name: str) -> MediumSignals:
        return NO_SIGNALS


class LinuxInterfaceProvider(PsutilInterfaceProvider):
    """Linux provider reading operstate, wireless and link type from sysfs."""

    def __init__(self, sysfs_dir: str = SYSFS_NET_DIR):
        self._sysfs_dir = sysfs_dir

    def has_any_connectivity(self) -> bool:
        try:
            with socket.socket(socket.AF_INET, socket.SOCK_DGRAM):
                pass
        except OSError as e:
            logger.debug(f"[LinuxInterfaceProvider] Cannot open socket: {e}")
            return False
        return super().has_any_connectivity()

    def _read_sysfs(self, name: str, attribute: str) -> Optional[str]:
        path = os.path.join(self._sysfs_dir, name, attribute)
        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.readline().strip()
        except OSError:
            return None

    def _operational_state(self, name: str, stats: dict) -> OperationalState:
        state = self._read_sysfs(name, "operstate")
        if state == "up":
            return OperationalState.UP
        if state == "down":
            return OperationalState.DOWN
        return OperationalState.UNKNOWN

    def _medium_signals(self, name: str) -> MediumSignals:
        wireless = os.path.exists(os.path.join(self._sysfs_dir, name, "wireless"))

        link_type = None
        raw_type = self._read_sysfs(name, "type")
        if raw_type:
            try:
                link_type = int(raw_type)
            except ValueError:
                logger.debug(f"[LinuxInterfaceProvider] Unparseable link type for {name}: {raw_type!r}")

        return Medium.UNKNOWN, wireless, link_type


class WindowsInterfaceProvider(PsutilInterfaceProvider):
    """Windows provider using Get-NetAdapter for adapter types."""

    POWERSHELL_COMMAND = [
        "powershell",
        "-NoProfile",
        "-NonInteractive",
        "-Command",
        "Get-NetAdapter | Select-Object Name, InterfaceType | ConvertTo-Json -Compress",
    ]

    def __init__(self):
        self._adapter_types: Dict[str, int] = {}

    def list_active_interfaces(self) -> List[NetworkInterface]:
        self._adapter_types = self._query_adapter_types()
        return super().list_active_interfaces()

    def has_any_connectivity(self) -> bool:
        try:
            import ctypes

            flags = ctypes.c_ulong(0)
            return ctypes.windll.wininet.InternetGetConnectedState(ctypes.byref(flags), 0) != 0
        except (AttributeError, OSError) as e:
            logger.debug(f"[WindowsInterfaceProvider] InternetGetConnectedState unavailable: {e}")
            return super().has_any_connectivity()

    def _query_adapter_types(self) -> Dict[str, int]:
        """Map adapter name to IANA ifType; empty on any failure."""
        try:
            result = subprocess.run(
                self.POWERSHELL_COMMAND,
                capture_output=True,
                text=True,
                timeout=SUBPROCESS_TIMEOUT,
                check=False,
                creationflags=PlatformUtils.get_subprocess_flags(),
                startupinfo=PlatformUtils.get_startupinfo(),
            )
        except subprocess.TimeoutExpired:
            logger.warning("[WindowsInterfaceProvider] Timeout while running Get-NetAdapter")
            return {}
        except (OSError, subprocess.SubprocessError) as e:
            logger.warning(f"[WindowsInterfaceProvider] Error running Get-NetAdapter: {e}")
            return {}

        if result.returncode != 0 or not result.stdout.strip():
            logger.debug(f"[WindowsInterfaceProvider] Get-NetAdapter failed: {result.stderr}")
            return {}

        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            logger.debug(f"[WindowsInterfaceProvider] Unparseable Get-NetAdapter output: {e}")
            return {}

        # A single adapter is serialized as an object, several as a list
        if isinstance(data, dict):
            data = [data]

        types = {}
        for entry in data:
            if not isinstance(entry, dict):
                continue
            name = entry.get("Name")
            if_type = entry.get("InterfaceType")
            if name and isinstance(if_type, int):
                types[name] = if_type
        return types

    def _medium_signals(self, name: str) -> MediumSignals:
        if_type = self._adapter_types.get(name)
        if if_type is None:
            return NO_SIGNALS
        medium = WINDOWS_IF_TYPES.get(if_type, Medium.UNKNOWN)
        return medium, medium == Medium.WIFI, if_type


class MacOSInterfaceProvider(PsutilInterfaceProvider):
    """macOS provider using networksetup to find Wi-Fi devices."""

    def __init__(self):
        self._hardware_ports: Optional[Dict[str, str]] = None

    def list_active_interfaces(self) -> List[NetworkInterface]:
        self._hardware_ports = self._query_hardware_ports()
        return super().list_active_interfaces()

    def _query_hardware_ports(self) -> Optional[Dict[str, str]]:
        """Map device name (en0) to hardware port (Wi-Fi); None when unavailable."""
        try:
            result = subprocess.run(
                ["networksetup", "-listallhardwareports"],
                capture_output=True,
                text=True,
                timeout=SUBPROCESS_TIMEOUT,
                check=False,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug(f"[MacOSInterfaceProvider] networksetup unavailable: {e}")
            return None

        if result.returncode != 0:
            return None

        return self.parse_hardware_ports(result.stdout)

    @staticmethod
    def parse_hardware_ports(output: str) -> Dict[str, str]:
        """
        Parse `networksetup -listallhardwareports` output.

        Blocks look like:
            Hardware Port: Wi-Fi
            Device: en0
            Ethernet Address: ...
        """
        ports = {}
        port = None
        for line in output.split("\n"):
            line = line.strip()
            if line.startswith("Hardware Port:"):
                port = line.split(":", 1)[1].strip()
            elif line.startswith("Device:") and port:
                ports[line.split(":", 1)[1].strip()] = port
                port = None
        return ports

    def _medium_signals(self, name: str) -> MediumSignals:
        if name.startswith(MACOS_MOBILE_PREFIXES):
            return Medium.MOBILE, False, None

        if self._hardware_ports is None:
            # en0 is the built-in Wi-Fi on most Macs, en1+ are wired
            if name == "en0":
                return Medium.WIFI, True, None
            if re.match(r"^en\d+$", name):
                return Medium.ETHERNET, False, None
            return NO_SIGNALS

        port = self._hardware_ports.get(name)
        if port is None:
            return NO_SIGNALS
        if port.lower() in MACOS_WIFI_PORTS:
            return Medium.WIFI, True, None
        if "iphone" in port.lower():
            return Medium.MOBILE, False, None
        if "ethernet" in port.lower() or "lan" in port.lower():
            return Medium.ETHERNET, False, None
        return Medium.UNKNOWN, False, None


def get_interface_provider(platform: Optional[Platform] = None) -> PsutilInterfaceProvider:
    """Pick the interface provider for the current (or given) platform."""
    platform = platform or PlatformUtils.get_platform()

    if platform == Platform.LINUX:
        return LinuxInterfaceProvider()
    elif platform == Platform.WINDOWS:
        return WindowsInterfaceProvider()
    elif platform == Platform.MACOS:
        return MacOSInterfaceProvider()

    logger.warning(f"[InterfaceProvider] No dedicated backend for {platform.value}, using psutil only")
    return PsutilInterfaceProvider()

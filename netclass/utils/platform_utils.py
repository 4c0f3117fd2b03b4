"""Platform detection and abstraction utilities."""
import os
import platform
import tempfile
from enum import Enum
from pathlib import Path


class Platform(Enum):
    """Operating system platforms."""
    WINDOWS = "windows"
    MACOS = "macos"
    LINUX = "linux"
    OTHER = "other"


class PlatformUtils:
    """Utility class for platform detection and abstraction."""

    @staticmethod
    def get_platform() -> Platform:
        """
        Detect the current operating system.

        Returns:
            Platform enum value. Unix flavours without a dedicated
            interface backend (BSDs, Solaris) map to Platform.OTHER.
        """
        system = platform.system()
        if system == "Windows" or os.name == "nt":
            return Platform.WINDOWS
        elif system == "Darwin":
            return Platform.MACOS
        elif system == "Linux":
            return Platform.LINUX
        else:
            return Platform.OTHER

    @staticmethod
    def get_temp_dir() -> str:
        """
        Get the per-application temporary directory (logs live here).

        Returns:
            Platform-specific path; the directory is not created.
        """
        plat = PlatformUtils.get_platform()
        if plat == Platform.WINDOWS:
            return os.path.join(tempfile.gettempdir(), "netclass")
        elif plat == Platform.MACOS:
            return os.path.join(os.path.expanduser("~/Library/Caches"), "netclass")
        return os.path.join(os.environ.get("TMPDIR", "/tmp"), "netclass")

    @staticmethod
    def get_config_dir() -> Path:
        """Get the per-user configuration directory for the platform."""
        home = Path.home()
        plat = PlatformUtils.get_platform()

        if plat == Platform.WINDOWS:
            return home / "AppData" / "Roaming" / "netclass"
        elif plat == Platform.MACOS:
            return home / "Library" / "Application Support" / "netclass"
        return home / ".config" / "netclass"

    @staticmethod
    def get_subprocess_flags() -> int:
        """
        Get platform-specific subprocess creation flags.

        Returns:
            CREATE_NO_WINDOW flag on Windows, 0 on other platforms
        """
        import subprocess

        if PlatformUtils.get_platform() == Platform.WINDOWS:
            # CREATE_NO_WINDOW only exists on Windows
            return getattr(subprocess, "CREATE_NO_WINDOW", 0x08000000)
        return 0

    @staticmethod
    def get_startupinfo():
        """
        Get STARTUPINFO object for hiding subprocess windows on Windows.

        Returns:
            STARTUPINFO object with STARTF_USESHOWWINDOW on Windows, None otherwise
        """
        import subprocess

        if PlatformUtils.get_platform() == Platform.WINDOWS:
            STARTUPINFO = getattr(subprocess, "STARTUPINFO", None)
            if STARTUPINFO:
                startupinfo = STARTUPINFO()
                startupinfo.dwFlags |= getattr(subprocess, "STARTF_USESHOWWINDOW", 0x00000001)
                startupinfo.wShowWindow = getattr(subprocess, "SW_HIDE", 0)
                return startupinfo
        return None

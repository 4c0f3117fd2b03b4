import os
from pathlib import Path

# Load environment variables from .env file
from dotenv import load_dotenv

from netclass.utils.platform_utils import PlatformUtils

# Load .env from project root
_project_root = Path(__file__).parent.parent.parent
load_dotenv(_project_root / ".env")

APP_NAME = "netclass"

# Monitoring
POLL_INTERVAL_MS = int(os.getenv("NETCLASS_POLL_INTERVAL_MS", "1000"))
CANCELLABLE_SLEEP = os.getenv("NETCLASS_CANCELLABLE_SLEEP", "1") not in ("0", "false", "False")

# Logging
LOG_LEVEL = os.getenv("NETCLASS_LOG_LEVEL", "DEBUG").upper()
LOG_ROTATION = os.getenv("NETCLASS_LOG_ROTATION", "1 MB")
LOG_RETENTION = os.getenv("NETCLASS_LOG_RETENTION", "10 days")

# Channel names seen by the GUI glue
METHOD_CHANNEL = "network_service"
EVENT_CHANNEL = "network_service/events"

# Temporary directory (cross-platform)
TMPDIR = os.getenv("NETCLASS_TMPDIR", PlatformUtils.get_temp_dir())
LOG_FILE = os.path.join(TMPDIR, "netclass.log")

# Configuration directory
CONFIG_DIR = Path(os.getenv("NETCLASS_CONFIG_DIR", str(PlatformUtils.get_config_dir())))
CONFIG_FILE = CONFIG_DIR / "config.json"

# Platform probing
SYSFS_NET_DIR = "/sys/class/net"
SUBPROCESS_TIMEOUT = 5  # seconds

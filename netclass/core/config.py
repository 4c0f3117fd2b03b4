"""Configuration management for netclass."""

import json
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from loguru import logger

from netclass.core.constants import CANCELLABLE_SLEEP, CONFIG_FILE, LOG_LEVEL, POLL_INTERVAL_MS

MIN_POLL_INTERVAL_MS = 50


class Config:
    """Manages netclass user configuration."""

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize configuration.

        Args:
            config_path: Path to configuration file. If None, uses default path.
        """
        self.config_path = Path(config_path) if config_path else CONFIG_FILE
        self.config_data: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from file, falling back to defaults."""
        if self.config_path.exists() and self.config_path.stat().st_size > 0:
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                if not isinstance(data, dict):
                    raise ValueError("top-level value must be an object")
                self.config_data = self._get_default_config()
                self._merge(self.config_data, data)
            except (json.JSONDecodeError, ValueError, OSError) as e:
                logger.error(f"[Config] Error loading {self.config_path}: {e}. Using default configuration.")
                self.config_data = self._get_default_config()
        else:
            self.config_data = self._get_default_config()

    @staticmethod
    def _get_default_config() -> Dict[str, Any]:
        """Get default configuration."""
        return {
            "poll_interval_ms": POLL_INTERVAL_MS,
            "log_level": LOG_LEVEL.lower(),
            "monitor": {
                "cancellable_sleep": CANCELLABLE_SLEEP,
            },
        }

    @staticmethod
    def _merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> None:
        for key, value in overrides.items():
            if isinstance(value, dict) and isinstance(base.get(key), dict):
                Config._merge(base[key], value)
            else:
                base[key] = value

    def save(self) -> None:
        """Save configuration to file."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w", encoding="utf-8") as f:
            json.dump(self.config_data, f, indent=2)

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value.

        Args:
            key: Configuration key (supports dot notation, e.g., 'monitor.cancellable_sleep')
            default: Default value if key doesn't exist

        Returns:
            Configuration value or default
        """
        keys = key.split(".")
        value = self.config_data
        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default
        return value

    def set(self, key: str, value: Any) -> None:
        """Set configuration value.

        Args:
            key: Configuration key (supports dot notation)
            value: Value to set

        Raises:
            ValueError: If poll_interval_ms is not an integer >= MIN_POLL_INTERVAL_MS
        """
        if key == "poll_interval_ms":
            value = self._coerce_interval(value)

        keys = key.split(".")
        data = self.config_data
        for k in keys[:-1]:
            if k not in data:
                data[k] = {}
            data = data[k]
        data[keys[-1]] = value

    @staticmethod
    def _coerce_interval(value: Any) -> int:
        try:
            parsed = int(value)
        except (TypeError, ValueError):
            raise ValueError("poll_interval_ms must be an integer.")
        if parsed < MIN_POLL_INTERVAL_MS:
            raise ValueError(f"poll_interval_ms must be >= {MIN_POLL_INTERVAL_MS}.")
        return parsed

    @property
    def poll_interval(self) -> float:
        """Poll interval in seconds."""
        try:
            return self._coerce_interval(self.get("poll_interval_ms", POLL_INTERVAL_MS)) / 1000.0
        except ValueError as e:
            logger.warning(f"[Config] {e} Using {POLL_INTERVAL_MS} ms")
            return POLL_INTERVAL_MS / 1000.0

    @property
    def cancellable_sleep(self) -> bool:
        return bool(self.get("monitor.cancellable_sleep", CANCELLABLE_SLEEP))

    def import_config(self, config_file: Path, file_format: str = "json") -> bool:
        """Import configuration from file.

        Args:
            config_file: Path to configuration file
            file_format: File format ('json' or 'yaml')

        Returns:
            True if successful, False otherwise
        """
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                if file_format.lower() == "yaml":
                    data = yaml.safe_load(f)
                else:
                    data = json.load(f)

            if isinstance(data, dict):
                if "poll_interval_ms" in data:
                    data["poll_interval_ms"] = self._coerce_interval(data["poll_interval_ms"])
                self._merge(self.config_data, data)
                self.save()
                return True
        except Exception as e:
            logger.error(f"[Config] Error importing config: {e}")
        return False

    def export_config(self, output_file: Path, file_format: str = "json") -> bool:
        """Export configuration to file.

        Args:
            output_file: Path to output file
            file_format: File format ('json' or 'yaml')

        Returns:
            True if successful, False otherwise
        """
        try:
            with open(output_file, "w", encoding="utf-8") as f:
                if file_format.lower() == "yaml":
                    yaml.dump(self.config_data, f, default_flow_style=False)
                else:
                    json.dump(self.config_data, f, indent=2)
            return True
        except Exception as e:
            logger.error(f"[Config] Error exporting config: {e}")
        return False

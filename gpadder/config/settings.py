"""
Settings module for GPadder.

Provides convenient access to configuration settings with validation and type hints.
"""

from pathlib import Path
from typing import Any, Dict, Optional
from .config import get_config, Config


class Settings:
    """
    High-level settings interface with validation and type safety.

    Out-of-range values are clamped to something the arbiter can run with
    rather than rejected.
    """

    def __init__(self, config: Optional[Config] = None):
        """
        Initialize settings with optional config instance.

        Args:
            config: Optional Config instance, uses global if not provided
        """
        self._config = config or get_config()

    # Application settings
    @property
    def app_name(self) -> str:
        """Application name."""
        return self._config.get("app.name", "GPadder")

    @property
    def debug_mode(self) -> bool:
        """Debug mode enabled."""
        return bool(self._config.get("app.debug", False))

    @property
    def log_level(self) -> str:
        """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""
        level = str(self._config.get("app.log_level", "INFO")).upper()
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        return level if level in valid_levels else "INFO"

    @property
    def poll_rate(self) -> int:
        """Ticks per second used by the command line monitor."""
        rate = self._config.get("app.poll_rate", 60)
        return max(1, min(int(rate), 1000))

    # Input settings
    @property
    def scan_width(self) -> int:
        """Number of device indices scanned, 0..scan_width-1."""
        width = self._config.get("input.scan_width", 4)
        return max(1, min(int(width), 16))

    @property
    def rescan_interval(self) -> float:
        """Seconds between recovery rescans while the active device is gone."""
        interval = self._config.get("input.rescan_interval", 3.0)
        return max(0.1, min(float(interval), 60.0))

    @property
    def auto_switch(self) -> bool:
        """Follow whichever device receives input."""
        return bool(self._config.get("input.auto_switch", False))

    @property
    def auto_switch_interval(self) -> float:
        """Seconds between auto-switch scans (0 scans every tick)."""
        interval = self._config.get("input.auto_switch_interval", 0.0)
        return max(0.0, min(float(interval), 10.0))

    @property
    def trigger_threshold(self) -> float:
        """Trigger travel that counts as intentional input."""
        return self._config.get("input.trigger_threshold", 0.1)

    @property
    def stick_deadzone(self) -> float:
        """Thumbstick magnitude that counts as intentional input."""
        return self._config.get("input.stick_deadzone", 0.2)

    @property
    def axis_deadzone(self) -> float:
        """Generic axis magnitude that counts as intentional input."""
        return self._config.get("input.axis_deadzone", 0.2)

    @property
    def rumble_hold_ms(self) -> int:
        """How long the driver keeps motors running without a new command."""
        hold = self._config.get("input.rumble_hold_ms", 60000)
        return max(100, min(int(hold), 0xFFFF * 16))

    @property
    def diagnostic_log(self) -> Optional[Path]:
        """Optional file receiving one line per arbiter event."""
        path = self._config.get("input.diagnostic_log")
        return Path(path).expanduser() if path else None

    # Convenience methods
    def update_setting(self, key: str, value: Any) -> None:
        """
        Update a setting value.

        Args:
            key: Setting key in dot notation
            value: New value
        """
        self._config.set(key, value)

    def save_settings(self) -> None:
        """Save current settings to user config file."""
        self._config.save()

    def reset_to_defaults(self) -> None:
        """Reset all settings to default values."""
        self._config.reset_to_defaults()

    def get_all_settings(self) -> Dict[str, Any]:
        """Get all settings as a dictionary."""
        return self._config.get_all()

    def is_development_mode(self) -> bool:
        """Check if running in development mode."""
        return self.debug_mode or self.log_level == "DEBUG"

    def get_input_info(self) -> Dict[str, Any]:
        """Get arbitration-related settings."""
        return {
            "scan_width": self.scan_width,
            "rescan_interval": self.rescan_interval,
            "auto_switch": self.auto_switch,
            "auto_switch_interval": self.auto_switch_interval,
            "trigger_threshold": self.trigger_threshold,
            "stick_deadzone": self.stick_deadzone,
            "axis_deadzone": self.axis_deadzone,
        }


# Global settings instance
_settings_instance: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance


def set_settings(settings: Settings) -> None:
    """Set the global settings instance."""
    global _settings_instance
    _settings_instance = settings


def reset_settings() -> None:
    """Reset the global settings instance."""
    global _settings_instance
    _settings_instance = None

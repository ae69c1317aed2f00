"""
Configuration management for the jail check.

Loads defaults from an optional YAML file and environment variables;
command line options are applied on top by the entry point.
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union
import yaml


class ConfigError(Exception):
    """Raised when the check configuration is invalid."""


_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(us|µs|ms|s|m|h)")
_DURATION_UNITS = {
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration(value: Union[str, int, float]) -> float:
    """
    Parse a duration into seconds.

    Accepts plain numbers (seconds) and duration strings such as
    "10s", "500ms" or "1m30s".
    """
    if isinstance(value, (int, float)):
        seconds = float(value)
    else:
        text = value.strip()
        try:
            seconds = float(text)
        except ValueError:
            parts = _DURATION_PART.findall(text)
            if not parts or "".join(n + u for n, u in parts) != text:
                raise ConfigError(f"Invalid duration: {value!r}")
            seconds = sum(float(n) * _DURATION_UNITS[u] for n, u in parts)
    if seconds <= 0:
        raise ConfigError(f"Duration must be positive: {value!r}")
    return seconds


@dataclass
class SNMPConfig:
    """SNMP client configuration."""

    port: int = 1161
    community: str = "public"
    timeout: float = 10.0  # seconds
    retries: int = 3
    max_repetitions: int = 50


@dataclass
class ThresholdConfig:
    """Disk space thresholds in GB, 0 disables a threshold."""

    warning: int = 0
    critical: int = 0


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "WARNING"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_path: Optional[str] = None
    max_file_size_mb: int = 10
    backup_count: int = 5


@dataclass
class CheckConfig:
    """Main configuration container."""

    host: str = ""
    jail: str = ""
    verbose: int = 0
    snmp: SNMPConfig = field(default_factory=SNMPConfig)
    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: Optional[str]) -> "CheckConfig":
        """Load configuration from YAML file, defaults if it does not exist."""
        data = {}
        if path:
            config_path = Path(path)
            if config_path.exists():
                try:
                    with open(config_path, "r") as f:
                        data = yaml.safe_load(f) or {}
                except (OSError, yaml.YAMLError) as e:
                    raise ConfigError(f"Can't read config file {path}: {e}") from e

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict) -> "CheckConfig":
        """Create config from dictionary."""
        if not isinstance(data, dict):
            raise ConfigError("Config file must contain a mapping")

        config = cls()

        try:
            if "snmp" in data:
                config.snmp = SNMPConfig(**data["snmp"])
                config.snmp.timeout = parse_duration(config.snmp.timeout)

            if "thresholds" in data:
                config.thresholds = ThresholdConfig(**data["thresholds"])

            if "logging" in data:
                config.logging = LoggingConfig(**data["logging"])
        except TypeError as e:
            raise ConfigError(f"Invalid config section: {e}") from e

        # Override with environment variables
        config._apply_env_overrides()

        return config

    def _apply_env_overrides(self):
        """Apply environment variable overrides."""
        try:
            if os.getenv("SNMP_PORT"):
                self.snmp.port = int(os.getenv("SNMP_PORT"))
            if os.getenv("SNMP_RETRIES"):
                self.snmp.retries = int(os.getenv("SNMP_RETRIES"))
        except ValueError as e:
            raise ConfigError(f"Invalid environment override: {e}") from e
        if os.getenv("SNMP_COMMUNITY"):
            self.snmp.community = os.getenv("SNMP_COMMUNITY")
        if os.getenv("SNMP_TIMEOUT"):
            self.snmp.timeout = parse_duration(os.getenv("SNMP_TIMEOUT"))

        # Logging
        if os.getenv("LOG_LEVEL"):
            self.logging.level = os.getenv("LOG_LEVEL")

    def validate(self):
        """Check the configuration before any network activity."""
        if not self.host:
            raise ConfigError("Hostname is required")
        if not self.jail:
            raise ConfigError("Jail name is required")
        if not 0 <= self.snmp.port <= 65535:
            raise ConfigError(f"Port {self.snmp.port} out of range")
        if self.snmp.retries < 0:
            raise ConfigError(f"Retries can't be negative: {self.snmp.retries}")
        if self.snmp.max_repetitions < 1:
            raise ConfigError(f"Max repetitions must be positive: {self.snmp.max_repetitions}")

        warning = self.thresholds.warning
        critical = self.thresholds.critical
        if warning < 0 or critical < 0:
            raise ConfigError("Thresholds can't be negative")
        if warning > 0 and critical > 0 and warning > critical:
            raise ConfigError(f"Warning {warning} can't be bigger than critical {critical}")


def get_default_config_path() -> Optional[str]:
    """Get the first existing configuration file path, if any."""
    candidates = [
        Path.home() / ".check_snmp_jails.yaml",
        Path("/etc/check_snmp_jails/config.yaml"),
        Path("/usr/local/etc/check_snmp_jails.yaml"),
    ]

    for path in candidates:
        if path.exists():
            return str(path)

    return None

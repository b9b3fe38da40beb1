"""Router configuration loader.

Loads router settings from a YAML file. The file is optional; defaults
reproduce the stock routing behavior.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from lsp_router.protocol.transport import DEFAULT_MAX_MESSAGE_SIZE

UNKNOWN_REQUESTS_IGNORE = "ignore"
UNKNOWN_REQUESTS_METHOD_NOT_FOUND = "method_not_found"
UNKNOWN_REQUEST_POLICIES = (UNKNOWN_REQUESTS_IGNORE, UNKNOWN_REQUESTS_METHOD_NOT_FOUND)


class ConfigLoadError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


def expand_env_vars(value: str) -> str:
    """Expand environment variables in a string.

    Supports ${VAR_NAME} syntax. Unknown variables are left unchanged.

    Args:
        value: String potentially containing environment variable references.

    Returns:
        String with known environment variables expanded.
    """
    pattern = re.compile(r"\$\{([^}]+)\}")

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        env_value = os.environ.get(var_name)
        if env_value is not None:
            return env_value
        if var_name == "HOME":
            return os.path.expanduser("~")
        return match.group(0)

    return pattern.sub(replacer, value)


@dataclass
class RouterConfig:
    """Router configuration."""

    version: str = "1.0"

    # Notification handling
    ignored_notifications: list[str] = field(default_factory=list)
    once_only_notifications: list[str] = field(default_factory=lambda: ["telemetry/event"])

    # Server-initiated requests with no handler
    unknown_requests: str = UNKNOWN_REQUESTS_IGNORE

    # Message log
    message_log_file: str = ""

    # Transport
    max_message_size: int = DEFAULT_MAX_MESSAGE_SIZE

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> RouterConfig:
        """Create a RouterConfig from a configuration dictionary.

        Args:
            config: Dictionary parsed from YAML configuration.

        Returns:
            RouterConfig instance with all settings populated.

        Raises:
            ConfigLoadError: If a value has the wrong shape.
        """
        sections = {}
        for name in ("notifications", "requests", "message_log", "transport"):
            section = config.get(name) or {}
            if not isinstance(section, dict):
                raise ConfigLoadError(f"{name} must be a mapping")
            sections[name] = section
        notifications = sections["notifications"]
        requests = sections["requests"]
        message_log = sections["message_log"]
        transport = sections["transport"]

        unknown_requests = requests.get("unknown", UNKNOWN_REQUESTS_IGNORE)
        if unknown_requests not in UNKNOWN_REQUEST_POLICIES:
            raise ConfigLoadError(
                f"requests.unknown must be one of {', '.join(UNKNOWN_REQUEST_POLICIES)}, "
                f"got {unknown_requests!r}"
            )

        ignored = notifications.get("ignore", [])
        once_only = notifications.get("report_once", ["telemetry/event"])
        for key, value in (("notifications.ignore", ignored), ("notifications.report_once", once_only)):
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ConfigLoadError(f"{key} must be a list of method names")

        max_size = transport.get("max_message_size", DEFAULT_MAX_MESSAGE_SIZE)
        if not isinstance(max_size, int) or max_size <= 0:
            raise ConfigLoadError("transport.max_message_size must be a positive integer")

        log_file = message_log.get("file") or ""
        if not isinstance(log_file, str):
            raise ConfigLoadError("message_log.file must be a string path")

        return cls(
            version=str(config.get("version", "")),
            ignored_notifications=list(ignored),
            once_only_notifications=list(once_only),
            unknown_requests=unknown_requests,
            message_log_file=expand_env_vars(log_file),
            max_message_size=max_size,
        )

    @property
    def message_log_path(self) -> Path | None:
        """Message log file as a Path, or None when not configured."""
        return Path(self.message_log_file) if self.message_log_file else None


def load_config(path: Path) -> RouterConfig:
    """Load router configuration from a YAML file.

    Args:
        path: Path to the configuration YAML file.

    Returns:
        RouterConfig instance.

    Raises:
        ConfigLoadError: If the file cannot be found, parsed, or validated.
    """
    if not path.exists():
        raise ConfigLoadError(f"Config file not found: {path}")

    try:
        with open(path) as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"Failed to parse config YAML: {e}") from e

    if not isinstance(config, dict):
        raise ConfigLoadError("Config must be a YAML mapping")

    if "version" not in config:
        raise ConfigLoadError("Config must include 'version' field")

    return RouterConfig.from_dict(config)

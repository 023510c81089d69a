"""Configuration loader for nuts-tool."""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from nutstool.constants import CIPHERS, CONFIG_FILE_NAME
from nutstool.errors import ConfigError, HomeDirectoryUnavailable
from nutstool.services.tool_home import ToolHomeService


def default_config_path(tool_home_service: ToolHomeService) -> Optional[str]:
    """Return ``~/.nuts/config.yml`` if it exists, without creating anything."""
    try:
        path = tool_home_service.tool_dir_path() / CONFIG_FILE_NAME
        found = path.is_file()
    except (HomeDirectoryUnavailable, OSError):
        return None
    return str(path) if found else None


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class ConfigLoader:
    """Reads CLI defaults from a YAML mapping and type-checks each known key."""

    SUPPORTED_KEYS = {"verbose", "log_file", "cipher", "kdf_iterations"}

    def load(self, config_path: Optional[str]) -> Dict[str, Any]:
        if not config_path:
            return {}

        try:
            text = Path(config_path).read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise ConfigError(f"Config file not found: {config_path}") from exc
        except OSError as exc:
            raise ConfigError(f"Could not read config file '{config_path}': {exc}") from exc

        try:
            values = yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid config file '{config_path}': {exc}") from exc
        if not isinstance(values, dict):
            raise ConfigError("Config file must contain a YAML mapping at the root.")

        unknown = ", ".join(sorted(str(key) for key in set(values) - self.SUPPORTED_KEYS))
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {unknown}")

        verbose = values.get("verbose")
        if verbose is not None and (not _is_int(verbose) or verbose < 0):
            raise ConfigError("`verbose` must be a non-negative integer.")

        log_file = values.get("log_file")
        if log_file is not None and (not isinstance(log_file, str) or not log_file):
            raise ConfigError("`log_file` must be a non-empty path string.")

        iterations = values.get("kdf_iterations")
        if iterations is not None and not _is_int(iterations):
            raise ConfigError("`kdf_iterations` must be an integer.")

        cipher = values.get("cipher")
        if cipher is not None and cipher not in CIPHERS:
            raise ConfigError(f"`cipher` must be one of: {', '.join(CIPHERS)}.")

        return values

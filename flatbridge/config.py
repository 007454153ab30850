"""Settings for the flatbridge service and CLI."""

import os
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional

import yaml

from flatbridge.logging import LOG_LEVELS, get_logger

logger = get_logger(__name__)

CONFIG_ENV_VAR = "FLATBRIDGE_CONFIG"
ENV_PREFIX = "FLATBRIDGE_"

DEFAULT_BATCH_SIZE = 1000
DEFAULT_PREVIEW_LIMIT = 100


@dataclass(frozen=True)
class Settings:
    """Resolved runtime settings."""

    storage_root: str = "uploads"
    batch_size: int = DEFAULT_BATCH_SIZE
    preview_limit: int = DEFAULT_PREVIEW_LIMIT
    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "info"

    def ensure_storage_root(self) -> str:
        """Create the storage root if needed and return its absolute path."""
        root = os.path.abspath(self.storage_root)
        os.makedirs(root, exist_ok=True)
        return root


_INT_KEYS = {"batch_size", "preview_limit", "port"}


def _coerce(key: str, value: Any) -> Any:
    if key in _INT_KEYS:
        try:
            number = int(value)
        except (TypeError, ValueError):
            raise ValueError(f"Setting '{key}' must be an integer, got {value!r}")
        if number <= 0:
            raise ValueError(f"Setting '{key}' must be positive, got {number}")
        return number

    if key == "log_level":
        level = str(value).lower()
        if level not in LOG_LEVELS:
            raise ValueError(
                f"Setting 'log_level' must be one of {sorted(LOG_LEVELS)}, got {value!r}"
            )
        return level

    return str(value)


def _load_yaml(path: str) -> Dict[str, Any]:
    if not os.path.exists(path):
        raise ValueError(f"Config file not found: {path}")

    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping at the top level")

    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown settings in {path}: {', '.join(unknown)}")

    logger.debug(f"Loaded settings file: {path}")
    return data


def _from_env(environ: Dict[str, str]) -> Dict[str, Any]:
    values = {}
    for field in fields(Settings):
        env_key = f"{ENV_PREFIX}{field.name.upper()}"
        if env_key in environ:
            values[field.name] = environ[env_key]
    return values


def load_settings(
    path: Optional[str] = None, environ: Optional[Dict[str, str]] = None
) -> Settings:
    """Resolve settings from defaults, a YAML file and the environment.

    Later layers win: defaults < YAML file < FLATBRIDGE_* variables.

    Args:
        path: Optional YAML file; falls back to $FLATBRIDGE_CONFIG
        environ: Environment mapping, defaults to os.environ

    Returns:
        Settings instance

    Raises:
        ValueError: If the file is missing or a value is invalid
    """
    environ = os.environ if environ is None else environ
    path = path or environ.get(CONFIG_ENV_VAR)

    overrides: Dict[str, Any] = {}
    if path:
        overrides.update(_load_yaml(path))
    overrides.update(_from_env(environ))

    coerced = {key: _coerce(key, value) for key, value in overrides.items()}
    return replace(Settings(), **coerced)

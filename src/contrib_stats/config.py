from __future__ import annotations

import json
from pathlib import Path

from .errors import ConfigError
from .models import Settings

DEFAULT_CONFIG_NAME = ".contributors.json"

_INT_KEYS = ("threshold", "people_min_lines", "port")
_STR_KEYS = ("host", "classifier", "linguist_command", "attribution", "revision", "ignore_file")
_CHOICES = {
    "classifier": ("linguist", "builtin"),
    "attribution": ("blame", "gitpython"),
}


def load_config(config_path: Path) -> dict:
    if not config_path.exists():
        return {}
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"cannot read config: {e}", path=str(config_path)) from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid JSON in config: {e}", path=str(config_path)) from e
    if not isinstance(data, dict):
        raise ConfigError("config must be a JSON object", path=str(config_path))
    return data


def find_config(root: Path, explicit: Path | None) -> dict:
    """An explicit path must exist; the per-repo default file is optional."""
    if explicit is not None:
        if not explicit.exists():
            raise ConfigError("config file not found", path=str(explicit))
        return load_config(explicit)
    return load_config(root / DEFAULT_CONFIG_NAME)


def _validated(key: str, value: object) -> object:
    if key in _INT_KEYS:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"{key} must be an integer", key=key, value=value)
        if value < 0:
            raise ConfigError(f"{key} must not be negative", key=key, value=value)
        if key == "port" and value > 65535:
            raise ConfigError("port must be between 0 and 65535", key=key, value=value)
    elif key == "people_min_percent":
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigError(f"{key} must be a number", key=key, value=value)
        if value < 0:
            raise ConfigError(f"{key} must not be negative", key=key, value=value)
        value = float(value)
    elif key in _STR_KEYS:
        if not isinstance(value, str):
            raise ConfigError(f"{key} must be a string", key=key, value=value)
        if key in _CHOICES and value not in _CHOICES[key]:
            raise ConfigError(f"{key} must be one of {', '.join(_CHOICES[key])}", key=key, value=value)
        if key in ("revision", "ignore_file", "linguist_command") and not value.strip():
            raise ConfigError(f"{key} must not be empty", key=key)
    return value


def resolve_settings(root: Path, config: dict, overrides: dict | None = None) -> Settings:
    """Defaults < config file < CLI overrides (None means "not given")."""
    values: dict[str, object] = {}
    for source in (config, overrides or {}):
        for key, value in source.items():
            if value is None or key not in (*_INT_KEYS, *_STR_KEYS, "people_min_percent"):
                continue
            values[key] = _validated(key, value)
    root = root.resolve()
    return Settings(root=str(root), name=root.name, **values)


def verify_settings(settings: Settings) -> None:
    root = Path(settings.root)
    if not root.exists():
        raise ConfigError("root does not exist", path=settings.root)
    if not root.is_dir():
        raise ConfigError("root is not a directory", path=settings.root)

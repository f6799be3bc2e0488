"""Configuration manager for inspector-cli using a TOML file."""

from __future__ import annotations

import copy
import logging
from typing import Any, Dict, List

import toml

from . import config

logger = logging.getLogger(__name__)


DEFAULT_CONFIG: Dict[str, Dict[str, Any]] = {
    "generator": {
        "include_target": False,
    },
    "output": {
        "editor_dir": "",
    },
    "types": {
        "engine_objects": [],
        "value_types": [],
    },
}


def _defaults() -> Dict[str, Dict[str, Any]]:
    return copy.deepcopy(DEFAULT_CONFIG)


def load_full_config() -> Dict[str, Any]:
    """Load the TOML config merged over the defaults.

    A missing file gives the defaults; an unreadable one is reported and
    ignored.
    """
    merged = _defaults()
    if not config.CONFIG_FILE.exists():
        return merged
    try:
        with open(config.CONFIG_FILE, "r", encoding="utf-8") as f:
            loaded = toml.load(f)
    except (OSError, toml.TomlDecodeError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", config.CONFIG_FILE, exc)
        return merged

    for section, values in loaded.items():
        if isinstance(values, dict):
            merged.setdefault(section, {}).update(values)
    return merged


def save_full_config(data: Dict[str, Any]) -> None:
    """Write the whole config dict to the TOML file."""
    config.ensure_base_dir()
    with open(config.CONFIG_FILE, "w", encoding="utf-8") as f:
        toml.dump(data, f)


def set_value(key: str, raw_value: str) -> Any:
    """Parse *raw_value* according to the default's type and persist it.

    Returns the stored value. Raises ``KeyError`` for unknown keys and
    ``ValueError`` for values that do not fit the key's type.
    """
    section, name = _split_key(key)
    default = DEFAULT_CONFIG[section][name]
    if isinstance(default, bool):
        value: Any = _parse_bool(raw_value)
    elif isinstance(default, list):
        value = _parse_list(raw_value)
    else:
        value = raw_value.strip()

    data = load_full_config()
    data[section][name] = value
    save_full_config(data)
    return value


def reset_config() -> bool:
    """Delete the config file. Returns True if one was removed."""
    if config.CONFIG_FILE.exists():
        config.CONFIG_FILE.unlink()
        return True
    return False


def known_keys() -> List[str]:
    return [f"{section}.{name}" for section, values in DEFAULT_CONFIG.items() for name in values]


def _split_key(key: str):
    section, _, name = key.partition(".")
    if section not in DEFAULT_CONFIG or name not in DEFAULT_CONFIG[section]:
        raise KeyError(key)
    return section, name


def _parse_bool(raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"Expected a boolean, got {raw!r}")


def _parse_list(raw: str) -> List[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]

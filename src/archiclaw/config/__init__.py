"""
archiclaw.config - Configuration loading and defaults.

Configuration lives in ``.archiclaw.toml``, discovered from the working
directory upwards. Values are deep-merged over ``DEFAULT_CONFIG`` and can be
overridden with ``ARCHICLAW_<SECTION>_<KEY>`` environment variables.
"""

from __future__ import annotations

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import tomlkit
from tomlkit.exceptions import TOMLKitError

from archiclaw.config.defaults import DEFAULT_CONFIG

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".archiclaw.toml"
ENV_PREFIX = "ARCHICLAW_"


class ConfigError(ValueError):
    """Raised for unreadable or malformed configuration."""


def find_config_file(start_path: Path) -> Optional[Path]:
    """
    Find ``.archiclaw.toml`` in start_path or any parent directory.

    Args:
        start_path: Directory (or file) to start searching from

    Returns:
        Path to the config file, or None when there is none
    """
    current = Path(start_path).resolve()
    if current.is_file():
        current = current.parent
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def parse_toml_document(text: str) -> tomlkit.TOMLDocument:
    """Parse TOML text into a comment-preserving tomlkit document."""
    try:
        return tomlkit.parse(text)
    except TOMLKitError as e:
        raise ConfigError(f"Invalid TOML: {e}") from e


def merge_configs(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Deep-merge two configuration dicts.

    Nested dicts are merged key by key; any other value in ``override``
    replaces the one in ``base``. Neither input is modified.
    """
    merged = copy.deepcopy(dict(base))
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _try_parse_env_value(raw: str) -> Any:
    """Interpret an environment value: booleans, integers, JSON lists/objects."""
    lowered = raw.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if raw.strip().lstrip("-").isdigit():
        return int(raw)
    if raw.startswith("[") or raw.startswith("{"):
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return raw
    return raw


def _apply_env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Apply ``ARCHICLAW_<SECTION>_<KEY>`` overrides in place.

    The first token after the prefix names the section; the remainder,
    lowercased, is the key (``ARCHICLAW_RULES_SKIP_CODES`` sets
    ``rules.skip_codes``).
    """
    for name, raw in os.environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        parts = name[len(ENV_PREFIX):].lower().split("_", 1)
        if len(parts) != 2 or not parts[1]:
            continue
        section, key = parts
        section_values = config.setdefault(section, {})
        if not isinstance(section_values, dict):
            continue
        section_values[key] = _try_parse_env_value(raw)
        logger.debug("Config override from %s: %s.%s", name, section, key)
    return config


def load_config(config_path: Optional[Path]) -> Dict[str, Any]:
    """
    Load configuration merged over the defaults.

    Args:
        config_path: Path to ``.archiclaw.toml``; None uses defaults only

    Returns:
        Configuration dict

    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    user_config: Dict[str, Any] = {}
    if config_path is not None:
        try:
            text = Path(config_path).read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot read config {config_path}: {e}") from e
        user_config = parse_toml_document(text).unwrap()
        logger.debug("Loaded config from %s", config_path)
    return _apply_env_overrides(merge_configs(DEFAULT_CONFIG, user_config))


def resolve_landscape_root(
    config: Mapping[str, Any],
    config_path: Optional[Path] = None,
    override: Optional[Path] = None,
) -> Path:
    """
    Determine the landscape directory.

    Precedence: explicit override, then ``[landscape] root`` (relative to the
    config file's directory, or to the working directory without one).
    """
    if override is not None:
        return Path(override)
    root = Path(config.get("landscape", {}).get("root", "landscape"))
    if root.is_absolute():
        return root
    base = Path(config_path).parent if config_path else Path.cwd()
    return base / root


def get_config_value(config: Mapping[str, Any], dotted_key: str) -> Any:
    """Look up ``section.key`` style keys. Raises KeyError when absent."""
    value: Any = config
    for part in dotted_key.split("."):
        if not isinstance(value, Mapping) or part not in value:
            raise KeyError(dotted_key)
        value = value[part]
    return value


def set_config_value(config_path: Path, dotted_key: str, value: Any) -> None:
    """
    Write a single value into ``.archiclaw.toml``, keeping comments intact.

    Missing tables along the dotted path are created.
    """
    path = Path(config_path)
    if path.exists():
        doc = parse_toml_document(path.read_text(encoding="utf-8"))
    else:
        doc = tomlkit.document()

    parts = dotted_key.split(".")
    table: Any = doc
    for part in parts[:-1]:
        if part not in table:
            table.add(part, tomlkit.table())
        table = table[part]
    table[parts[-1]] = value

    path.write_text(tomlkit.dumps(doc), encoding="utf-8")


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DEFAULT_CONFIG",
    "find_config_file",
    "get_config_value",
    "load_config",
    "merge_configs",
    "parse_toml_document",
    "resolve_landscape_root",
    "set_config_value",
]

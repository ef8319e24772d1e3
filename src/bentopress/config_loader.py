"""Load BentoConfig from bentopress.yaml / bentopress.toml if present.

Merges file config with CLI kwargs. CLI overrides file.  Every value is
checked against the field type before BentoConfig is built, so a wrong
type in a config file surfaces as a ConfigError naming the key.
"""

from __future__ import annotations

import math
import tomllib
from pathlib import Path

import yaml

from bentopress._errors import ConfigError
from bentopress.config import BentoConfig

CONFIG_FILENAMES = ("bentopress.yaml", "bentopress.yml", "bentopress.toml")

# Accepted value types per key (bool is never accepted for a number)
_FIELD_TYPES: dict[str, tuple[type, ...]] = {
    "source": (str,),
    "output": (str, Path),
    "deployment_target": (str,),
    "site_id": (str,),
    "grid_columns": (int,),
    "cors_proxy": (str,),
    "feed_timeout": (int, float),
    "max_videos": (int,),
    "live_feed_refresh": (bool,),
    "archive": (bool,),
}

_KNOWN_KEYS = frozenset(_FIELD_TYPES)


def load_config(root: Path, **overrides: object) -> BentoConfig:
    """Load BentoConfig from root, optionally merging a config file.

    Looks for bentopress.yaml, bentopress.yml, or bentopress.toml in root.
    Overrides whose value is None are ignored so unset CLI flags fall
    through to the file value or the default.

    Raises:
        ConfigError: On a malformed file, an unknown override, a value of
            the wrong type, or a value BentoConfig rejects.

    """
    unknown = sorted(k for k in overrides if k not in _KNOWN_KEYS)
    if unknown:
        msg = f"Unknown config option(s): {', '.join(unknown)}"
        raise ConfigError(msg)

    file_config = _read_config_file(root)
    merged = {**file_config, **{k: v for k, v in overrides.items() if v is not None}}
    for key, value in merged.items():
        merged[key] = _check_type(key, value)
    return BentoConfig(root=root, **merged)


def _check_type(key: str, value: object) -> object:
    """Return ``value`` converted to the field's type, or raise ConfigError."""
    expected = _FIELD_TYPES[key]
    if isinstance(value, bool) and bool not in expected:
        ok = False
    else:
        ok = isinstance(value, expected)
    if not ok:
        names = " or ".join(t.__name__ for t in expected)
        msg = f"Config option {key!r} must be {names}, got {type(value).__name__} {value!r}"
        raise ConfigError(msg)
    if key == "output":
        return Path(value) if isinstance(value, str) else value
    if key == "feed_timeout":
        if not math.isfinite(value) or value <= 0:
            msg = f"Config option 'feed_timeout' must be a positive number, got {value!r}"
            raise ConfigError(msg)
        return float(value)
    return value


def _read_config_file(root: Path) -> dict[str, object]:
    """Read config from yaml/toml if present. Returns empty dict otherwise."""
    for name in ("bentopress.yaml", "bentopress.yml"):
        path = root / name
        if path.is_file():
            return _parse_yaml(path)
    toml_path = root / "bentopress.toml"
    if toml_path.is_file():
        return _parse_toml(toml_path)
    return {}


def _parse_yaml(path: Path) -> dict[str, object]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        msg = f"Malformed config file {path.name}: {exc}"
        raise ConfigError(msg) from exc
    if not isinstance(data, dict):
        msg = f"Config file {path.name} must contain a mapping"
        raise ConfigError(msg)
    return _flatten_section(data)


def _parse_toml(path: Path) -> dict[str, object]:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Malformed config file {path.name}: {exc}"
        raise ConfigError(msg) from exc
    return _flatten_section(data)


def _flatten_section(data: dict[str, object]) -> dict[str, object]:
    """Extract bentopress.* keys and bare known keys into one mapping.

    A ``null`` value in the file means "use the default".
    """
    result: dict[str, object] = {}
    for k, v in data.items():
        if k in _KNOWN_KEYS and v is not None:
            result[k] = v
    section = data.get("bentopress")
    if isinstance(section, dict):
        for k, v in section.items():
            if k in _KNOWN_KEYS and v is not None:
                result[k] = v
    return result

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from wasmbrowsertest.console_filter import DEFAULT_FAIL_BANNER, DEFAULT_PASS_BANNER

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


@dataclass
class FilterConfig:
    """Console filter mode and summary banners."""

    quiet: bool = False
    pass_banner: str = DEFAULT_PASS_BANNER
    fail_banner: str = DEFAULT_FAIL_BANNER


@dataclass
class DebugConfig:
    """Debug mode settings."""

    enabled: bool = False
    trace: bool = False
    verbose: bool = False


@dataclass
class AppConfig:
    """Top-level configuration aggregating all subsections."""

    filter: FilterConfig = field(default_factory=FilterConfig)
    debug: DebugConfig = field(default_factory=DebugConfig)


def _section(raw: dict, name: str) -> dict:
    # `or {}` fallback handles YAML null values for optional sections
    section = raw.get(name, {}) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"{name} must be a mapping")
    return section


def _typed(section: dict, path: str, key: str, kind: type, default):
    value = section.get(key, default)
    if not isinstance(value, kind):
        raise ConfigError(f"{path}.{key} must be a {kind.__name__}")
    return value


def load_config(path: str | None) -> AppConfig:
    """Load and validate configuration from a YAML file.

    Args:
        path: Filesystem path to the YAML configuration file, or None to
            use the built-in defaults.

    Returns:
        A fully populated AppConfig instance.

    Raises:
        ConfigError: If the file does not exist, is not a mapping, or a
            field has the wrong type.
    """
    if path is None:
        return AppConfig()

    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {path}")

    with open(config_path) as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    filter_raw = _section(raw, "filter")
    debug_raw = _section(raw, "debug")

    logger.debug("Loaded config from %s", path)

    return AppConfig(
        filter=FilterConfig(
            quiet=_typed(filter_raw, "filter", "quiet", bool, False),
            pass_banner=_typed(filter_raw, "filter", "pass_banner", str, DEFAULT_PASS_BANNER),
            fail_banner=_typed(filter_raw, "filter", "fail_banner", str, DEFAULT_FAIL_BANNER),
        ),
        debug=DebugConfig(
            enabled=bool(debug_raw.get("enabled", False)),
            trace=bool(debug_raw.get("trace", False)),
            verbose=bool(debug_raw.get("verbose", False)),
        ),
    )

"""calmaker.config_loader

Config loader for calmaker.

- Reads YAML with PyYAML (JSON files load too, JSON being valid YAML).
- Exposes a typed dataclass `Config` and a `load_config()` helper that accepts
  an optional path override.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigError
from .ics_encoder import DEFAULT_PRODID, DEFAULT_TIME_ZONE
from .recurrence_expander import DEFAULT_MAX_STEPS

logger = logging.getLogger(__name__)

MIN_EXPANSION_STEPS = 1
MAX_EXPANSION_STEPS = 100_000


@dataclass
class Config:
    """Typed configuration for calmaker.

    Fields:
        prodid: PRODID written into exported calendars
        default_time_zone: zone used for timed templates that carry none
        max_expansion_steps: cursor step ceiling per template (1..100000)
        export_dir: directory exported files are written to
        log_level: logging level name
    """

    prodid: str = DEFAULT_PRODID
    default_time_zone: str = DEFAULT_TIME_ZONE
    max_expansion_steps: int = DEFAULT_MAX_STEPS
    export_dir: str = "."
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Config:
        """Create Config from a plain mapping, applying defaults and validation.

        Numeric-like values are coerced to int and max_expansion_steps is
        clamped to its allowed range, logging warnings when coercions occur.
        """
        if data is None:
            data = {}

        def _coerce_str(key: str, default: str) -> str:
            raw = data.get(key, default)
            return str(raw) if raw not in (None, "") else default

        raw_steps = data.get("max_expansion_steps", DEFAULT_MAX_STEPS)
        try:
            steps = int(raw_steps)
        except (TypeError, ValueError):
            logger.warning(
                "Config max_expansion_steps=%r is not an int; using default %d",
                raw_steps,
                DEFAULT_MAX_STEPS,
            )
            steps = DEFAULT_MAX_STEPS

        if steps < MIN_EXPANSION_STEPS:
            logger.warning("max_expansion_steps %d below minimum; coercing to %d", steps, MIN_EXPANSION_STEPS)
            steps = MIN_EXPANSION_STEPS
        elif steps > MAX_EXPANSION_STEPS:
            logger.warning("max_expansion_steps %d above maximum; coercing to %d", steps, MAX_EXPANSION_STEPS)
            steps = MAX_EXPANSION_STEPS

        return cls(
            prodid=_coerce_str("prodid", DEFAULT_PRODID),
            default_time_zone=_coerce_str("default_time_zone", DEFAULT_TIME_ZONE),
            max_expansion_steps=steps,
            export_dir=_coerce_str("export_dir", "."),
            log_level=_coerce_str("log_level", "INFO").upper(),
        )


def load_yaml_file(path: Path) -> Any:
    """Parse a YAML (or JSON) file; an empty file loads as an empty dict.

    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Unable to read {path}: {e}") from e

    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Unable to parse {path}: {e}") from e

    # safe_load returns None for empty files
    return {} if loaded is None else loaded


def load_config(path: str | None = None) -> Config:
    """Load configuration from a YAML file and return a Config instance.

    Args:
        path: Optional path to the config file. Defaults to ./calmaker.yaml
              (relative to the current working directory).

    Returns:
        Config dataclass instance with values from file (or defaults).

    Behavior:
    - If file is missing: returns Config() with defaults.
    - If file exists but top-level is not a mapping: raises ConfigError.
    """
    p = Path(path) if path else Path.cwd() / "calmaker.yaml"
    logger.debug("Attempting to load config from %s", p)
    if not p.exists():
        logger.info("Config file %s not found; using defaults", p)
        return Config()

    raw = load_yaml_file(p)
    if not isinstance(raw, dict):
        logger.warning("Config file %s parsed but top-level is not a mapping: %r", p, raw)
        raise ConfigError("Config file must contain a mapping at top level")
    cfg = Config.from_dict(raw)
    logger.info("Loaded configuration from %s", p)
    logger.debug("Configuration values: %s", cfg)
    return cfg

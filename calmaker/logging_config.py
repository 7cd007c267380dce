"""
Central logging configuration for calmaker.

Sets package logger levels from a debug flag or environment overrides and
keeps third-party libraries quiet.
"""

import logging
import os
from typing import Optional

PACKAGE_LOGGERS = [
    "calmaker",
    "calmaker.recurrence_expander",
    "calmaker.ics_encoder",
    "calmaker.occurrences",
    "calmaker.template_store",
    "calmaker.exporter",
    "calmaker.config_loader",
]

THIRD_PARTY_LOGGERS = [
    "icalendar",
    "asyncio",
]


def _env_debug() -> bool:
    return os.getenv("CALMAKER_DEBUG", "").lower() in ("1", "true", "yes", "on")


def configure_logging(
    debug_mode: bool = False,
    force_debug: Optional[bool] = None,
    base_level: Optional[str] = None,
) -> None:
    """
    Configure logging levels for calmaker.

    Args:
        debug_mode: Whether to enable debug logging for calmaker modules
        force_debug: Override debug mode setting (None to use env var detection)
        base_level: Level name used for root and calmaker loggers outside debug mode

    Environment Variables:
        CALMAKER_DEBUG: Set to '1', 'true', 'yes' to force debug logging
        CALMAKER_LOG_LEVEL: Override root log level (DEBUG, INFO, WARNING, ERROR)
    """
    env_log_level = os.getenv("CALMAKER_LOG_LEVEL", "").upper()

    if force_debug is not None:
        final_debug = force_debug
    elif _env_debug():
        final_debug = True
    else:
        final_debug = debug_mode

    normal_level = logging.INFO
    if base_level and base_level.upper() in ("DEBUG", "INFO", "WARNING", "ERROR"):
        normal_level = getattr(logging, base_level.upper())

    root_level = logging.DEBUG if final_debug else normal_level
    if env_log_level in ("DEBUG", "INFO", "WARNING", "ERROR"):
        root_level = getattr(logging, env_log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(root_level)

    logger_config: dict[str, int] = {name: logging.WARNING for name in THIRD_PARTY_LOGGERS}

    package_level = logging.DEBUG if final_debug else normal_level
    for module in PACKAGE_LOGGERS:
        logger_config[module] = package_level

    for logger_name, level in logger_config.items():
        logging.getLogger(logger_name).setLevel(level)

    if final_debug:
        root_logger.debug("Debug logging enabled for calmaker modules")


def get_logging_status() -> dict[str, str]:
    """
    Get current logging configuration status.

    Returns:
        Dictionary mapping logger names to their current levels
    """
    status = {"root": logging.getLevelName(logging.getLogger().level)}
    for logger_name in ["calmaker", *THIRD_PARTY_LOGGERS]:
        status[logger_name] = logging.getLevelName(logging.getLogger(logger_name).level)
    return status

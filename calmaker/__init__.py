"""calmaker - recurring calendar templates, expanded and exported.

The two cores are pure functions over event templates:

- ``expand`` turns templates into concrete occurrences inside a date window
- ``encode`` renders templates (with their raw recurrence rules) as iCalendar
  text
"""

__version__ = "0.1.0"

from typing import Optional

from .ics_encoder import CalendarEncoder, encode
from .models import (
    EventTemplate,
    Frequency,
    OccurrenceInstance,
    RecurrenceRule,
    Terminator,
    TerminatorKind,
    Weekday,
)
from .recurrence_expander import CandidateWalk, StopReason, expand, expand_template
from .template_store import TemplateStore

__all__ = [
    "CalendarEncoder",
    "CandidateWalk",
    "EventTemplate",
    "Frequency",
    "OccurrenceInstance",
    "RecurrenceRule",
    "StopReason",
    "TemplateStore",
    "Terminator",
    "TerminatorKind",
    "Weekday",
    "encode",
    "expand",
    "expand_template",
]


def _init_logging(level_name: Optional[str]) -> None:
    """Initialize root logging to stream to console.

    Installs a colorized stderr handler once and sets the root level. The
    CALMAKER_DEBUG environment variable (truthy values: "1", "true", "yes",
    "on") forces DEBUG verbosity regardless of ``level_name``.
    """
    import logging
    import os
    import sys

    from colorlog import ColoredFormatter

    debug_env = os.environ.get("CALMAKER_DEBUG", "")
    if debug_env.strip().lower() in ("1", "true", "yes", "on"):
        level_name = "DEBUG"

    root = logging.getLogger()
    # Only configure a handler if none is present
    if not root.handlers:
        handler = logging.StreamHandler(stream=sys.stderr)
        # HH:MM:SS  LEVEL   logger.name: message, only the level colorized
        fmt = "%(asctime)s %(log_color)s%(levelname)-7s%(reset)s %(name)s: %(message)s"
        log_colors = {
            "DEBUG": "cyan",
            "INFO": "green",
            "WARNING": "yellow",
            "ERROR": "red",
            "CRITICAL": "bold_red",
        }
        handler.setFormatter(ColoredFormatter(fmt, datefmt="%H:%M:%S", log_colors=log_colors))
        root.addHandler(handler)

    level = logging.INFO
    if isinstance(level_name, str):
        level = getattr(logging, level_name.upper(), logging.INFO)
    root.setLevel(level)
    logging.getLogger(__name__).debug(
        "Logging initialized at level %s", logging.getLevelName(level)
    )

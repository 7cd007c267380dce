"""Write exported calendars to disk.

Two layouts are supported: every selected template in one ``.ics`` file, or
one ``.ics`` file per course group bundled in a zip archive. Course groups
come from the template title with a trailing parenthetical removed, so
"Algebra (Lecture)" and "Algebra (Lab)" share the "Algebra" file.
"""

import logging
import re
import zipfile
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from typing import Optional

from .exceptions import ExportError
from .ics_encoder import CalendarEncoder
from .models import EventTemplate

logger = logging.getLogger(__name__)

GROUP_FILENAME_MAX_LENGTH = 50

_UNSAFE_CHARS = re.compile(r"[^a-z0-9]", re.IGNORECASE)
_TRAILING_PARENTHETICAL = re.compile(r"^(.*?)\s*\([^)]+\)$")


def safe_filename(text: str, max_length: Optional[int] = None) -> str:
    """Replace every character outside ``[A-Za-z0-9]`` with ``_``."""
    cleaned = _UNSAFE_CHARS.sub("_", text)
    return cleaned[:max_length] if max_length is not None else cleaned


def course_group_name(title: str) -> str:
    """Strip one trailing parenthetical from a title.

    >>> course_group_name("Computer Organization (Lecture)")
    'Computer Organization'
    >>> course_group_name("Office Hours")
    'Office Hours'
    """
    match = _TRAILING_PARENTHETICAL.match(title)
    if match and match.group(1):
        return match.group(1).strip()
    return title


def group_by_course(templates: Iterable[EventTemplate]) -> dict[str, list[EventTemplate]]:
    """Group templates by course name, preserving first-seen order."""
    groups: dict[str, list[EventTemplate]] = {}
    for template in templates:
        groups.setdefault(course_group_name(template.title), []).append(template)
    return groups


def _member_name(stem: str, used: set[str]) -> str:
    """Archive member name for a group, suffixed with _2, _3, ... when taken."""
    name = stem
    suffix = 2
    while name in used:
        name = f"{stem}_{suffix}"
        suffix += 1
    used.add(name)
    return f"{name}.ics"


def _write_text(path: Path, content: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        # newline="" keeps the CRLF line endings intact
        with path.open("w", encoding="utf-8", newline="") as fh:
            fh.write(content)
    except OSError as e:
        raise ExportError(f"Failed to write {path}: {e}") from e


def write_calendar(
    templates: Iterable[EventTemplate],
    path: Path,
    encoder: Optional[CalendarEncoder] = None,
    generated_at: Optional[datetime] = None,
) -> Path:
    """Encode templates into one iCalendar file at an explicit path.

    Raises:
        ExportError: If the file cannot be written
    """
    encoder = encoder or CalendarEncoder()
    path = Path(path)
    _write_text(path, encoder.encode(templates, generated_at=generated_at))
    return path


def export_single(
    templates: Iterable[EventTemplate],
    directory: Path,
    title: str,
    encoder: Optional[CalendarEncoder] = None,
    generated_at: Optional[datetime] = None,
) -> Optional[Path]:
    """Write all templates into ``CalMaker_All_<title>.ics``.

    Returns:
        The written path, or None when there was nothing to export

    Raises:
        ExportError: If the file cannot be written
    """
    selected = list(templates)
    if not selected:
        logger.info("Nothing selected for export")
        return None

    path = Path(directory) / f"CalMaker_All_{safe_filename(title).lower()}.ics"
    write_calendar(selected, path, encoder=encoder, generated_at=generated_at)
    logger.info("Exported %d template(s) to %s", len(selected), path)
    return path


def export_individual(
    templates: Iterable[EventTemplate],
    directory: Path,
    title: str,
    encoder: Optional[CalendarEncoder] = None,
    generated_at: Optional[datetime] = None,
) -> Optional[Path]:
    """Write one ``.ics`` per course group into ``CalMaker_Export_<title>.zip``.

    Returns:
        The written archive path, or None when there was nothing to export

    Raises:
        ExportError: If the archive cannot be written
    """
    groups = group_by_course(templates)
    if not groups:
        logger.info("Nothing selected for export")
        return None

    encoder = encoder or CalendarEncoder()
    path = Path(directory) / f"CalMaker_Export_{safe_filename(title).lower()}.zip"

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            used: set[str] = set()
            for group_name, group_templates in groups.items():
                member = _member_name(safe_filename(group_name, GROUP_FILENAME_MAX_LENGTH), used)
                archive.writestr(member, encoder.encode(group_templates, generated_at=generated_at))
                logger.debug("Added %s (%d template(s))", member, len(group_templates))
    except OSError as e:
        raise ExportError(f"Failed to write {path}: {e}") from e

    logger.info("Exported %d course group(s) to %s", len(groups), path)
    return path

"""Helpers over expansion output: display ordering, per-day grouping and
whole-series expansion."""

import logging
from collections.abc import Iterable
from datetime import date
from typing import Optional

from .date_utils import parse_date
from .exceptions import DateParseError
from .models import EventTemplate, OccurrenceInstance
from .recurrence_expander import DEFAULT_MAX_STEPS, expand

logger = logging.getLogger(__name__)


def _display_key(instance: OccurrenceInstance) -> tuple:
    # All-day entries first, then by start time; untimed entries keep input order
    return (not instance.all_day, instance.start_time or "")


def sort_occurrences(instances: Iterable[OccurrenceInstance]) -> list[OccurrenceInstance]:
    """Order instances by date, then all-day first, then start time."""
    return sorted(instances, key=lambda i: (i.occurrence_date, *_display_key(i)))


def group_by_date(instances: Iterable[OccurrenceInstance]) -> dict[date, list[OccurrenceInstance]]:
    """Bucket instances per occurrence date, each bucket in display order.

    Keys are inserted in ascending date order.
    """
    grouped: dict[date, list[OccurrenceInstance]] = {}
    for instance in sort_occurrences(instances):
        grouped.setdefault(instance.occurrence_date, []).append(instance)
    return grouped


def series_window(templates: Iterable[EventTemplate]) -> Optional[tuple[date, date]]:
    """Date window covering every template's anchor and until date.

    Templates with an unparsable anchor are ignored. Open-ended series only
    contribute their anchor, so the window does not extend past the latest
    anchor or until date.

    Returns:
        (earliest, latest) or None if no template has a usable anchor
    """
    earliest: Optional[date] = None
    latest: Optional[date] = None

    for template in templates:
        try:
            anchor = parse_date(template.anchor_date)
        except DateParseError as e:
            logger.debug("Ignoring template %s for series window: %s", template.id, e)
            continue

        last = anchor
        until = template.recurrence.until
        if template.recurrence.is_recurring and until is not None and until > last:
            last = until

        earliest = anchor if earliest is None or anchor < earliest else earliest
        latest = last if latest is None or last > latest else latest

    if earliest is None or latest is None:
        return None
    return earliest, latest


def expand_all(
    templates: Iterable[EventTemplate],
    max_steps: int = DEFAULT_MAX_STEPS,
) -> list[OccurrenceInstance]:
    """Expand every template over its whole series window, in display order."""
    template_list = list(templates)
    window = series_window(template_list)
    if window is None:
        return []
    return sort_occurrences(expand(template_list, window[0], window[1], max_steps=max_steps))

"""Recurrence expansion: turn event templates into concrete occurrence dates."""

import logging
from collections.abc import Iterable, Iterator
from datetime import date
from enum import Enum
from typing import Optional

from .date_utils import DateLike, add_days, add_months, add_years, coerce_date, parse_date, week_start
from .exceptions import DateParseError
from .models import EventTemplate, Frequency, OccurrenceInstance, RecurrenceRule

logger = logging.getLogger(__name__)

# Upper bound on cursor steps per template
DEFAULT_MAX_STEPS = 2000


class StopReason(str, Enum):
    """Why a candidate walk ended."""

    SINGLE = "single"  # non-recurring template, no walk
    EXHAUSTED_UNTIL = "until"
    EXHAUSTED_COUNT = "count"
    PAST_RANGE = "past_range"
    STALLED = "stalled"  # cursor did not move forward (interval <= 0)
    DATE_LIMIT = "date_limit"  # cursor left the representable calendar
    CEILING = "ceiling"


class CandidateWalk:
    """Lazy, finite sequence of the occurrence dates of one recurring rule.

    Iterating yields every date that belongs to the series, in ascending
    order, starting at the anchor. The walk ends at the first of:

    - a candidate after ``until`` (checked first),
    - ``count`` occurrences already produced,
    - the cursor having moved strictly past ``range_end``,
    - the cursor failing to advance,
    - ``max_steps`` cursor steps.

    ``stop_reason`` is set once iteration has finished, so callers can tell
    a natural end of the series from the step ceiling.
    """

    def __init__(
        self,
        rule: RecurrenceRule,
        anchor: date,
        range_end: date,
        max_steps: int = DEFAULT_MAX_STEPS,
    ):
        self.rule = rule
        self.anchor = anchor
        self.range_end = range_end
        self.max_steps = max_steps
        self.steps = 0
        self.produced = 0
        self.stop_reason: Optional[StopReason] = None

    def __iter__(self) -> Iterator[date]:
        return self._walk()

    def _walk(self) -> Iterator[date]:
        rule = self.rule
        weekdays = [int(d) for d in rule.weekdays()]
        cursor = self.anchor

        while True:
            if self.steps >= self.max_steps:
                self.stop_reason = StopReason.CEILING
                return
            self.steps += 1

            for candidate in self._candidates(cursor, weekdays):
                if rule.until is not None and candidate > rule.until:
                    self.stop_reason = StopReason.EXHAUSTED_UNTIL
                    return
                if rule.count is not None and self.produced >= rule.count:
                    self.stop_reason = StopReason.EXHAUSTED_COUNT
                    return
                self.produced += 1
                yield candidate

            if cursor > self.range_end:
                self.stop_reason = StopReason.PAST_RANGE
                return

            try:
                next_cursor = self._advance(cursor)
            except (OverflowError, ValueError):
                self.stop_reason = StopReason.DATE_LIMIT
                return

            if next_cursor <= cursor:
                self.stop_reason = StopReason.STALLED
                return
            cursor = next_cursor

    def _candidates(self, cursor: date, weekdays: list[int]) -> list[date]:
        if not weekdays:
            return [cursor]
        sunday = week_start(cursor)
        # weekdays is already ascending, so the candidates are too
        return [c for c in (add_days(sunday, wd) for wd in weekdays) if c >= self.anchor]

    def _advance(self, cursor: date) -> date:
        """Move the cursor forward by one interval of the rule's unit.

        Month and year steps clamp to the end of a shorter month and the
        clamped day carries forward (Jan 31, Feb 29, Mar 29).
        """
        offset = self.rule.interval
        freq = self.rule.frequency
        if freq == Frequency.DAILY:
            return add_days(cursor, offset)
        if freq == Frequency.WEEKLY:
            return add_days(cursor, offset * 7)
        if freq == Frequency.MONTHLY:
            return add_months(cursor, offset)
        if freq == Frequency.YEARLY:
            return add_years(cursor, offset)
        raise ValueError(f"Cannot step frequency {freq!r}")


def expand_template(
    template: EventTemplate,
    range_start: DateLike,
    range_end: DateLike,
    max_steps: int = DEFAULT_MAX_STEPS,
) -> tuple[list[OccurrenceInstance], StopReason]:
    """Expand a single template over an inclusive date range.

    Args:
        template: Template to expand
        range_start: First date of the window (inclusive)
        range_end: Last date of the window (inclusive)
        max_steps: Cursor step ceiling for recurring rules

    Returns:
        (instances, stop_reason)

    Raises:
        DateParseError: If the template's anchor date or the range is malformed
    """
    start = coerce_date(range_start)
    end = coerce_date(range_end)
    anchor = parse_date(template.anchor_date)

    if not template.recurrence.is_recurring:
        if start <= anchor <= end:
            return [OccurrenceInstance.from_template(template, anchor)], StopReason.SINGLE
        return [], StopReason.SINGLE

    walk = CandidateWalk(template.recurrence, anchor, end, max_steps=max_steps)
    instances = [
        OccurrenceInstance.from_template(template, occurrence)
        for occurrence in walk
        if start <= occurrence <= end
    ]

    if walk.stop_reason == StopReason.CEILING:
        logger.warning(
            "Expansion of template %s hit the %d step ceiling (produced=%d)",
            template.id,
            max_steps,
            walk.produced,
        )
    else:
        logger.debug(
            "Expanded template %s: steps=%d produced=%d in_range=%d stop=%s",
            template.id,
            walk.steps,
            walk.produced,
            len(instances),
            walk.stop_reason.value if walk.stop_reason else None,
        )

    # stop_reason is always set once the walk generator has returned
    return instances, walk.stop_reason or StopReason.CEILING


def expand(
    templates: Iterable[EventTemplate],
    range_start: DateLike,
    range_end: DateLike,
    max_steps: int = DEFAULT_MAX_STEPS,
) -> list[OccurrenceInstance]:
    """Expand templates into every occurrence inside ``[range_start, range_end]``.

    Output order is unspecified; use ``calmaker.occurrences.sort_occurrences``
    when a display order is needed. A template with an unparsable anchor date
    is skipped and the remaining templates are still expanded. An inverted
    range yields an empty list.

    Args:
        templates: Event templates (any iterable, e.g. a TemplateStore)
        range_start: First date of the window (inclusive)
        range_end: Last date of the window (inclusive)
        max_steps: Cursor step ceiling per template

    Returns:
        Flat list of OccurrenceInstance values
    """
    start = coerce_date(range_start)
    end = coerce_date(range_end)
    if start > end:
        logger.debug("Empty expansion range %s > %s", start, end)
        return []

    expanded: list[OccurrenceInstance] = []
    for template in templates:
        try:
            instances, _ = expand_template(template, start, end, max_steps=max_steps)
        except DateParseError as e:
            logger.warning("Skipping template %s during expansion: %s", template.id, e)
            continue
        expanded.extend(instances)

    return expanded

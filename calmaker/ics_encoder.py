"""iCalendar (RFC 5545) export of event templates.

Each template becomes one VEVENT carrying its raw recurrence rule; nothing is
pre-expanded. Property layout is fixed so that repeated exports of the same
templates with the same generation stamp are byte-identical.
"""

import logging
from collections.abc import Iterable
from datetime import UTC, date, datetime, time
from functools import lru_cache
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from icalendar.parser import foldline
from icalendar.prop import vDate, vDatetime

from .date_utils import add_days, next_day, parse_date, parse_time, weekday_index
from .exceptions import DateParseError, InvalidTemplateError
from .models import EventTemplate, Frequency, RecurrenceRule, TerminatorKind

logger = logging.getLogger(__name__)

DEFAULT_PRODID = "-//CalMaker//EN"
DEFAULT_TIME_ZONE = "UTC"

CRLF = "\r\n"
MAX_LINE_OCTETS = 75

CALENDAR_HEADER = (
    "BEGIN:VCALENDAR",
    "VERSION:2.0",
    "PRODID:{prodid}",
    "CALSCALE:GREGORIAN",
    "METHOD:PUBLISH",
)
CALENDAR_FOOTER = "END:VCALENDAR"


def _ical(value: Any) -> str:
    return value.to_ical().decode("utf-8")


def escape_text(value: str) -> str:
    """Escape a TEXT value: backslash, semicolon, comma and newlines.

    Backslashes are doubled first so no other character sequence is
    reinterpreted.
    """
    if not value:
        return ""
    escaped = value.replace("\\", "\\\\").replace(";", "\\;").replace(",", "\\,")
    return escaped.replace("\r\n", "\\n").replace("\r", "\\n").replace("\n", "\\n")


def _single_line(name: str, value: str) -> str:
    if "\r" in value or "\n" in value:
        raise InvalidTemplateError(f"{name} contains a line break: {value!r}")
    return value


def fold_line(line: str) -> str:
    """Fold a content line to 75 octets with CRLF + single space continuations."""
    return foldline(line, limit=MAX_LINE_OCTETS)


@lru_cache(maxsize=64)
def _is_known_time_zone(name: str) -> bool:
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


def effective_start_date(template: EventTemplate) -> date:
    """First date the exported series may start on.

    For WEEKLY rules with a weekday set, DTSTART must itself fall on one of
    those weekdays, so an anchor on another weekday moves forward to the
    nearest matching day (at most six days later).

    Raises:
        DateParseError: If the anchor date is malformed
    """
    anchor = parse_date(template.anchor_date)
    weekdays = [int(d) for d in template.recurrence.weekdays()]
    if not weekdays:
        return anchor

    current = weekday_index(anchor)
    if current in weekdays:
        return anchor

    days_ahead = min((wd - current) % 7 for wd in weekdays)
    return add_days(anchor, days_ahead)


def format_rrule(rule: RecurrenceRule) -> Optional[str]:
    """Render the RRULE value, or None for a non-repeating rule.

    UNTIL is written as the last second of the until date with a ``Z``
    suffix. No zone conversion is applied; the local date is treated as if it
    were UTC. Consumers rely on this literal form.
    """
    if not rule.is_recurring:
        return None

    parts = [f"FREQ={rule.frequency.value}"]
    if rule.interval > 1:
        parts.append(f"INTERVAL={rule.interval}")

    if rule.frequency == Frequency.WEEKLY:
        by_day = ",".join(day.code for day in rule.weekdays())
        if by_day:
            parts.append(f"BYDAY={by_day}")

    terminator = rule.terminator
    if terminator.kind == TerminatorKind.UNTIL:
        parts.append(f"UNTIL={_ical(vDate(terminator.until))}T235959Z")
    elif terminator.kind == TerminatorKind.COUNT:
        parts.append(f"COUNT={terminator.count}")

    return ";".join(parts)


class CalendarEncoder:
    """Encode event templates into a single VCALENDAR document."""

    def __init__(self, prodid: str = DEFAULT_PRODID, default_time_zone: str = DEFAULT_TIME_ZONE):
        self.prodid = prodid
        self.default_time_zone = default_time_zone

    @classmethod
    def from_config(cls, config: Any) -> "CalendarEncoder":
        """Build an encoder from a Config-like object."""
        return cls(
            prodid=getattr(config, "prodid", DEFAULT_PRODID),
            default_time_zone=getattr(config, "default_time_zone", DEFAULT_TIME_ZONE),
        )

    def encode(
        self,
        templates: Iterable[EventTemplate],
        generated_at: Optional[datetime] = None,
    ) -> str:
        """Encode templates as one iCalendar document.

        Args:
            templates: Templates to export, one VEVENT each
            generated_at: Generation stamp written as DTSTAMP (defaults to now).
                Passing a fixed value makes the output deterministic.

        Returns:
            CRLF-separated, folded iCalendar text
        """
        stamp = self._normalize_stamp(generated_at)

        lines = [line.format(prodid=self.prodid) for line in CALENDAR_HEADER]
        encoded = 0
        for template in templates:
            try:
                lines.extend(self.encode_event_lines(template, stamp))
            except (DateParseError, InvalidTemplateError) as e:
                logger.warning("Skipping template %r during export: %s", template.id, e)
                continue
            encoded += 1
        lines.append(CALENDAR_FOOTER)

        logger.debug("Encoded %d event(s) with DTSTAMP %s", encoded, stamp.isoformat())
        return CRLF.join(fold_line(line) for line in lines)

    def encode_event_lines(self, template: EventTemplate, generated_at: datetime) -> list[str]:
        """Unfolded content lines of one VEVENT block.

        Raises:
            DateParseError: If the anchor date or a time of day is malformed
            InvalidTemplateError: If the id or time zone contains a line break
        """
        start_date = effective_start_date(template)
        lines = [
            "BEGIN:VEVENT",
            f"UID:{_single_line('UID', template.id)}",
            f"DTSTAMP:{_ical(vDatetime(generated_at.replace(tzinfo=None)))}Z",
        ]

        if template.title:
            lines.append(f"SUMMARY:{escape_text(template.title)}")
        if template.description:
            lines.append(f"DESCRIPTION:{escape_text(template.description)}")
        if template.location:
            lines.append(f"LOCATION:{escape_text(template.location)}")

        if template.all_day:
            lines.append(f"DTSTART;VALUE=DATE:{_ical(vDate(start_date))}")
            lines.append(f"DTEND;VALUE=DATE:{_ical(vDate(next_day(start_date)))}")
        else:
            tzid = _single_line("TZID", self._time_zone_for(template))
            start = self._local_datetime(start_date, template.start_time)
            # Zero-duration fallback when no end time was given
            end = self._local_datetime(start_date, template.end_time or template.start_time)
            lines.append(f"DTSTART;TZID={tzid}:{_ical(vDatetime(start))}")
            lines.append(f"DTEND;TZID={tzid}:{_ical(vDatetime(end))}")

        rrule = format_rrule(template.recurrence)
        if rrule:
            lines.append(f"RRULE:{rrule}")

        lines.append("END:VEVENT")
        return lines

    def _time_zone_for(self, template: EventTemplate) -> str:
        tzid = template.time_zone or self.default_time_zone
        if not _is_known_time_zone(tzid):
            logger.warning("Template %s uses unknown time zone %r", template.id, tzid)
        return tzid

    @staticmethod
    def _local_datetime(day: date, time_of_day: Optional[str]) -> datetime:
        if not time_of_day:
            return datetime.combine(day, time(0, 0))
        hour, minute = parse_time(time_of_day)
        return datetime.combine(day, time(hour, minute))

    @staticmethod
    def _normalize_stamp(generated_at: Optional[datetime]) -> datetime:
        if generated_at is None:
            return datetime.now(UTC).replace(microsecond=0)
        if generated_at.tzinfo is None:
            return generated_at.replace(tzinfo=UTC, microsecond=0)
        return generated_at.astimezone(UTC).replace(microsecond=0)


def encode(
    templates: Iterable[EventTemplate],
    generated_at: Optional[datetime] = None,
    prodid: str = DEFAULT_PRODID,
    default_time_zone: str = DEFAULT_TIME_ZONE,
) -> str:
    """Encode templates as one iCalendar document (see CalendarEncoder.encode)."""
    encoder = CalendarEncoder(prodid=prodid, default_time_zone=default_time_zone)
    return encoder.encode(templates, generated_at=generated_at)

"""Data models for recurring calendar templates and their occurrences."""

from datetime import date
from enum import Enum, IntEnum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from .date_utils import format_date

WEEKDAY_CODES = ("SU", "MO", "TU", "WE", "TH", "FR", "SA")


class Frequency(str, Enum):
    """Recurrence frequency. ``NONE`` models a one-off event."""

    NONE = "NONE"
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


class Weekday(IntEnum):
    """Sunday-first weekday index."""

    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6

    @property
    def code(self) -> str:
        """Two-letter iCalendar day code (``SU``, ``MO``, ...)."""
        return WEEKDAY_CODES[self.value]


class TerminatorKind(str, Enum):
    """How a repeating series ends."""

    NEVER = "never"
    COUNT = "count"
    UNTIL = "until"


class Terminator(BaseModel):
    """Resolved end condition of a recurrence rule."""

    kind: TerminatorKind
    count: Optional[int] = None
    until: Optional[date] = None

    model_config = ConfigDict(frozen=True)


class RecurrenceRule(BaseModel):
    """How an event template repeats.

    ``count`` and ``until`` are both optional. A well-formed rule sets at most
    one of them, but both may be present; ``until`` then takes precedence as
    the harder bound.
    """

    frequency: Frequency = Field(default=Frequency.NONE, alias="freq")
    interval: int = Field(default=1, description="Step multiplier in the rule's unit")
    by_weekday: list[int] = Field(
        default_factory=list,
        alias="byWeekday",
        description="Weekday indices (0=Sunday..6=Saturday), WEEKLY only",
    )
    count: Optional[int] = Field(default=None, description="Total number of occurrences")
    until: Optional[date] = Field(default=None, description="Inclusive last date")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("frequency", mode="before")
    @classmethod
    def _upper_frequency(cls, value: Any) -> Any:
        if value is None:
            return Frequency.NONE
        return value.upper() if isinstance(value, str) else value

    @field_validator("interval", mode="before")
    @classmethod
    def _default_interval(cls, value: Any) -> Any:
        # An explicit zero or negative interval is kept as-is
        return 1 if value is None else value

    @field_validator("by_weekday", mode="before")
    @classmethod
    def _default_weekdays(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("count", mode="before")
    @classmethod
    def _normalize_count(cls, value: Any) -> Any:
        if value in (None, ""):
            return None
        # A zero or negative count does not bound anything
        return value if int(value) > 0 else None

    @field_validator("until", mode="before")
    @classmethod
    def _normalize_until(cls, value: Any) -> Any:
        return None if value == "" else value

    @property
    def is_recurring(self) -> bool:
        return self.frequency != Frequency.NONE

    @property
    def terminator(self) -> Terminator:
        """Resolve the single end condition used on the wire.

        ``until`` wins over ``count`` when both are set.
        """
        if self.until is not None:
            return Terminator(kind=TerminatorKind.UNTIL, until=self.until)
        if self.count is not None:
            return Terminator(kind=TerminatorKind.COUNT, count=self.count)
        return Terminator(kind=TerminatorKind.NEVER)

    def weekdays(self) -> list[Weekday]:
        """Distinct valid weekdays in Sunday-first order.

        Empty unless the rule is WEEKLY.
        """
        if self.frequency != Frequency.WEEKLY:
            return []
        return [Weekday(d) for d in sorted(set(self.by_weekday)) if 0 <= d <= 6]


class EventTemplate(BaseModel):
    """User-authored event, possibly recurring.

    ``anchor_date`` stays a ``YYYY-MM-DD`` string so that a template with a
    malformed date can still be loaded; the expander and encoder skip it.
    """

    id: str = Field(..., description="Stable unique id")
    title: str = Field(default="", description="Event title")
    anchor_date: str = Field(..., alias="date", description="First possible occurrence date")
    start_time: Optional[str] = Field(default=None, alias="startTime", description="HH:MM")
    end_time: Optional[str] = Field(default=None, alias="endTime", description="HH:MM")
    all_day: bool = Field(default=False, alias="allDay")
    time_zone: str = Field(default="", alias="timezone", description="IANA zone identifier")
    location: str = Field(default="")
    description: str = Field(default="")
    recurrence: RecurrenceRule = Field(default_factory=RecurrenceRule)
    created_at: Optional[int] = Field(default=None, alias="createdAt")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("location", "description", "title", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("anchor_date", mode="before")
    @classmethod
    def _date_to_text(cls, value: Any) -> Any:
        # YAML loads an unquoted 2024-01-15 as a date
        return format_date(value) if isinstance(value, date) else value

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _empty_time_to_none(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            # YAML 1.1 reads an unquoted 13:00 as the base-60 integer 780
            hours, minutes = divmod(value, 60)
            return f"{hours:02d}:{minutes:02d}"
        return None if value == "" else value


class OccurrenceInstance(BaseModel):
    """One concrete date on which a template occurs.

    Display fields are copied from the template so consumers need no lookup.
    """

    source_template_id: str
    occurrence_date: date
    title: str = ""
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    all_day: bool = False
    time_zone: str = ""
    location: str = ""
    description: str = ""

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_template(cls, template: EventTemplate, occurrence_date: date) -> "OccurrenceInstance":
        return cls(
            source_template_id=template.id,
            occurrence_date=occurrence_date,
            title=template.title,
            start_time=template.start_time,
            end_time=template.end_time,
            all_day=template.all_day,
            time_zone=template.time_zone,
            location=template.location,
            description=template.description,
        )

    @field_serializer("occurrence_date")
    def serialize_date(self, value: date) -> str:
        """Serialize the occurrence date as YYYY-MM-DD."""
        return format_date(value)

"""Exception hierarchy for calmaker.

The expansion and encoding cores never raise for bad template data; they log
and skip. These exceptions surface at the edges: parsing helpers, the template
store, configuration loading and export.
"""


class CalmakerError(Exception):
    """Base exception for all calmaker errors.

    The CLI catches this type to turn failures into a logged message and a
    non-zero exit status.
    """


class DateParseError(CalmakerError, ValueError):
    """A date or time-of-day string could not be parsed.

    Raised when:
    - A date is not in YYYY-MM-DD form or names a non-existent day
    - A time-of-day is not in HH:MM form or is out of range
    """


class TemplateNotFoundError(CalmakerError, KeyError):
    """No template with the requested id exists in the store."""

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0]) if self.args else ""


class InvalidTemplateError(CalmakerError, ValueError):
    """A template value cannot be written as an iCalendar property.

    Raised when an identifier such as the UID or TZID contains a line break.
    """


class DuplicateTemplateError(CalmakerError):
    """A template with the same id is already present in the store."""


class ConfigError(CalmakerError):
    """Configuration file exists but cannot be used."""


class ExportError(CalmakerError):
    """Writing an exported calendar file failed."""

"""Tests for the calmaker exception hierarchy."""

import pytest

from calmaker.exceptions import (
    CalmakerError,
    ConfigError,
    DateParseError,
    DuplicateTemplateError,
    ExportError,
    InvalidTemplateError,
    TemplateNotFoundError,
)

pytestmark = pytest.mark.unit


class TestExceptionHierarchy:
    """Test the exception hierarchy is properly structured."""

    def test_all_exceptions_inherit_from_base(self):
        """All custom exceptions should inherit from CalmakerError."""
        for exc_class in (
            ConfigError,
            DateParseError,
            DuplicateTemplateError,
            ExportError,
            InvalidTemplateError,
            TemplateNotFoundError,
        ):
            assert issubclass(exc_class, CalmakerError)

    def test_builtin_bases_are_kept(self):
        assert issubclass(DateParseError, ValueError)
        assert issubclass(InvalidTemplateError, ValueError)
        assert issubclass(TemplateNotFoundError, KeyError)

    def test_template_not_found_message_is_not_quoted(self):
        """KeyError subclasses should still render a plain message."""
        exc = TemplateNotFoundError("Template 'x' not found")
        assert str(exc) == "Template 'x' not found"

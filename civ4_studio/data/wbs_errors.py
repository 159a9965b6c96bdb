"""Exceptions raised while reading WorldBuilder scenario files.

Every failure is fatal to the parse call. Entity ``unpack`` methods raise
these without line information; the parser attaches the offending line
number and content before re-raising.
"""

from typing import Optional


class ScenarioParseError(ValueError):
    """Base class for all WorldBuilder parse failures."""

    def __init__(
        self,
        message: str,
        line_number: Optional[int] = None,
        line: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.line_number = line_number
        self.line = line

    def with_context(self, line_number: int, line: str) -> "ScenarioParseError":
        """Attach line information unless it is already set.

        Args:
            line_number: 1-based physical line number
            line: Trimmed line content

        Returns:
            The same exception, for use in ``raise err.with_context(...)``
        """
        if self.line_number is None:
            self.line_number = line_number
            self.line = line
        return self

    def __str__(self) -> str:
        if self.line_number is None:
            return f"parse error: {self.message}"
        return f"parse error: {self.message} (at line {self.line_number})"


class StructuralError(ScenarioParseError):
    """Unexpected token for the current section context."""


class UnknownKeyError(ScenarioParseError):
    """Key outside the enumerated field set of an entity."""

    def __init__(self, key: str, section: str = "") -> None:
        where = f" in {section} section" if section else ""
        super().__init__(f"unknown key '{key}'{where}")
        self.key = key


class ValueConversionError(ScenarioParseError):
    """Field value that does not convert to the expected type."""

    def __init__(self, key: str, value: str, expected: str) -> None:
        super().__init__(f"bad value '{value}' for key '{key}' (expected {expected})")
        self.key = key
        self.value = value


class IncompleteScenarioError(ScenarioParseError):
    """Input ended without a closed game section."""


def truncate_message(message: str, limit: int = 200) -> str:
    """Shorten an error message for display.

    Examples:
        >>> truncate_message("abcdef", limit=4)
        'a...'
    """
    if limit <= 3 or len(message) <= limit:
        return message
    return message[: limit - 3] + "..."

"""Section-oriented text writer for the WorldBuilder scenario format.

Sections nest: every ``start_section`` pushes its closing tag and indents the
following lines by one tab, ``end_section`` pops it back. Optional fields are
dropped by ``add_key_value`` when their value is unset: ``None``, ``False``,
an empty string or an empty sequence. Integer zero is a real value and is
written. Elements of a repeated field are never dropped.
"""

import io
from typing import Any, Iterable, List, Optional, Tuple

DEFAULT_LINE_INDENT = "\t"


def is_unset(value: Any) -> bool:
    """Return True for values the format omits instead of writing."""
    if value is None or value is False:
        return True
    if isinstance(value, (str, list, tuple, dict)):
        return len(value) == 0
    return False


def format_value(value: Any) -> str:
    """Render a scalar the way the game writes it (booleans as 1/0)."""
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


class ScenarioGenerator:
    """Writer that builds a scenario file line by line."""

    def __init__(self, indent_unit: str = DEFAULT_LINE_INDENT) -> None:
        self._buffer = io.StringIO()
        self._indent_unit = indent_unit
        self._indent = 0
        self._end_tags: List[str] = []

    @property
    def depth(self) -> int:
        return self._indent

    def getvalue(self) -> str:
        """Return the text generated so far."""
        return self._buffer.getvalue()

    def to_bytes(self, encoding: str = "latin-1") -> bytes:
        return self.getvalue().encode(encoding)

    def _write_indent(self) -> None:
        self._buffer.write(self._indent_unit * self._indent)

    def start_section(self, start_tag: str, end_tag: str) -> None:
        """Open a section and remember its closing tag.

        Args:
            start_tag: Tag written at the current depth, e.g. ``BeginPlot``
            end_tag: Tag written by the matching ``end_section`` call
        """
        self.add_line(start_tag)
        self._end_tags.append(end_tag)
        self._indent += 1

    def end_section(self) -> None:
        """Close the innermost open section. Does nothing if none is open."""
        if not self._end_tags:
            return

        self._indent -= 1
        self.add_line(self._end_tags.pop())

    def add_line(self, line: str) -> None:
        self._write_indent()
        self._buffer.write(line)
        self._buffer.write("\n")

    def add_comment(self, comment: str) -> None:
        """Write a ``#`` comment line without indentation."""
        self._buffer.write(f"#{comment}\n")

    def add_key_value(self, key: str, value: Any) -> None:
        """Write ``key=value``, or nothing when the value is unset."""
        if is_unset(value):
            return

        self.add_line(f"{key}={format_value(value)}")

    def add_key_value_bool(self, key: str, value: bool) -> None:
        """Write ``key=1`` for a set flag. Cleared flags are omitted."""
        if value:
            self.add_line(f"{key}=1")

    def add_flag(self, key: str, value: bool) -> None:
        """Write a presence-only flag as a bare key."""
        if value:
            self.add_line(key)

    def add_key_value_list(self, key: str, values: Optional[Iterable[Any]]) -> None:
        """Write one ``key=value`` line per item of a repeated field.

        An empty list writes nothing. Every element of a non-empty list is
        written, an empty string element as a bare ``key=``.
        """
        for value in values or ():
            self.add_line(f"{key}={format_value(value)}")

    def add_comma_separated_values(self, *values: Any) -> None:
        """Write all values on one line joined by commas."""
        self.add_line(",".join(format_value(value) for value in values))

    def add_key_value_group(self, *pairs: Tuple[str, Any]) -> None:
        """Write the set members of a key group on one comma-joined line.

        Unset members are left out; nothing is written when all are unset.
        """
        parts = [f"{key}={format_value(value)}" for key, value in pairs if not is_unset(value)]
        if parts:
            self.add_comma_separated_values(*parts)

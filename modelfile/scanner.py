"""
Scanner for the model description language.

Tokens need not be separated by whitespace: ``(8-17 0.9);`` scans as a begin
paren, a number, a dash, a number, a number, an end paren and a semicolon.
Every ``get_next_*`` method reports a warning, with line and column, when
the expected token is missing and returns a default value instead.
"""

import re
from typing import Optional

from modelfile.errors import ErrorReporter

_DELIMITERS = re.compile(r"[ \t\r\n]*")
_NOT_NAME = re.compile(r"[^A-Za-z \t\r\n]+")
_NAME = re.compile(r"[A-Za-z][0-9A-Za-z]*")
_NOT_INT = re.compile(r"[^-0-9 \t\r\n]+")
_INT = re.compile(r"-?[0-9]+")
_FLOAT = re.compile(r"-?([0-9]+\.[0-9]*|\.[0-9]+|[0-9]+)")
_TOKEN = re.compile(r"[^ \t\r\n]+")

BEGIN_PAREN = "("
END_PAREN = ")"
DASH = "-"
SEMICOLON = ";"


class ModelScanner:
    """
    Position-tracking scanner over the text of a model description.

    Args:
        text: The whole model description
        errors: Where to report problems
    """

    def __init__(self, text: str, errors: Optional[ErrorReporter] = None):
        self.text = text
        self.errors = errors or ErrorReporter()
        self.pos = 0

    # position reporting

    @property
    def line(self) -> int:
        return self.text.count("\n", 0, self.pos) + 1

    @property
    def column(self) -> int:
        return self.pos - (self.text.rfind("\n", 0, self.pos) + 1) + 1

    def warn(self, message: str) -> None:
        self.errors.warn(message, self.line, self.column)

    # basic scanning

    def _skip_delimiters(self) -> None:
        self.pos = _DELIMITERS.match(self.text, self.pos).end()

    def _match(self, pattern: "re.Pattern") -> str:
        m = pattern.match(self.text, self.pos)
        if m is None:
            return ""
        self.pos = m.end()
        return m.group()

    def has_next(self) -> bool:
        """True if there is more non-blank text to scan."""
        self._skip_delimiters()
        return self.pos < len(self.text)

    def next(self) -> str:
        """Scan and return the next whitespace-delimited token."""
        self._skip_delimiters()
        return self._match(_TOKEN)

    # tokens

    def get_next_name(self, default: str, context: str) -> str:
        """
        Scan the next name, or complain if it is missing.

        Names are a letter followed by letters or digits.  Junk in front of
        the name is skipped with a warning.
        """
        self._skip_delimiters()
        junk = self._match(_NOT_NAME)
        if junk:
            self.warn(f"{context}: name expected, skipping {junk}")
            self._skip_delimiters()
        name = self._match(_NAME)
        if not name:
            self.warn(context)
            return default
        return name

    def get_next_int(self, default: int, context: str) -> int:
        """Scan the next integer, or complain if it is missing."""
        self._skip_delimiters()
        junk = self._match(_NOT_INT)
        if junk:
            self.warn(f"{context}: int expected, skipping {junk}")
            self._skip_delimiters()
        text = self._match(_INT)
        if not text:
            self.warn(context)
            return default
        return int(text)

    def get_next_float(self, default: float, context: str) -> float:
        """
        Scan the next number, or complain if it is missing.

        Numbers are simple integers or have a point with digits on at least
        one side of it.  Exponential notation is not supported.
        """
        self._skip_delimiters()
        text = self._match(_FLOAT)
        if not text:
            self.warn(context)
            return default
        return float(text)

    def try_next_literal(self, literal: str) -> bool:
        """Skip the literal if it comes next; report whether it did."""
        self._skip_delimiters()
        if self.text.startswith(literal, self.pos):
            self.pos += len(literal)
            return True
        return False

    def get_next_literal(self, literal: str, context: str) -> None:
        """Skip the literal, or complain if it is missing."""
        if not self.try_next_literal(literal):
            self.warn(context)

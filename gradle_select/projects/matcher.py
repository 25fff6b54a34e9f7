"""POSIX extended regular expressions for project names.

Patterns come from the command line and are written for ``grep -E``. Python's
``re`` understands almost all of ERE; the bracket character classes
(``[[:alpha:]]`` and friends) are translated before compiling.
"""

from __future__ import annotations

import re

from gradle_select.errors import PatternError

_POSIX_CLASSES: dict[str, str] = {
    "[:alnum:]": "a-zA-Z0-9",
    "[:alpha:]": "a-zA-Z",
    "[:blank:]": " \\t",
    "[:digit:]": "0-9",
    "[:lower:]": "a-z",
    "[:punct:]": "!-/:-@\\[-`{-~",
    "[:space:]": " \\t\\n\\r\\f\\v",
    "[:upper:]": "A-Z",
    "[:xdigit:]": "0-9A-Fa-f",
}


def _translate_classes(pattern: str) -> str:
    for posix, python in _POSIX_CLASSES.items():
        pattern = pattern.replace(posix, python)
    return pattern


class PatternMatcher:
    """A compiled name pattern with substring ("search") semantics.

    A name matches when any part of it satisfies the pattern; anchor with
    ``^`` / ``$`` to match whole names.
    """

    def __init__(self, pattern: str) -> None:
        self.pattern = pattern
        try:
            self._regex = re.compile(_translate_classes(pattern))
        except re.error as exc:
            raise PatternError(pattern, str(exc)) from exc

    def matches(self, name: str) -> bool:
        return self._regex.search(name) is not None

    def __repr__(self) -> str:
        return f"PatternMatcher({self.pattern!r})"

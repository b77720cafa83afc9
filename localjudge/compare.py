"""
Comparison of program output against the expected answer.

Only exact comparison is supported, optionally ignoring letter case.  Line
endings are normalized on both sides first, so CRLF output from a runtime
never causes a mismatch on its own.  There is no whitespace
trimming or numeric tolerance; callers that need it must normalize before
calling compare().
"""
import re

_LINE_ENDINGS = re.compile(r'\r\n?')


def normalize_line_endings(text: str) -> str:
    return _LINE_ENDINGS.sub('\n', text)


def compare(expected: str, actual: str, case_sensitive: bool = True) -> bool:
    """Return True if actual matches expected."""
    expected = normalize_line_endings(expected)
    actual = normalize_line_endings(actual)
    if not case_sensitive:
        expected = expected.lower()
        actual = actual.lower()
    return expected == actual

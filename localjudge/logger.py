"""
Logging for localjudge.

Every module logs to logging.getLogger(__name__), i.e. somewhere below the
"localjudge" logger.  The command line configures output once through
initialize_logging().  Diagnostic text (compiler output, the stderr of a
failing solution) is attached below the message it belongs to with
with_diagnostics(), indented and kept verbatim.
"""

import logging
import sys

import colorlog

FORMAT = '%(log_color)s%(levelname)s %(message)s'


def initialize_logging(log_level: str = 'warning') -> None:
    colorlog.basicConfig(stream=sys.stdout, format=FORMAT, level=getattr(logging, log_level.upper()))


def with_diagnostics(msg: str, diagnostics: str | None, max_lines: int = 15) -> str:
    """Append multi-line diagnostic text to a log message.

    A single line is appended in parentheses, longer text goes on separate
    indented lines, truncated after max_lines lines.  max_lines <= 0
    drops the diagnostics.
    """
    if diagnostics is None or max_lines <= 0:
        return msg
    diagnostics = diagnostics.rstrip()
    if not diagnostics:
        return msg
    lines = diagnostics.split('\n')
    if len(lines) == 1:
        return f'{msg} ({lines[0]})'
    if len(lines) > max_lines:
        lines = lines[:max_lines] + [f'[.....truncated to {max_lines} lines.....]']
    return f'{msg}:\n' + '\n'.join(' ' * 8 + line for line in lines)

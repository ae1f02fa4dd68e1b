"""SQL script loader.

Splits a fixture script into executable statements:

- comment lines (``--`` or ``#``), blank lines and lone ``;`` are skipped;
- ``DELIMITER <token>`` lines switch the statement delimiter for the lines
  that follow (tokens such as ``$$`` or ``|`` drawn from ``; $ | \\``);
- every other line is appended to the current statement, which is emitted
  without its delimiter once the delimiter closes it;
- a trailing statement with no delimiter is emitted as-is.
"""

import re
from typing import Callable, Iterable, Iterator

from structlog import get_logger

logger = get_logger(__name__)

DEFAULT_DELIMITER = ";"

DELIMITER_DIRECTIVE = re.compile(r"DELIMITER ([;$|\\]+)", re.IGNORECASE)
COMMENT_LINE = re.compile(r"^(--.*?|#)", re.DOTALL)


def is_skippable(line: str) -> bool:
    """True for blank lines, a lone default delimiter and comment lines."""
    line = line.strip()
    return line == "" or line == DEFAULT_DELIMITER or COMMENT_LINE.match(line) is not None


class ScriptLoader:
    """Execute a multi-statement script one statement at a time.

    Args:
        execute: Callable that runs one statement; it is expected to raise
            on failure, which aborts the rest of the load.
    """

    def __init__(self, execute: Callable[[str], object]):
        self.execute = execute

    @staticmethod
    def split(lines: Iterable[str]) -> Iterator[str]:
        """Yield the statements of a script lazily.

        The delimiter state starts at ``;`` on every call. Each statement is
        yielded as soon as its last line has been read, so a consumer that
        executes statements while iterating sees them in script order.

        Args:
            lines: Raw script lines, with or without line endings

        Yields:
            Statement text without the closing delimiter
        """
        delimiter = DEFAULT_DELIMITER
        query = ""

        for line in lines:
            directive = DELIMITER_DIRECTIVE.search(line)
            if directive:
                delimiter = directive.group(1)
                logger.debug("Delimiter changed", delimiter=delimiter)
                continue

            if is_skippable(line):
                continue

            query += "\n" + line.rstrip()

            if query.endswith(delimiter):
                yield query[: -len(delimiter)]
                query = ""

        if query != "":
            yield query

    def load(self, lines: Iterable[str]) -> None:
        """Execute every statement of the script in order.

        Args:
            lines: Raw script lines

        Raises:
            Whatever ``execute`` raises; statements already run stay applied.
        """
        executed = 0
        for statement in self.split(lines):
            self.execute(statement)
            executed += 1

        logger.info("Script loaded", statements=executed)

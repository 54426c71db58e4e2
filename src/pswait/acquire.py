"""Resolve the query to watch, from flags or by asking the operator."""

import logging
import sys
from typing import TextIO

from pswait.errors import QueryInputError
from pswait.models import Query
from pswait.snapshot import Lister, decode_listing, ps_listing

log = logging.getLogger(__name__)


def parse_pid(value: str | None) -> int | None:
    """
    Parse a pid given as text.

    Empty or missing text means no pid. Anything else must be an unsigned
    integer.

    Raises:
        QueryInputError: If the text is not numeric.
    """
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None
    if not (text.isascii() and text.isdecimal()):
        raise QueryInputError(f"pid must be a non-negative integer, got {value!r}")
    return int(text)


def _prompt(label: str, stdin: TextIO, stdout: TextIO) -> str | None:
    stdout.write(f"{label}: ")
    stdout.flush()
    line = stdin.readline()
    # EOF reads as an empty answer
    answer = line.strip()
    return answer or None


def acquire_query(
    command: str | None = None,
    pid: str | None = None,
    terminal: str | None = None,
    *,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
    lister: Lister = ps_listing,
) -> Query | None:
    """
    Build the query from flag values, or prompt for it.

    If any flag value is given the query comes from the flags alone.
    Otherwise the current process table is printed for reference and the
    operator is asked for command, pid and tty in turn; an empty answer
    leaves that predicate out.

    Returns:
        The query, or None when no usable predicate was given.

    Raises:
        QueryInputError: If the pid is not numeric.
    """
    if command or pid or terminal:
        query = Query(command=command or None, pid=parse_pid(pid), terminal=terminal or None)
    else:
        stdin = stdin if stdin is not None else sys.stdin
        stdout = stdout if stdout is not None else sys.stdout

        stdout.write(decode_listing(lister()))
        stdout.write("\n")
        query = Query(
            command=_prompt("command", stdin, stdout),
            pid=parse_pid(_prompt("pid", stdin, stdout)),
            terminal=_prompt("tty", stdin, stdout),
        )

    if not query.is_valid():
        log.debug("No usable predicate given")
        return None
    return query

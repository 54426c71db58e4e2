"""Decide whether a query still matches a live process."""

from collections.abc import Sequence

from pswait.models import ProcessRecord, ProcessSnapshot, Query


def matches_group(query: Query, terminal: str, records: Sequence[ProcessRecord]) -> bool:
    """
    Check one terminal group against the query.

    The predicates are OR-ed: any present predicate that holds makes the
    group a match. Shell placeholders are already gone from the snapshot, so
    a tty match only needs one surviving record on that terminal.
    """
    if query.pid is not None and any(record.pid == query.pid for record in records):
        return True

    if query.terminal is not None and terminal == query.terminal and len(records) >= 1:
        return True

    if query.command is not None and any(
        record.command_line.startswith(query.command) for record in records
    ):
        return True

    return False


def matches(query: Query, snapshot: ProcessSnapshot) -> bool:
    """Check whether any terminal group in the snapshot matches the query."""
    return any(matches_group(query, terminal, records) for terminal, records in snapshot.items())


def matching_records(query: Query, snapshot: ProcessSnapshot) -> list[ProcessRecord]:
    """Return the individual records that satisfy a query predicate."""
    found: list[ProcessRecord] = []
    for terminal, records in snapshot.items():
        for record in records:
            if matches_group(query, terminal, [record]):
                found.append(record)
    return found

"""Exceptions raised by pswait."""


class PswaitError(Exception):
    """Base class for pswait errors."""


class ParseError(PswaitError, ValueError):
    """A process-table line does not have the expected shape."""

    def __init__(self, message: str, line: str) -> None:
        super().__init__(f"{message}: {line!r}")
        self.line = line


class QueryInputError(PswaitError, ValueError):
    """A predicate value supplied by the operator is unusable."""


class ListingError(PswaitError, RuntimeError):
    """The process-listing command could not be run."""

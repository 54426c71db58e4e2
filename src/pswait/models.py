"""Data models for pswait."""

from dataclasses import dataclass

# Anything above this cannot be a real pid on the platforms we watch.
MAX_PID = 99999

# Login-shell placeholders ps reports for an idle terminal session.
SHELL_NAMES = frozenset({"-bash", "-zsh", "-sh", "-fish", "-ksh", "-tcsh", "-csh", "-dash"})


@dataclass(slots=True, frozen=True)
class ProcessRecord:
    """One live process as seen in a single process-table listing."""

    pid: int
    terminal: str  # 'ttys000', 'pts/1', '?' for no controlling terminal
    command_line: str


# Records grouped by terminal, keys in sorted order.
ProcessSnapshot = dict[str, list[ProcessRecord]]


@dataclass(slots=True, frozen=True)
class Query:
    """
    The predicates identifying the process to wait for.

    Each predicate is optional; a query holding none of them is not valid.
    Empty command or terminal text and a pid beyond MAX_PID are dropped on
    construction.
    """

    command: str | None = None
    pid: int | None = None
    terminal: str | None = None

    def __post_init__(self) -> None:
        if self.command == "":
            object.__setattr__(self, "command", None)
        if self.terminal == "":
            object.__setattr__(self, "terminal", None)
        if self.pid is not None and self.pid > MAX_PID:
            object.__setattr__(self, "pid", None)

    def is_valid(self) -> bool:
        """Check that at least one predicate is present."""
        return self.command is not None or self.pid is not None or self.terminal is not None

    def render(self) -> str:
        """Render the present predicates as 'label: value' pairs."""
        parts = []
        if self.command is not None:
            parts.append(f"command: {self.command}")
        if self.pid is not None:
            parts.append(f"pid: {self.pid}")
        if self.terminal is not None:
            parts.append(f"tty: {self.terminal}")
        return ", ".join(parts)

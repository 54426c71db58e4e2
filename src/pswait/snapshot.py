"""Process table listing and snapshot building for pswait."""

import logging
import subprocess
from collections import defaultdict
from collections.abc import Callable, Sequence

import psutil

from pswait.errors import ListingError, ParseError
from pswait.models import SHELL_NAMES, ProcessRecord, ProcessSnapshot

log = logging.getLogger(__name__)

HEADER_LABEL = "PID"

# A lister returns the raw text of one process-table listing.
Lister = Callable[[], bytes | str]


def parse_process_line(line: str) -> ProcessRecord:
    """
    Parse one process-table line into a ProcessRecord.

    Columns are pid, terminal, cpu time, then the command line. The command
    tokens are re-joined with single spaces.

    Raises:
        ParseError: If the pid is not numeric or the line has fewer than
            four columns.
    """
    tokens = line.split()
    if len(tokens) < 4:
        raise ParseError("expected at least 4 columns", line)
    if not (tokens[0].isascii() and tokens[0].isdecimal()):
        raise ParseError("pid column is not numeric", line)

    return ProcessRecord(
        pid=int(tokens[0]),
        terminal=tokens[1],
        command_line=" ".join(tokens[3:]),
    )


def build_snapshot(raw_text: str, own_pid: int) -> ProcessSnapshot:
    """
    Build a terminal-grouped snapshot from raw process-table text.

    Drops the header line, the watchdog's own process and idle login-shell
    placeholders. Parse errors propagate: a line we cannot read might be the
    very process being watched.
    """
    own = str(own_pid)
    groups: defaultdict[str, list[ProcessRecord]] = defaultdict(list)

    for line in raw_text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith(HEADER_LABEL):
            continue
        if stripped.split(maxsplit=1)[0] == own:
            continue

        record = parse_process_line(stripped)
        if record.command_line in SHELL_NAMES:
            continue
        groups[record.terminal].append(record)

    return dict(sorted(groups.items()))


def decode_listing(output: bytes | str) -> str:
    """Decode listing output, replacing undecodable bytes."""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output


def take_snapshot(lister: Lister, own_pid: int) -> ProcessSnapshot:
    """Run the lister once and build a snapshot from its output."""
    return build_snapshot(decode_listing(lister()), own_pid)


def ps_listing(command: Sequence[str] = ("ps",)) -> bytes:
    """
    Run ps with no arguments and return its raw stdout.

    Raises:
        ListingError: If ps cannot be started or exits non-zero.
    """
    try:
        result = subprocess.run(list(command), capture_output=True, check=True)
    except (OSError, subprocess.CalledProcessError) as exc:
        raise ListingError(f"could not list processes with {command[0]}") from exc
    return result.stdout


def format_cpu_time(seconds: float) -> str:
    """Format CPU seconds the way ps prints its TIME column."""
    total = int(seconds)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours}:{minutes:02d}:{secs:02d}"


def psutil_listing() -> str:
    """
    Render a ps-style 'PID TTY TIME CMD' table using psutil.

    Used where no ps binary is available. Processes that exit or deny
    access mid-iteration are skipped.
    """
    lines = [f"{HEADER_LABEL:>5} TTY          TIME CMD"]
    attrs = ["pid", "name", "terminal", "cpu_times", "cmdline"]

    for proc in psutil.process_iter(attrs=attrs):
        try:
            with proc.oneshot():
                info = proc.info

                cmdline = info.get("cmdline") or []
                command_line = " ".join(cmdline) if cmdline else info.get("name") or ""
                # one process per line, whatever its argv holds
                command_line = " ".join(command_line.split())
                if not command_line:
                    continue

                terminal = info.get("terminal") or "?"
                terminal = "".join(terminal.removeprefix("/dev/").split()) or "?"

                cpu_times = info.get("cpu_times")
                cpu_seconds = cpu_times.user + cpu_times.system if cpu_times else 0.0

                lines.append(
                    f"{info['pid']:>5} {terminal:<8} {format_cpu_time(cpu_seconds):>8} {command_line}"
                )

        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
            continue

    return "\n".join(lines) + "\n"


LISTERS: dict[str, Lister] = {
    "ps": ps_listing,
    "psutil": psutil_listing,
}


def get_lister(source: str) -> Lister:
    """Look up a lister by name."""
    try:
        return LISTERS[source]
    except KeyError:
        raise ValueError(f"unknown process source: {source}") from None

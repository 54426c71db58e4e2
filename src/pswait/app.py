"""pswait - live dashboard shown while waiting on a process."""

import logging
from collections.abc import Sequence
from logging.handlers import QueueHandler
from queue import Empty, Queue

from rich.markup import escape
from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Container
from textual.widgets import DataTable, Footer, Static

from pswait.config import WatchConfig
from pswait.models import ProcessRecord, ProcessSnapshot, Query
from pswait.notify import Notifier
from pswait.snapshot import Lister
from pswait.watchdog import Watchdog, WatchOutcome, WatchStatus


def format_elapsed(seconds: int) -> str:
    """Format elapsed seconds as HH:MM:SS."""
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


class StatusPanel(Static):
    """Header widget showing the query and the watch progress."""

    DEFAULT_CSS = """
    StatusPanel {
        height: auto;
        min-height: 4;
        padding: 1;
        background: $surface;
    }
    """

    def __init__(self, query: Query, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._query = query
        self._tick_count = 0
        self._elapsed_seconds = 0
        self._state_text = "starting"

    def on_mount(self) -> None:
        self.update(self._status_text())

    def update_status(self, status: WatchStatus) -> None:
        """Update the panel from a watch status."""
        self._tick_count = status.tick
        self._elapsed_seconds = status.elapsed
        if status.error is not None:
            self._state_text = f"[red]error: {escape(str(status.error))}[/red]"
        elif status.outcome is not None:
            self._state_text = f"[bold]{status.outcome.value}[/bold]"
        elif status.matched:
            self._state_text = f"[green]running[/green] ({len(status.records)} matching)"
        else:
            self._state_text = "waiting"
        self.update(self._status_text())

    def _status_text(self) -> str:
        return (
            f"Watching {escape(self._query.render())}\n"
            f"Tick {self._tick_count}  Elapsed {format_elapsed(self._elapsed_seconds)}  State {self._state_text}"
        )


class SnapshotTable(Container):
    """Container for the table of live processes."""

    DEFAULT_CSS = """
    SnapshotTable {
        height: 1fr;
        border: solid $primary;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._current_pids: set[int] = set()

    def compose(self) -> ComposeResult:
        yield DataTable(id="snapshot-table")

    def on_mount(self) -> None:
        table = self.query_one("#snapshot-table", DataTable)
        table.cursor_type = "row"

        table.add_column("", key="match", width=2)
        table.add_column("TTY", key="tty", width=10)
        table.add_column("PID", key="pid", width=8)
        table.add_column("Command", key="command")

    def update_snapshot(self, snapshot: ProcessSnapshot, matching: Sequence[ProcessRecord]) -> None:
        """
        Show the records of a snapshot, marking the ones that match.

        Existing rows are updated in place; rows for processes that went away
        are removed.
        """
        table = self.query_one("#snapshot-table", DataTable)
        matching_pids = {record.pid for record in matching}
        records = [record for group in snapshot.values() for record in group]
        new_pids = {record.pid for record in records}

        for pid in self._current_pids - new_pids:
            table.remove_row(str(pid))

        for record in records:
            row_key = str(record.pid)
            mark = "*" if record.pid in matching_pids else ""
            if record.pid in self._current_pids:
                table.update_cell(row_key, "match", mark)
                table.update_cell(row_key, "tty", Text(record.terminal))
                table.update_cell(row_key, "command", Text(record.command_line[:80]))
            else:
                table.add_row(
                    mark, Text(record.terminal), row_key, Text(record.command_line[:80]), key=row_key
                )
            self._current_pids.add(record.pid)

        self._current_pids = new_pids


class WatchApp(App[WatchOutcome]):
    """Dashboard that runs a Watchdog and exits with its outcome."""

    TITLE = "pswait"
    SUB_TITLE = "Waiting for a process to finish"

    CSS = """
    Screen {
        layout: vertical;
    }

    #status-panel {
        dock: top;
        height: auto;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        query: Query,
        config: WatchConfig | None = None,
        *,
        notifiers: Sequence[Notifier] = (),
        lister: Lister | None = None,
        own_pid: int | None = None,
        ring_bell: bool = False,
    ) -> None:
        super().__init__()
        self._query = query
        self._ring_bell = ring_bell
        self._update_queue: Queue[WatchStatus] = Queue()
        # log records from any thread, shown as notifications
        self._log_queue: Queue[logging.LogRecord] = Queue()
        self._log_handler = QueueHandler(self._log_queue)
        self._log_handler.setLevel(logging.INFO)
        self._watchdog = Watchdog(
            query,
            config,
            notifiers=notifiers,
            lister=lister,
            own_pid=own_pid,
            status_queue=self._update_queue,
        )
        self.watch_error: Exception | None = None

    def compose(self) -> ComposeResult:
        yield StatusPanel(self._query, id="status-panel")
        yield SnapshotTable()
        yield Footer()

    def on_mount(self) -> None:
        """Start the watchdog once the app is mounted."""
        logging.getLogger().addHandler(self._log_handler)
        self._watchdog.start()
        self.set_interval(0.5, self._check_for_updates)

    def on_unmount(self) -> None:
        logging.getLogger().removeHandler(self._log_handler)

    def _check_for_updates(self) -> None:
        """Drain the log and status queues and show the latest status."""
        self._show_log_records()

        while True:
            try:
                status = self._update_queue.get_nowait()
            except Empty:
                break
            self._update_ui(status)

            if status.error is not None:
                self.watch_error = status.error
                self.exit(None)
                return
            if status.outcome is not None:
                if status.outcome is WatchOutcome.FINISHED and self._ring_bell:
                    self.bell()
                self.exit(status.outcome)
                return

    def _show_log_records(self) -> None:
        while True:
            try:
                record = self._log_queue.get_nowait()
            except Empty:
                break
            if record.levelno >= logging.ERROR:
                severity = "error"
            elif record.levelno >= logging.WARNING:
                severity = "warning"
            else:
                severity = "information"
            self.notify(record.getMessage(), severity=severity)

    def _update_ui(self, status: WatchStatus) -> None:
        self.query_one("#status-panel", StatusPanel).update_status(status)
        if status.error is None:
            self.query_one(SnapshotTable).update_snapshot(status.snapshot, status.records)

    def action_quit(self) -> None:
        """Stop the watchdog and leave."""
        self._watchdog.stop()
        self.exit(WatchOutcome.STOPPED)

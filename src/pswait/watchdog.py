"""Polling loop that waits for a watched process to go away."""

import logging
import os
import threading
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from queue import Queue

from pswait.config import WatchConfig
from pswait.matcher import matches, matching_records
from pswait.models import ProcessRecord, ProcessSnapshot, Query
from pswait.notify import Notifier, notify_all
from pswait.snapshot import Lister, get_lister, take_snapshot

log = logging.getLogger(__name__)


class WatchOutcome(Enum):
    """How a watch run ended."""

    FINISHED = "finished"  # matched at least once, then disappeared
    NOT_FOUND = "not_found"  # never matched
    TIMED_OUT = "timed_out"  # still running when the budget ran out
    STOPPED = "stopped"


@dataclass(slots=True)
class WatchStatus:
    """State of the watch after one polling tick."""

    tick: int
    elapsed: int  # seconds since the first tick
    matched: bool
    seen: bool
    records: list[ProcessRecord] = field(default_factory=list)
    snapshot: ProcessSnapshot = field(default_factory=dict)
    outcome: WatchOutcome | None = None
    error: Exception | None = None


class Watchdog:
    """
    Polls the process table until the query stops matching.

    run() blocks in the calling thread. start() runs the same loop in a
    daemon thread and pushes every WatchStatus to the given queue; errors in
    that thread end the loop and are pushed as a status carrying the error.
    """

    def __init__(
        self,
        query: Query,
        config: WatchConfig | None = None,
        *,
        notifiers: Sequence[Notifier] = (),
        lister: Lister | None = None,
        own_pid: int | None = None,
        status_queue: Queue[WatchStatus] | None = None,
    ) -> None:
        """
        Initialize the Watchdog.

        Args:
            query: The predicates to wait on.
            config: Polling settings. Defaults to WatchConfig().
            notifiers: Fired once when a seen process disappears.
            lister: Process-listing callable. Defaults to config.source.
            own_pid: Pid to exclude from snapshots. Defaults to ours.
            status_queue: Receives a WatchStatus after every tick.
        """
        self._query = query
        self._config = config if config is not None else WatchConfig()
        self._notifiers = list(notifiers)
        self._lister = lister if lister is not None else get_lister(self._config.source)
        self._own_pid = own_pid if own_pid is not None else os.getpid()
        self._queue = status_queue
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._ticks = 0
        self._seen = False
        self._minutes_announced = 0

    @property
    def query(self) -> Query:
        return self._query

    @property
    def config(self) -> WatchConfig:
        return self._config

    @property
    def is_running(self) -> bool:
        """Check if the watch thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the watch loop in a background thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run_in_thread,
            daemon=True,
            name="Watchdog",
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the watch loop.

        Args:
            timeout: How long to wait for the thread to stop (seconds).
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def tick(self) -> WatchStatus:
        """Take one snapshot and match the query against it."""
        elapsed = self._ticks * self._config.interval
        self._ticks += 1

        snapshot = take_snapshot(self._lister, self._own_pid)
        matched = matches(self._query, snapshot)

        outcome = None
        if matched:
            self._seen = True
        else:
            outcome = WatchOutcome.FINISHED if self._seen else WatchOutcome.NOT_FOUND

        log.debug("Tick %d: matched=%s", self._ticks, matched)
        self._announce_progress(elapsed)

        return WatchStatus(
            tick=self._ticks,
            elapsed=elapsed,
            matched=matched,
            seen=self._seen,
            records=matching_records(self._query, snapshot) if matched else [],
            snapshot=snapshot,
            outcome=outcome,
        )

    def run(self) -> WatchOutcome:
        """
        Poll until the query stops matching, the budget runs out, or stop()
        is called.

        Listing and parse errors propagate to the caller.
        """
        ticks_left = self._config.max_ticks
        status = self.tick()

        while status.outcome is None:
            ticks_left -= 1
            if ticks_left == 0:
                status.outcome = WatchOutcome.TIMED_OUT
                break
            self._publish(status)
            if self._stop_event.wait(timeout=self._config.interval):
                status.outcome = WatchOutcome.STOPPED
                break
            status = self.tick()

        if status.outcome is WatchOutcome.FINISHED:
            notify_all(self._notifiers, "pswait", f"{self._config.message} {self._query.render()}")
        self._publish(status)
        return status.outcome

    def _run_in_thread(self) -> None:
        try:
            self.run()
        except Exception as exc:
            log.exception("Watch loop failed")
            self._publish(
                WatchStatus(
                    tick=self._ticks,
                    elapsed=self._ticks * self._config.interval,
                    matched=False,
                    seen=self._seen,
                    error=exc,
                )
            )

    def _publish(self, status: WatchStatus) -> None:
        if self._queue is not None:
            self._queue.put(status)

    def _announce_progress(self, elapsed: int) -> None:
        minutes = elapsed // 60
        if not self._config.verbose or minutes <= self._minutes_announced:
            return
        self._minutes_announced = minutes
        unit = "minute" if minutes == 1 else "minutes"
        log.info("%d %s elapsed", minutes, unit)

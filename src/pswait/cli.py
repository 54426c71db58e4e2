"""Command-line entry point for pswait."""

import argparse
import logging
import sys
from collections.abc import Sequence

from pydantic import ValidationError

from pswait.acquire import acquire_query
from pswait.config import WatchConfig
from pswait.errors import ListingError, ParseError, QueryInputError
from pswait.logging_ import setup_logging
from pswait.notify import SpeechAlert, build_notifiers
from pswait.snapshot import get_lister
from pswait.watchdog import Watchdog, WatchOutcome

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_INPUT_ERROR = 2
EXIT_TIMED_OUT = 3
EXIT_LISTING_ERROR = 4
EXIT_INTERRUPTED = 130

OUTCOME_EXIT_CODES = {
    WatchOutcome.FINISHED: EXIT_OK,
    WatchOutcome.STOPPED: EXIT_OK,
    WatchOutcome.NOT_FOUND: EXIT_NOT_FOUND,
    WatchOutcome.TIMED_OUT: EXIT_TIMED_OUT,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pswait",
        description="Wait for a process to finish, then make a noise.",
    )
    parser.add_argument("target", nargs="?", help="Command-name prefix to wait for")
    parser.add_argument("-c", "--command", help="Command-name prefix to wait for")
    parser.add_argument("-p", "--pid", help="Process id to wait for")
    parser.add_argument("-t", "--tty", help="Terminal whose workload to wait for")
    parser.add_argument("-i", "--interval", type=int, default=10, help="Seconds between polls (default: 10)")
    parser.add_argument(
        "--max-duration", type=int, default=60 * 60 * 24, help="Give up after this many seconds (default: one day)"
    )
    parser.add_argument("-q", "--quiet", action="store_true", help="Do not announce elapsed minutes")
    parser.add_argument("--source", choices=["ps", "psutil"], default="ps", help="How to list processes")
    parser.add_argument("--no-sound", action="store_true", help="Do not play an audible alert")
    parser.add_argument("--no-desktop", action="store_true", help="Do not show a desktop notification")
    parser.add_argument("--message", default="Done!", help="Text spoken or shown when done")
    parser.add_argument("--tui", action="store_true", help="Show a live dashboard while waiting")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the pswait command."""
    args = build_parser().parse_args(argv)
    setup_logging(args.debug, tui=args.tui)

    try:
        config = WatchConfig(
            interval=args.interval,
            max_duration=args.max_duration,
            verbose=not args.quiet,
            source=args.source,
            sound=not args.no_sound,
            desktop=not args.no_desktop,
            message=args.message,
        )
    except ValidationError as exc:
        log.error("Invalid configuration: %s", exc)
        return EXIT_INPUT_ERROR

    lister = get_lister(config.source)

    try:
        query = acquire_query(args.command or args.target, args.pid, args.tty, lister=lister)
    except QueryInputError as exc:
        log.error("%s", exc)
        return EXIT_INPUT_ERROR
    except ListingError as exc:
        log.error("%s: %s", exc, exc.__cause__)
        return EXIT_LISTING_ERROR
    except KeyboardInterrupt:
        return EXIT_INTERRUPTED

    if query is None:
        print("nothing to monitor")
        return EXIT_OK

    print(f"monitoring {query.render()}")
    notifiers = build_notifiers(config, terminal_bell=not args.tui)

    try:
        if args.tui:
            from pswait.app import WatchApp

            ring_bell = config.sound and not any(isinstance(n, SpeechAlert) for n in notifiers)
            app = WatchApp(query, config, notifiers=notifiers, lister=lister, ring_bell=ring_bell)
            outcome = app.run()
            if app.watch_error is not None:
                raise app.watch_error
        else:
            outcome = Watchdog(query, config, notifiers=notifiers, lister=lister).run()
    except ListingError as exc:
        log.error("%s: %s", exc, exc.__cause__)
        return EXIT_LISTING_ERROR
    except ParseError as exc:
        log.error("Unexpected process table format: %s", exc)
        return EXIT_LISTING_ERROR
    except KeyboardInterrupt:
        return EXIT_INTERRUPTED

    if outcome is None:
        # dashboard closed before the watch finished
        outcome = WatchOutcome.STOPPED

    if outcome is WatchOutcome.FINISHED:
        print(f"finished: {query.render()}")
    elif outcome is WatchOutcome.NOT_FOUND:
        print(f"no process matches {query.render()}")
    elif outcome is WatchOutcome.TIMED_OUT:
        print(f"still running: {query.render()}")

    return OUTCOME_EXIT_CODES[outcome]


if __name__ == "__main__":
    sys.exit(main())

"""Audible and desktop alerts fired when a watched process goes away."""

import logging
import shutil
import subprocess
import sys
from collections.abc import Iterable
from typing import Protocol, TextIO

from pswait.config import WatchConfig

log = logging.getLogger(__name__)


class Notifier(Protocol):
    def is_supported(self) -> bool:
        ...

    def notify(self, title: str, body: str) -> None:
        ...


class SpeechAlert:
    """Speaks the message with the macOS `say` command."""

    def __init__(self, message: str = "Done!") -> None:
        self._message = message

    def is_supported(self) -> bool:
        return shutil.which("say") is not None

    def notify(self, title: str, body: str) -> None:
        subprocess.run(["say", self._message], capture_output=True, timeout=30, check=True)


class BellAlert:
    """Rings the terminal bell."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    def is_supported(self) -> bool:
        return True

    def notify(self, title: str, body: str) -> None:
        stream = self._stream if self._stream is not None else sys.stdout
        stream.write("\a")
        stream.flush()


def _escape(s: str) -> str:
    return s.replace("\\", "\\\\").replace('"', '\\"')


class DesktopNotifier:
    """Shows a macOS notification via osascript."""

    def is_supported(self) -> bool:
        return sys.platform == "darwin"

    def notify(self, title: str, body: str) -> None:
        script = f'display notification "{_escape(body)}" with title "{_escape(title)}"'
        subprocess.run(["osascript", "-e", script], capture_output=True, timeout=10, check=True)


def build_notifiers(
    config: WatchConfig, stream: TextIO | None = None, *, terminal_bell: bool = True
) -> list[Notifier]:
    """
    Pick the notifiers enabled by the config and available here.

    Without `say` the audible alert falls back to the terminal bell, unless
    terminal_bell is False (a dashboard rings its own bell).
    """
    notifiers: list[Notifier] = []

    if config.sound:
        speech = SpeechAlert(config.message)
        if speech.is_supported():
            notifiers.append(speech)
        elif terminal_bell:
            notifiers.append(BellAlert(stream))

    if config.desktop:
        desktop = DesktopNotifier()
        if desktop.is_supported():
            notifiers.append(desktop)
        else:
            log.debug("Desktop notifications not supported on %s", sys.platform)

    return notifiers


def notify_all(notifiers: Iterable[Notifier], title: str, body: str) -> None:
    """Fire every notifier; one failing does not stop the others."""
    for notifier in notifiers:
        try:
            notifier.notify(title, body)
        except (OSError, subprocess.SubprocessError):
            log.exception("Notifier %s failed", type(notifier).__name__)

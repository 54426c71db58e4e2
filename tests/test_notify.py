"""Tests for the alert notifiers."""

import io
import subprocess
import sys

import pytest

from pswait import notify
from pswait.config import WatchConfig
from pswait.notify import BellAlert, DesktopNotifier, SpeechAlert, build_notifiers, notify_all


class FailingNotifier:
    def is_supported(self):
        return True

    def notify(self, title, body):
        raise OSError("no audio device")


class RecordingNotifier:
    def __init__(self):
        self.calls = []

    def is_supported(self):
        return True

    def notify(self, title, body):
        self.calls.append((title, body))


@pytest.fixture
def recorded_runs(monkeypatch):
    runs = []

    def fake_run(cmd, **kwargs):
        runs.append(cmd)
        return subprocess.CompletedProcess(cmd, 0, stdout=b"", stderr=b"")

    monkeypatch.setattr(notify.subprocess, "run", fake_run)
    return runs


def test_bell_alert_writes_bell():
    stream = io.StringIO()

    BellAlert(stream).notify("pswait", "Done!")

    assert stream.getvalue() == "\a"
    assert BellAlert(stream).is_supported()


def test_speech_alert_runs_say(recorded_runs):
    SpeechAlert("All done").notify("pswait", "ignored")

    assert recorded_runs == [["say", "All done"]]


def test_speech_alert_support_follows_path(monkeypatch):
    monkeypatch.setattr(notify.shutil, "which", lambda name: None)
    assert not SpeechAlert().is_supported()

    monkeypatch.setattr(notify.shutil, "which", lambda name: "/usr/bin/say")
    assert SpeechAlert().is_supported()


def test_desktop_notifier_escapes_quotes(recorded_runs):
    DesktopNotifier().notify("pswait", 'Done! command: echo "hi"')

    assert recorded_runs == [
        ["osascript", "-e", 'display notification "Done! command: echo \\"hi\\"" with title "pswait"']
    ]


def test_desktop_notifier_only_on_macos(monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    assert not DesktopNotifier().is_supported()

    monkeypatch.setattr(sys, "platform", "darwin")
    assert DesktopNotifier().is_supported()


def test_build_notifiers_on_linux(monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setattr(notify.shutil, "which", lambda name: None)

    notifiers = build_notifiers(WatchConfig())

    assert [type(n) for n in notifiers] == [BellAlert]


def test_build_notifiers_without_terminal_bell(monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setattr(notify.shutil, "which", lambda name: None)

    assert build_notifiers(WatchConfig(), terminal_bell=False) == []


def test_build_notifiers_on_macos(monkeypatch):
    monkeypatch.setattr(sys, "platform", "darwin")
    monkeypatch.setattr(notify.shutil, "which", lambda name: "/usr/bin/say")

    notifiers = build_notifiers(WatchConfig())

    assert [type(n) for n in notifiers] == [SpeechAlert, DesktopNotifier]


def test_build_notifiers_respects_config(monkeypatch):
    monkeypatch.setattr(sys, "platform", "darwin")

    assert build_notifiers(WatchConfig(sound=False, desktop=False)) == []


def test_notify_all_continues_after_failure(caplog):
    recorder = RecordingNotifier()

    notify_all([FailingNotifier(), recorder], "pswait", "Done!")

    assert recorder.calls == [("pswait", "Done!")]
    assert "FailingNotifier failed" in caplog.text


def test_notify_all_handles_failed_command(monkeypatch, caplog):
    def fake_run(cmd, **kwargs):
        raise subprocess.CalledProcessError(1, cmd)

    monkeypatch.setattr(notify.subprocess, "run", fake_run)

    notify_all([SpeechAlert()], "pswait", "Done!")

    assert "SpeechAlert failed" in caplog.text

"""Tests for logging setup."""

import logging

import pytest
from textual.logging import TextualHandler

from pswait.logging_ import setup_logging


@pytest.fixture
def bare_root():
    root = logging.getLogger()
    saved_handlers = root.handlers[:]
    saved_level = root.level
    root.handlers = []
    yield root
    root.handlers = saved_handlers
    root.setLevel(saved_level)


def test_installs_one_stream_handler(bare_root):
    # pytest's logging plugin adds its capture handlers after fixture setup
    bare_root.handlers = []
    setup_logging()
    setup_logging()

    assert len(bare_root.handlers) == 1
    assert isinstance(bare_root.handlers[0], logging.StreamHandler)
    assert bare_root.level == logging.INFO


def test_debug_level(bare_root):
    setup_logging(debug=True)

    assert bare_root.level == logging.DEBUG


def test_tui_routes_through_textual(bare_root):
    # pytest's logging plugin adds its capture handlers after fixture setup
    bare_root.handlers = []
    setup_logging(tui=True)

    assert len(bare_root.handlers) == 1
    assert isinstance(bare_root.handlers[0], TextualHandler)

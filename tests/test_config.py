"""Tests for WatchConfig."""

import pytest
from pydantic import ValidationError

from pswait.config import ONE_DAY, WatchConfig


def test_defaults():
    config = WatchConfig()

    assert config.interval == 10
    assert config.max_duration == ONE_DAY
    assert config.verbose is True
    assert config.source == "ps"
    assert config.sound is True
    assert config.desktop is True
    assert config.message == "Done!"


def test_max_ticks_default_is_one_day_of_polls():
    assert WatchConfig().max_ticks == 8640


def test_max_ticks_never_zero():
    assert WatchConfig(interval=60, max_duration=10).max_ticks == 1


@pytest.mark.parametrize("field", ["interval", "max_duration"])
@pytest.mark.parametrize("value", [0, -1])
def test_durations_must_be_positive(field, value):
    with pytest.raises(ValidationError):
        WatchConfig(**{field: value})


def test_unknown_source_rejected():
    with pytest.raises(ValidationError):
        WatchConfig(source="top")

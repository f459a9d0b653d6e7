import logging

import pytest

from cliploom import config
from cliploom.config import EditorSettings
from cliploom.logs import configure_logging


def test_defaults():
    s = EditorSettings()
    assert s.tick_interval == 0.1
    assert s.skip_seconds == 10.0
    assert s.seek_tolerance == 0.2
    assert s.default_quality == "1080p"


def test_from_env_overrides():
    s = EditorSettings.from_env(
        {
            "CLIPLOOM_TICK_INTERVAL": "0.05",
            "CLIPLOOM_DEFAULT_QUALITY": "720p",
            "CLIPLOOM_LOG_LEVEL": "debug",
            "CLIPLOOM_SKIP_SECONDS": "",
        }
    )
    assert s.tick_interval == 0.05
    assert s.default_quality == "720p"
    assert s.log_level == "DEBUG"
    assert s.skip_seconds == 10.0


@pytest.mark.parametrize(
    "env",
    [
        {"CLIPLOOM_TICK_INTERVAL": "fast"},
        {"CLIPLOOM_TICK_INTERVAL": "0"},
        {"CLIPLOOM_DEFAULT_QUALITY": "4k"},
        {"CLIPLOOM_ZOOM_STEP": "1"},
    ],
)
def test_from_env_rejects_bad_values(env):
    with pytest.raises(ValueError):
        EditorSettings.from_env(env)


def test_settings_cached_until_reset(monkeypatch):
    config.reset_settings()
    monkeypatch.setenv("CLIPLOOM_SKIP_SECONDS", "5")
    first = config.settings()
    assert first.skip_seconds == 5.0
    monkeypatch.setenv("CLIPLOOM_SKIP_SECONDS", "7")
    assert config.settings() is first
    config.reset_settings()
    assert config.settings().skip_seconds == 7.0
    config.reset_settings()


def test_configure_logging_single_handler():
    logger = configure_logging("info")
    count = len(logger.handlers)
    configure_logging(logging.DEBUG)
    assert len(logger.handlers) == count
    assert logger.level == logging.DEBUG
    logger.setLevel(logging.WARNING)

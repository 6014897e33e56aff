"""Tests for Settings loading from the environment and .env files."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from route_animator.studio.config import Settings

_VARS = ("MAPBOX_TOKEN", "ROUTE_ANIMATOR_FFMPEG", "ROUTE_ANIMATOR_HTTP_TIMEOUT")


@pytest.fixture
def clean_env(monkeypatch):
    # setenv first so the variables are restored (or removed) after the test
    for name in _VARS:
        monkeypatch.setenv(name, "placeholder")
        monkeypatch.delenv(name)
    return monkeypatch


def test_defaults(clean_env):
    settings = Settings.from_env(dotenv=False)
    assert settings.mapbox_token == ""
    assert settings.ffmpeg_binary == "ffmpeg"
    assert settings.http_timeout == 10.0


def test_reads_environment(clean_env):
    clean_env.setenv("MAPBOX_TOKEN", "pk.test")
    clean_env.setenv("ROUTE_ANIMATOR_FFMPEG", "/opt/ffmpeg/bin/ffmpeg")
    clean_env.setenv("ROUTE_ANIMATOR_HTTP_TIMEOUT", "2.5")

    settings = Settings.from_env(dotenv=False)
    assert settings.mapbox_token == "pk.test"
    assert settings.ffmpeg_binary == "/opt/ffmpeg/bin/ffmpeg"
    assert settings.http_timeout == 2.5


def test_dotenv_file_in_working_directory(clean_env, tmp_path):
    (tmp_path / ".env").write_text("MAPBOX_TOKEN=pk.fromfile\n", encoding="utf-8")
    clean_env.chdir(tmp_path)
    assert Settings.from_env().mapbox_token == "pk.fromfile"


def test_environment_wins_over_dotenv(clean_env, tmp_path):
    (tmp_path / ".env").write_text("MAPBOX_TOKEN=pk.fromfile\n", encoding="utf-8")
    clean_env.chdir(tmp_path)
    clean_env.setenv("MAPBOX_TOKEN", "pk.env")
    assert Settings.from_env().mapbox_token == "pk.env"


@pytest.mark.parametrize("value", ["0", "-3", "soon"])
def test_invalid_timeout(clean_env, value):
    clean_env.setenv("ROUTE_ANIMATOR_HTTP_TIMEOUT", value)
    with pytest.raises(ValidationError):
        Settings.from_env(dotenv=False)

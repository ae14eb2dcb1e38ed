"""Tests for settings and timezone helpers."""

import logging
import os
import time
import zoneinfo
from datetime import datetime, timezone

import pytest

from granola_cli.config import DEFAULT_EXPORT_DIR, Config, default_cache_path
from granola_cli.timezone import (
    convert_to_local,
    format_local_datetime,
    local_timezone,
    parse_timestamp,
)


class TestDefaultCachePath:
    def test_macos(self):
        path = default_cache_path("darwin")
        assert path == os.path.expanduser(
            "~/Library/Application Support/Granola/cache-v3.json"
        )

    def test_windows(self, monkeypatch):
        monkeypatch.setenv("APPDATA", "C:/Users/me/AppData/Roaming")
        path = default_cache_path("win32")
        assert path.replace("\\", "/") == "C:/Users/me/AppData/Roaming/Granola/cache-v3.json"

    def test_linux(self, monkeypatch):
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        path = default_cache_path("linux")
        assert path == os.path.expanduser("~/.config/Granola/cache-v3.json")


class TestConfig:
    def test_defaults(self, monkeypatch):
        for var in ("GRANOLA_CACHE_PATH", "GRANOLA_EXPORT_DIR", "GRANOLA_LOG_LEVEL", "GRANOLA_TIMEZONE"):
            monkeypatch.delenv(var, raising=False)

        cfg = Config()
        assert cfg.cache_path == default_cache_path()
        assert cfg.export_dir == DEFAULT_EXPORT_DIR
        assert cfg.log_level == "warning"
        assert cfg.timezone is None

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("GRANOLA_CACHE_PATH", "~/granola/cache.json")
        monkeypatch.setenv("GRANOLA_TIMEZONE", "Europe/London")

        cfg = Config()
        assert cfg.cache_path == os.path.expanduser("~/granola/cache.json")
        assert not cfg.cache_path.startswith("~")
        assert cfg.timezone == "Europe/London"


class TestTimestamps:
    def test_parse_z_suffix(self):
        dt = parse_timestamp("2025-01-15T10:00:00.123Z")
        assert dt == datetime(2025, 1, 15, 10, 0, 0, 123000, tzinfo=timezone.utc)

    def test_parse_naive_assumed_utc(self):
        assert parse_timestamp("2025-01-15T10:00:00").tzinfo == timezone.utc

    def test_parse_invalid(self):
        assert parse_timestamp("not a date") is None
        assert parse_timestamp("") is None
        assert parse_timestamp(None) is None

    def test_convert_to_named_zone(self):
        tz = zoneinfo.ZoneInfo("America/New_York")
        local = convert_to_local(datetime(2025, 1, 15, 15, 0), tz)
        assert local.hour == 10

    def test_format_local_datetime(self):
        dt = parse_timestamp("2025-07-01T10:00:00Z")
        assert format_local_datetime(dt, zoneinfo.ZoneInfo("Europe/London")) == "2025-07-01 11:00"


class TestLocalTimezone:
    def test_named(self):
        assert local_timezone("Asia/Tokyo") == zoneinfo.ZoneInfo("Asia/Tokyo")

    def test_unknown_name_falls_back(self, caplog):
        with caplog.at_level(logging.WARNING, logger="granola_cli"):
            tz = local_timezone("Mars/Olympus_Mons")

        assert tz is None
        assert "Mars/Olympus_Mons" in caplog.text

    def test_system_default(self):
        assert local_timezone() is None


@pytest.fixture
def eastern_local_time(monkeypatch):
    """Run with the process-local zone set to US Eastern rules."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    monkeypatch.setenv("TZ", "EST5EDT,M3.2.0,M11.1.0")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


class TestSystemLocalTime:
    """Without a configured zone, each instant gets the offset in force at that instant."""

    def test_winter_offset(self, eastern_local_time):
        dt = parse_timestamp("2025-01-15T15:00:00Z")
        assert format_local_datetime(dt, local_timezone()) == "2025-01-15 10:00"

    def test_summer_offset(self, eastern_local_time):
        dt = parse_timestamp("2025-07-15T15:00:00Z")
        assert format_local_datetime(dt, local_timezone()) == "2025-07-15 11:00"

    def test_both_offsets_in_one_run(self, eastern_local_time):
        tz = local_timezone()
        winter = format_local_datetime(parse_timestamp("2025-01-15T15:00:00Z"), tz)
        summer = format_local_datetime(parse_timestamp("2025-07-15T15:00:00Z"), tz)

        assert (winter[-5:], summer[-5:]) == ("10:00", "11:00")

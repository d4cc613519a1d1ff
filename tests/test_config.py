"""Configuration and platform directory tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from photo_sorter import platform_utils
from photo_sorter.config import MIN_SIGNAL_QUEUE_SIZE, Config
from photo_sorter.errors import CacheDirError


def test_defaults() -> None:
    cfg = Config()

    assert not cfg.is_configured()
    assert cfg.log_level == "INFO"
    assert cfg.log_file is None
    assert cfg.signal_queue_size == MIN_SIGNAL_QUEUE_SIZE
    assert cfg.retry_failed is False


def test_overrides_win_over_settings_file(tmp_path: Path) -> None:
    settings = tmp_path / "settings.json"
    settings.write_text(
        json.dumps({"source_folder": "/from/file", "target_folder": "/t", "log_level": "debug"}),
        encoding="utf-8",
    )

    cfg = Config(settings, {"source_folder": "/from/cli", "target_folder": None})

    assert cfg.path == settings
    assert cfg.source_folder == Path("/from/cli")
    assert cfg.target_folder == Path("/t")
    assert cfg.log_level == "DEBUG"
    assert cfg.is_configured()


def test_unreadable_settings_fall_back_to_defaults(tmp_path: Path, caplog) -> None:
    settings = tmp_path / "settings.json"
    settings.write_text("{not json", encoding="utf-8")

    cfg = Config(settings)

    assert cfg.log_level == "INFO"
    assert "using defaults" in caplog.text


def test_unknown_and_non_object_settings_are_ignored(tmp_path: Path) -> None:
    settings = tmp_path / "settings.json"
    settings.write_text(json.dumps({"colour": "blue", "retry_failed": True}), encoding="utf-8")
    listing = tmp_path / "list.json"
    listing.write_text("[1, 2]", encoding="utf-8")

    assert Config(settings).retry_failed is True
    assert Config(listing).retry_failed is False


def test_queue_size_and_log_rotation_are_clamped() -> None:
    cfg = Config(overrides={"signal_queue_size": 10, "max_log_size_mb": 0, "log_backup_count": -1})

    assert cfg.signal_queue_size == MIN_SIGNAL_QUEUE_SIZE
    assert cfg.max_log_size_mb == 1
    assert cfg.log_backup_count == 0


@pytest.fixture
def linux(monkeypatch):
    monkeypatch.setattr(platform_utils, "IS_WINDOWS", False)
    monkeypatch.setattr(platform_utils, "IS_MACOS", False)


def test_cache_dir_prefers_xdg(monkeypatch, linux, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "xdg"))

    assert platform_utils.get_cache_dir() == tmp_path / "xdg"
    assert platform_utils.get_seen_path() == tmp_path / "xdg" / "photosorter" / "seen"


def test_cache_dir_falls_back_to_home(monkeypatch, linux, tmp_path: Path) -> None:
    monkeypatch.delenv("XDG_CACHE_HOME", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))

    assert platform_utils.get_cache_dir() == tmp_path / ".cache"


def test_relative_xdg_cache_is_rejected(monkeypatch, linux) -> None:
    monkeypatch.setenv("XDG_CACHE_HOME", "relative/cache")

    with pytest.raises(CacheDirError):
        platform_utils.get_cache_dir()


def test_no_cache_location_is_an_error(monkeypatch, linux) -> None:
    monkeypatch.delenv("XDG_CACHE_HOME", raising=False)
    monkeypatch.delenv("HOME", raising=False)

    with pytest.raises(CacheDirError):
        platform_utils.get_cache_dir()


def test_windows_uses_local_app_data(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr(platform_utils, "IS_WINDOWS", True)
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path))

    assert platform_utils.get_cache_dir() == tmp_path

    monkeypatch.delenv("LOCALAPPDATA")
    with pytest.raises(CacheDirError):
        platform_utils.get_cache_dir()

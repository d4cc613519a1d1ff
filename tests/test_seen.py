"""Seen cache tests."""

from __future__ import annotations

import os
import stat
from pathlib import Path

import pytest

from photo_sorter.seen import SeenStore


def test_load_missing_file_returns_empty_set(tmp_path: Path) -> None:
    assert SeenStore(tmp_path / "nope" / "seen").load() == set()


def test_save_then_load(tmp_path: Path) -> None:
    store = SeenStore(tmp_path / "seen")

    store.save({"a.jpg", "b c.png"})

    assert store.load() == {"a.jpg", "b c.png"}
    lines = (tmp_path / "seen").read_text(encoding="utf-8").splitlines()
    assert sorted(lines) == ["a.jpg", "b c.png"]


def test_save_replaces_previous_contents(tmp_path: Path) -> None:
    store = SeenStore(tmp_path / "seen")
    store.save({"old.jpg", "keep.jpg"})

    store.save({"keep.jpg"})

    assert store.load() == {"keep.jpg"}


def test_blank_lines_are_ignored(tmp_path: Path) -> None:
    path = tmp_path / "seen"
    path.write_text("a.jpg\n\nb.jpg\n", encoding="utf-8")

    assert SeenStore(path).load() == {"a.jpg", "b.jpg"}


def test_non_utf8_names_round_trip(tmp_path: Path) -> None:
    name = os.fsdecode(b"caf\xe9.jpg")
    store = SeenStore(tmp_path / "seen")

    store.save({name})

    assert store.load() == {name}


def test_save_failure_is_not_fatal(tmp_path: Path, caplog) -> None:
    store = SeenStore(tmp_path / "missing-dir" / "seen")

    store.save({"a.jpg"})

    assert not store.path.exists()
    assert "Could not write seen cache" in caplog.text


@pytest.mark.skipif(os.name == "nt", reason="POSIX permissions")
def test_prepare_creates_private_parent(tmp_path: Path) -> None:
    store = SeenStore(tmp_path / "cache" / "photosorter" / "seen")

    store.prepare()
    store.prepare()

    parent = store.path.parent
    assert parent.is_dir()
    assert stat.S_IMODE(parent.stat().st_mode) == 0o700


def test_carriage_return_in_name_round_trips(tmp_path: Path) -> None:
    store = SeenStore(tmp_path / "seen")

    store.save({"a\rb.jpg", "plain.jpg"})

    assert store.load() == {"a\rb.jpg", "plain.jpg"}

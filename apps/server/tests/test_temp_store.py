from __future__ import annotations

import asyncio
import os
import time
from pathlib import Path

import pytest

from labreport.temp_store import TempFileStore


def _age(path: Path, seconds: float) -> None:
    stamp = time.time() - seconds
    os.utime(path, (stamp, stamp))


def test_write_creates_named_pdf(tmp_path: Path) -> None:
    store = TempFileStore(tmp_path / "temp")
    path = store.write(b"%PDF-1.4 test")
    assert path.parent == store.directory
    assert path.name.startswith("test_report_")
    assert path.suffix == ".pdf"
    assert path.read_bytes() == b"%PDF-1.4 test"
    assert not list(store.directory.glob("*.part"))
    assert store.file_count() == 1


def test_write_names_are_unique(tmp_path: Path) -> None:
    store = TempFileStore(tmp_path)
    names = {store.write(b"x").name for _ in range(20)}
    assert len(names) == 20


def test_sweep_removes_only_old_files(tmp_path: Path) -> None:
    store = TempFileStore(tmp_path / "temp", max_age_s=3600)
    old = store.write(b"old")
    fresh = store.write(b"fresh")
    _age(old, 7200)
    assert store.sweep() == 1
    assert not old.exists()
    assert fresh.exists()


def test_sweep_with_explicit_clock(tmp_path: Path) -> None:
    store = TempFileStore(tmp_path, max_age_s=60)
    path = store.write(b"x")
    assert store.sweep(now=time.time()) == 0
    assert store.sweep(now=time.time() + 120) == 1
    assert not path.exists()


def test_sweep_ignores_subdirectories(tmp_path: Path) -> None:
    store = TempFileStore(tmp_path, max_age_s=1)
    sub = tmp_path / "nested"
    sub.mkdir()
    _age(sub, 3600)
    assert store.sweep() == 0
    assert sub.is_dir()


def test_sweep_tolerates_missing_directory(tmp_path: Path) -> None:
    store = TempFileStore(tmp_path / "temp")
    store.directory.rmdir()
    assert store.sweep() == 0
    assert store.file_count() == 0


def test_sweep_tolerates_files_vanishing(tmp_path: Path, monkeypatch) -> None:
    store = TempFileStore(tmp_path, max_age_s=1)
    path = store.write(b"x")
    _age(path, 3600)
    real_unlink = Path.unlink

    def _racing_unlink(self: Path, missing_ok: bool = False) -> None:
        real_unlink(self)
        raise FileNotFoundError(self)

    monkeypatch.setattr(Path, "unlink", _racing_unlink)
    assert store.sweep() == 0
    assert not path.exists()


@pytest.mark.asyncio
async def test_periodic_sweep_runs_until_cancelled(tmp_path: Path) -> None:
    store = TempFileStore(tmp_path, max_age_s=1)
    path = store.write(b"x")
    _age(path, 3600)
    task = asyncio.create_task(store.run_periodic_sweep(0.01))
    for _ in range(200):
        if not path.exists():
            break
        await asyncio.sleep(0.01)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert not path.exists()

"""Scratch directory for generated reports with age-based cleanup.

Writes land under a hidden ``.part`` name and are renamed into place, so the
sweep (and anyone listing the directory) never sees a half-written PDF.
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from pathlib import Path
from uuid import uuid4

LOGGER = logging.getLogger(__name__)


class TempFileStore:
    def __init__(self, directory: Path, *, max_age_s: float = 3600.0) -> None:
        self.directory = Path(directory)
        self.max_age_s = float(max_age_s)
        self.directory.mkdir(parents=True, exist_ok=True)

    def write(self, data: bytes, *, prefix: str = "test_report", suffix: str = ".pdf") -> Path:
        name = f"{prefix}_{int(time.time() * 1000)}_{uuid4().hex[:8]}{suffix}"
        final = self.directory / name
        partial = self.directory / f".{name}.part"
        try:
            partial.write_bytes(data)
            os.replace(partial, final)
        except OSError:
            partial.unlink(missing_ok=True)
            raise
        return final

    def sweep(self, *, now: float | None = None) -> int:
        """Delete files older than ``max_age_s``; returns how many were removed."""
        now = time.time() if now is None else now
        removed = 0
        try:
            entries = list(self.directory.iterdir())
        except FileNotFoundError:
            return 0
        for path in entries:
            try:
                if not path.is_file() or now - path.stat().st_mtime <= self.max_age_s:
                    continue
                path.unlink()
            except FileNotFoundError:
                # removed concurrently
                continue
            except OSError as exc:
                LOGGER.warning("Could not remove temp file %s: %s", path, exc)
                continue
            removed += 1
        if removed:
            LOGGER.info("Temp sweep removed %d file(s) from %s", removed, self.directory)
        return removed

    def file_count(self) -> int:
        try:
            return sum(1 for path in self.directory.iterdir() if path.is_file())
        except FileNotFoundError:
            return 0

    async def run_periodic_sweep(self, interval_s: float) -> None:
        """Sweep every *interval_s* seconds until cancelled."""
        while True:
            await asyncio.sleep(interval_s)
            try:
                await asyncio.to_thread(self.sweep)
            except Exception:
                LOGGER.warning("Temp sweep failed; will retry next interval.", exc_info=True)

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Optional

from common.errors import SnapshotWriteFailure, SourceUnavailable
from common.logger import get_logger

log = get_logger(__name__)


class FileSnapshotStore:
    """
    Last successfully processed raw document, kept as a single text file.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def read(self) -> Optional[str]:
        if not self.path.exists():
            log.warning("No snapshot at %s, treating every section as new", self.path)
            return None
        try:
            with open(self.path, "r", encoding="utf-8", newline="") as f:
                return f.read()
        except OSError as e:
            raise SourceUnavailable("cannot read snapshot", path=str(self.path)) from e

    def write(self, raw: str) -> None:
        """Replace the snapshot atomically (temp file + rename in the same dir)."""
        try:
            self._replace(raw)
        except OSError as e:
            raise SnapshotWriteFailure(
                "cannot write snapshot", path=str(self.path), stage="snapshot_write"
            ) from e
        log.info("Snapshot updated: %s (%d chars)", self.path, len(raw))

    def _replace(self, raw: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(raw)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

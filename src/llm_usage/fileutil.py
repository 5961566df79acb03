"""Helpers for owner-only JSON files."""

from __future__ import annotations

import contextlib
import os
import tempfile
from pathlib import Path

PRIVATE_DIR_MODE = 0o700
PRIVATE_FILE_MODE = 0o600


def ensure_private_dir(path: Path) -> None:
    """Create ``path`` (and parents) readable only by the owner."""
    path.mkdir(mode=PRIVATE_DIR_MODE, parents=True, exist_ok=True)


def atomic_write_text(path: Path, payload: str) -> None:
    """Replace ``path`` with ``payload`` so readers never see a partial file.

    Writes a sibling temp file with mode 0600 and renames it over the
    target. The temp file is removed if anything fails.
    """
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_name, PRIVATE_FILE_MODE)
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(tmp_name)
        raise

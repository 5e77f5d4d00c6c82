"""File system utilities: atomic writes with permission preservation."""

from __future__ import annotations

import contextlib
import logging
import os
import platform
import stat
import tempfile
from pathlib import Path

log = logging.getLogger(__name__)

FILE_MODE = 0o600

_IS_WINDOWS = platform.system() == "Windows"


def ensure_dir(path: Path) -> Path:
    """Create directory (and parents) if it doesn't exist."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def atomic_write(
    path: Path,
    content: str,
    encoding: str = "utf-8",
    mode: int | None = None,
) -> None:
    """Write content to file atomically via temp file + rename.

    An existing file keeps its permission bits; a new file gets ``mode``
    (owner-only read/write when not given).
    """
    ensure_dir(path.parent)

    if mode is None:
        mode = stat.S_IMODE(path.stat().st_mode) if path.exists() else FILE_MODE

    # Temp file in the same directory so the rename stays on one filesystem
    fd, tmp_path = tempfile.mkstemp(
        dir=path.parent,
        prefix=".tmp_",
        suffix=path.suffix,
    )
    try:
        # newline="" keeps the caller's line endings untouched
        with os.fdopen(fd, "w", encoding=encoding, newline="") as f:
            f.write(content)
        os.replace(tmp_path, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_path)
        raise

    if not _IS_WINDOWS:
        path.chmod(mode)

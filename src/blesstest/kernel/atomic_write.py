"""Atomic file write with fsync for snapshot files."""

from __future__ import annotations

import os
import uuid
from pathlib import Path


def atomic_write_bytes(final_path: Path, content: bytes, temp_prefix: str) -> None:
    """Write bytes to final_path atomically: temp -> fsync -> rename -> fsync dir.

    Temp file is created next to final_path so rename is atomic. On failure,
    temp is removed. Readers never observe a partially written file.

    Args:
        final_path: Destination path for the file.
        content: Raw bytes to write.
        temp_prefix: Prefix for temp filename, e.g. the snapshot stem.

    Raises:
        OSError: If the directory is not writable or the rename fails.
    """
    parent = final_path.parent
    temp_path = parent / f".{temp_prefix}.{os.getpid()}.{uuid.uuid4().hex[:8]}.tmp"
    try:
        fd = os.open(
            str(temp_path),
            os.O_WRONLY | os.O_CREAT | os.O_TRUNC,
            0o644,
        )
        try:
            view = memoryview(content)
            while view:
                written = os.write(fd, view)
                view = view[written:]
            os.fsync(fd)
        finally:
            os.close(fd)
        os.replace(temp_path, final_path)
        try:
            dir_fd = os.open(str(parent), os.O_RDONLY)
            try:
                os.fsync(dir_fd)
            finally:
                os.close(dir_fd)
        except OSError:
            pass  # e.g. Windows: directory fsync best-effort
    finally:
        if temp_path.exists():
            temp_path.unlink(missing_ok=True)

"""Filesystem helpers shared by the document writers."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from apicrate.config import atomic_write
from apicrate.output import info


def write_text(path: Path, contents: str, message: Optional[str] = None) -> int:
    """Atomically write *contents* to *path* and report the byte count.

    Args:
        path: Destination file. Parent directories are created.
        contents: Text to write (UTF-8).
        message: Optional prefix for the progress line.

    Returns:
        Number of bytes written.

    Raises:
        OSError: If the file cannot be written. Callers wrap this in the
            error category of the document they are producing.
    """
    atomic_write(path, contents)
    size = len(contents.encode("utf-8"))
    wrote = f"Wrote {size} bytes to {path}"
    info(f"{message}: {wrote}" if message else wrote)
    return size

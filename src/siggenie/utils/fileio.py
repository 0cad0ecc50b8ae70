"""
Atomic file-write utilities.

Prevents corrupted output when a run is interrupted mid-write by writing to a
temporary file in the same directory and then performing an atomic
``os.replace()`` (POSIX rename guarantee).
"""

from __future__ import annotations

import json
import os
import tempfile
from typing import Any, Callable, IO


def _atomic_write(path: str | os.PathLike, write: Callable[[IO[str]], None]) -> None:
    path = str(path)
    dir_path = os.path.dirname(path) or "."
    tmp_path: str | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w", dir=dir_path, suffix=".tmp", delete=False, encoding="utf-8"
        ) as tmp:
            tmp_path = tmp.name
            write(tmp)
        os.replace(tmp_path, path)
    except BaseException:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


def atomic_write_json(
    path: str | os.PathLike, data: Any, *, indent: int = 2, allow_nan: bool = True
) -> None:
    """Write *data* as JSON atomically via temp-file + rename.

    Parameters
    ----------
    path:
        Destination file path.
    data:
        JSON-serializable object.
    indent:
        JSON indentation (default 2).
    allow_nan:
        If False, NaN and infinite floats raise ValueError instead of being
        written as the non-standard tokens NaN / Infinity.
    """
    _atomic_write(path, lambda fh: json.dump(data, fh, indent=indent, allow_nan=allow_nan))


def atomic_write_csv(path: str | os.PathLike, frame) -> None:
    """Write a DataFrame as CSV atomically via temp-file + rename."""
    _atomic_write(path, lambda fh: frame.to_csv(fh))

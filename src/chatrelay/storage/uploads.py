"""Local-disk store for chat attachments."""

from __future__ import annotations

import re
from collections.abc import Callable
from pathlib import Path
from typing import BinaryIO

from chatrelay.core.types import now_ms
from chatrelay.exceptions import UploadError

_WHITESPACE = re.compile(r"\s+")


def safe_name(original: str, stamp: int) -> str:
    """``<stamp>-<name>`` with whitespace runs collapsed to ``_``."""
    base = Path(original.replace("\\", "/")).name
    return f"{stamp}-{_WHITESPACE.sub('_', base)}"


class UploadStore:
    """Writes uploaded files under one directory and names them uniquely."""

    def __init__(self, root: Path | str, *, clock: Callable[[], int] = now_ms):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self._clock = clock

    def save(self, original_name: str | None, data: BinaryIO) -> str:
        """Copy *data* to disk and return the stored file name."""
        if not original_name:
            raise UploadError("No file uploaded")
        name = safe_name(original_name, self._clock())
        target = self.root / name
        size = 0
        with target.open("wb") as fh:
            while chunk := data.read(64 * 1024):
                fh.write(chunk)
                size += len(chunk)
        if size == 0:
            target.unlink(missing_ok=True)
            raise UploadError("No file uploaded")
        return name

    def path_for(self, name: str) -> Path:
        return self.root / name

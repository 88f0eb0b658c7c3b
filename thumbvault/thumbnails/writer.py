"""Atomic file commits and the thread/async cancellation bridge."""

from __future__ import annotations

import asyncio
import os
import tempfile
import threading
from pathlib import Path
from typing import Callable, TypeVar

from thumbvault.errors import OperationCancelled

T = TypeVar("T")


def check_cancelled(cancel: threading.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise OperationCancelled("Operation cancelled before commit")


def atomic_write_bytes(
    path: Path, data: bytes, cancel: threading.Event | None = None
) -> Path:
    """Write data next to path in a temp file, then rename it into place.

    The rename is the commit point. Each writer gets its own temp file so
    concurrent writers of the same target never truncate each other, and a
    cancelled or failed write never promotes its temp file.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        dir=path.parent, prefix=f"{path.name}.", suffix=".tmp"
    )
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        check_cancelled(cancel)
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
    return path


async def run_cancellable(func: Callable[..., T], *args, **kwargs) -> T:
    """Run a blocking function on a worker thread.

    The function receives a ``cancel`` event that is set when the awaiting
    task is cancelled, so it can abandon its work before committing.
    """
    cancel = threading.Event()
    try:
        return await asyncio.to_thread(func, *args, cancel=cancel, **kwargs)
    except asyncio.CancelledError:
        cancel.set()
        raise

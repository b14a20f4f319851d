from __future__ import annotations

"""File locking and atomic replacement helpers for the state directory."""

import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator

try:
    import fcntl
except ImportError:  # pragma: no cover - fcntl unavailable on non-POSIX platforms  # policy_guard: allow-silent-handler
    fcntl = None

logger = logging.getLogger(__name__)


class FileLockUnavailableError(RuntimeError):
    """Raised when the platform offers no cross-process file locking."""


class KeyedFileLock:
    """
    Blocking per-key mutual exclusion.

    A key is guarded by an in-process ``threading.Lock`` and by ``flock`` on
    ``<lock_dir>/<key>.lock`` so the critical section is exclusive across
    threads of one invocation and across concurrently running invocations.
    """

    def __init__(self, lock_dir: Path) -> None:
        if fcntl is None:
            raise FileLockUnavailableError("State locking requires fcntl on this platform.")
        self.lock_dir = lock_dir
        self.lock_dir.mkdir(parents=True, exist_ok=True)
        self._guard = threading.Lock()
        self._thread_locks: Dict[str, threading.Lock] = {}

    def lock_path(self, key: str) -> Path:
        return self.lock_dir / f"{key}.lock"

    def _thread_lock(self, key: str) -> threading.Lock:
        with self._guard:
            return self._thread_locks.setdefault(key, threading.Lock())

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._thread_lock(key):
            fd = os.open(self.lock_path(key), os.O_RDWR | os.O_CREAT, 0o664)
            try:
                fcntl.flock(fd, fcntl.LOCK_EX)
                yield
            finally:
                try:
                    fcntl.flock(fd, fcntl.LOCK_UN)
                finally:
                    os.close(fd)


def atomic_write_text(path: Path, text: str) -> None:
    """Write ``text`` to ``path`` so readers only ever observe the old or the new content."""

    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:  # policy_guard: allow-silent-handler
            logger.debug("Temporary file %s already removed", tmp_name)
        raise


__all__ = ["FileLockUnavailableError", "KeyedFileLock", "atomic_write_text"]

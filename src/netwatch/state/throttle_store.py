from __future__ import annotations

"""Persistent per-key throttling backed by one timestamp file per key."""

import logging
import re
import time
from pathlib import Path
from typing import Callable, Optional

from .files import KeyedFileLock, atomic_write_text

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class ThrottleStore:
    """
    Answers "has at least N seconds elapsed since key K last fired?".

    Every call that returns True records the current time as the new firing,
    so callers must only ask when they intend to act on a positive answer.
    """

    def __init__(self, timers_dir: Path, *, clock: Callable[[], float] = time.time) -> None:
        self.timers_dir = timers_dir
        self._clock = clock
        self._lock = KeyedFileLock(timers_dir)

    def record_path(self, key: str) -> Path:
        return self.timers_dir / f"{key}.time"

    def should_run(self, key: str, interval: int) -> bool:
        """
        Decide whether the action named ``key`` may fire now.

        Args:
            key: Timer identifier, e.g. ``mem_email_critical``
            interval: Minimum number of seconds between two firings

        Returns:
            True when no record exists or ``interval`` seconds have elapsed; the
            record is then rewritten with the current timestamp. False otherwise,
            leaving the record untouched.
        """
        _validate_key(key)
        try:
            return self._should_run_locked(key, interval)
        except OSError:  # policy_guard: allow-silent-handler
            # Handled like an unpersisted timer: the action fires.
            logger.exception("Failed to lock timer %s; treating as due", key)
            return True

    def _should_run_locked(self, key: str, interval: int) -> bool:
        with self._lock.hold(key):
            now = int(self._clock())
            previous = self._read(key)
            if previous is None:
                self._write(key, now)
                logger.debug("Timer %s created at %d", key, now)
                return True

            elapsed = now - previous
            if elapsed >= interval:
                self._write(key, now)
                logger.debug("Timer %s fired after %ds (interval %ds)", key, elapsed, interval)
                return True

        return False

    def last_fired(self, key: str) -> Optional[int]:
        """Return the recorded timestamp for ``key``, or None when absent or unreadable."""
        _validate_key(key)
        with self._lock.hold(key):
            return self._read(key)

    def reset(self, key: str) -> None:
        """Forget ``key`` so the next query behaves like a first run."""
        _validate_key(key)
        with self._lock.hold(key):
            self.record_path(key).unlink(missing_ok=True)

    def _read(self, key: str) -> Optional[int]:
        path = self.record_path(key)
        try:
            raw = path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except OSError:  # policy_guard: allow-silent-handler
            logger.warning("Timer file %s unreadable; treating %s as first run", path, key)
            return None

        try:
            return int(float(raw))
        except ValueError:  # policy_guard: allow-silent-handler
            logger.warning("Timer file %s holds %r; treating %s as first run", path, raw, key)
            return None

    def _write(self, key: str, timestamp: int) -> None:
        try:
            atomic_write_text(self.record_path(key), f"{timestamp}\n")
        except OSError:  # policy_guard: allow-silent-handler
            # An unpersisted timer means the next run alerts again, never that it stays silent.
            logger.exception("Failed to persist timer %s", key)


def _validate_key(key: str) -> None:
    if not _KEY_PATTERN.match(key):
        raise ValueError(f"Invalid throttle key {key!r}")


__all__ = ["ThrottleStore"]

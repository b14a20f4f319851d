from __future__ import annotations

"""
Content-hash manifests of watched directories.

A manifest is the sorted list of ``"<sha256>  <path>"`` lines (the layout of
``sha256sum``) for every regular file under the configured roots. The stored
manifest is the baseline; comparing it with a freshly computed one yields
the added and removed lines.
"""

import difflib
import hashlib
import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Optional

from .files import KeyedFileLock, atomic_write_text

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 1024 * 1024
_SEPARATOR = "  "


@dataclass(frozen=True, order=True)
class ManifestEntry:
    path: str
    digest: str

    def render(self) -> str:
        return f"{self.digest}{_SEPARATOR}{self.path}"

    @classmethod
    def parse(cls, line: str) -> Optional["ManifestEntry"]:
        digest, sep, path = line.partition(_SEPARATOR)
        if not sep or not digest or not path:
            return None
        return cls(path=path, digest=digest)


@dataclass(frozen=True)
class Manifest:
    entries: tuple[ManifestEntry, ...]

    def lines(self) -> list[str]:
        return [entry.render() for entry in self.entries]

    def text(self) -> str:
        return "".join(f"{line}\n" for line in self.lines())

    @classmethod
    def parse(cls, text: str) -> "Manifest":
        entries = []
        for line in text.splitlines():
            entry = ManifestEntry.parse(line)
            if entry is None:
                logger.debug("Skipping malformed manifest line %r", line)
                continue
            entries.append(entry)
        return cls(entries=tuple(sorted(entries)))


@dataclass(frozen=True)
class ManifestDiff:
    """Added (``+``) and removed (``-``) manifest lines, in diff order."""

    lines: tuple[str, ...]

    @property
    def changed(self) -> bool:
        return bool(self.lines)

    @property
    def added(self) -> tuple[str, ...]:
        return tuple(line[1:] for line in self.lines if line.startswith("+"))

    @property
    def removed(self) -> tuple[str, ...]:
        return tuple(line[1:] for line in self.lines if line.startswith("-"))

    def render(self) -> str:
        return "\n".join(self.lines)


def hash_file(path: Path) -> Optional[str]:
    """Return the SHA-256 digest of ``path`` or None when it vanished or cannot be read."""

    digest = hashlib.sha256()
    try:
        with path.open("rb") as handle:
            for chunk in iter(lambda: handle.read(_CHUNK_SIZE), b""):
                digest.update(chunk)
    except FileNotFoundError:  # policy_guard: allow-silent-handler
        # Removed between enumeration and hashing.
        return None
    except OSError as exc:  # policy_guard: allow-silent-handler
        logger.warning("Unable to hash %s: %s", path, exc)
        return None
    return digest.hexdigest()


def _iter_regular_files(root: Path) -> Iterator[Path]:
    def _on_error(exc: OSError) -> None:
        logger.warning("Unable to scan %s: %s", exc.filename, exc.strerror)

    for dirpath, _dirnames, filenames in os.walk(root, onerror=_on_error):
        for name in filenames:
            candidate = Path(dirpath) / name
            if candidate.is_symlink() or not candidate.is_file():
                continue
            yield candidate


def compute_manifest(roots: Iterable[Path]) -> Manifest:
    """Hash every regular file under ``roots`` and return the sorted manifest."""

    entries: dict[str, ManifestEntry] = {}
    for root in roots:
        if not root.exists():
            logger.warning("Watched directory %s does not exist", root)
            continue
        for path in _iter_regular_files(root):
            key = str(path)
            if key in entries:
                continue
            digest = hash_file(path)
            if digest is None:
                continue
            entries[key] = ManifestEntry(path=key, digest=digest)
    return Manifest(entries=tuple(sorted(entries.values())))


def diff_manifests(baseline: Manifest, current: Manifest) -> ManifestDiff:
    """Return only the added and removed lines between two manifests, without context."""

    diff = difflib.unified_diff(baseline.lines(), current.lines(), lineterm="", n=0)
    lines = tuple(line for line in diff if line[:1] in {"+", "-"} and not line.startswith(("+++", "---")))
    return ManifestDiff(lines=lines)


class ManifestStore:
    """Baseline manifest persisted in a single file."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._lock = KeyedFileLock(path.parent)

    @contextmanager
    def locked(self) -> Iterator["ManifestStore"]:
        """Hold the baseline exclusively for a load, diff and conditional save sequence."""
        with self._lock.hold(self.path.name):
            yield self

    def load(self) -> Optional[Manifest]:
        """Return the stored baseline, or None when absent or unreadable (first run)."""
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError):  # policy_guard: allow-silent-handler
            logger.warning("Baseline manifest %s unreadable; starting over", self.path)
            return None
        return Manifest.parse(text)

    def save(self, manifest: Manifest) -> None:
        atomic_write_text(self.path, manifest.text())
        logger.debug("Baseline manifest %s updated with %d entries", self.path, len(manifest.entries))


__all__ = [
    "Manifest",
    "ManifestDiff",
    "ManifestEntry",
    "ManifestStore",
    "compute_manifest",
    "diff_manifests",
    "hash_file",
]

"""Persistent on-disk state shared by overlapping invocations."""

from .files import FileLockUnavailableError, KeyedFileLock, atomic_write_text
from .manifest_store import Manifest, ManifestDiff, ManifestEntry, ManifestStore, compute_manifest, diff_manifests
from .throttle_store import ThrottleStore

__all__ = [
    "FileLockUnavailableError",
    "KeyedFileLock",
    "Manifest",
    "ManifestDiff",
    "ManifestEntry",
    "ManifestStore",
    "ThrottleStore",
    "atomic_write_text",
    "compute_manifest",
    "diff_manifests",
]

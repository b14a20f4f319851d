from __future__ import annotations

"""Typed lookups over environment variables backed by the ``netwatch.conf`` file."""


import os
from pathlib import Path
from typing import Callable, Mapping, Optional, Sequence, TypeVar

from .conf_file import load_conf_file, split_list
from .errors import ConfigurationError

T = TypeVar("T")

_TRUE_VALUES = {"1", "true", "t", "yes", "y", "on"}
_FALSE_VALUES = {"0", "false", "f", "no", "n", "off"}


def _normalize(value: str | None, *, strip: bool) -> str | None:
    if value is None:
        return None
    return value.strip() if strip else value


class SettingsSource:
    """
    Resolve raw setting values.

    Lookup order is the process environment first, then values read from the
    configuration file, then the caller supplied fallback.
    """

    def __init__(self, file_values: Optional[Mapping[str, str]] = None, environ: Optional[Mapping[str, str]] = None) -> None:
        self._file_values = dict(file_values or {})
        self._environ = os.environ if environ is None else environ

    @classmethod
    def from_file(cls, path: Path, environ: Optional[Mapping[str, str]] = None) -> "SettingsSource":
        return cls(load_conf_file(path), environ=environ)

    def raw(self, name: str) -> str | None:
        value = self._environ.get(name)
        if value is None or value.strip() == "":
            return self._file_values.get(name)
        return value

    def get_str(
        self,
        name: str,
        or_value: str | None = None,
        *,
        strip: bool = True,
        allow_blank: bool = False,
    ) -> str | None:
        """Fetch a setting as a string."""

        value = _normalize(self.raw(name), strip=strip)
        if value is None or (not allow_blank and value == ""):
            return or_value
        return value

    def _coerce(self, name: str, or_value: T, cast: Callable[[str], T], kind: str) -> T:
        raw = self.get_str(name)
        if raw is None:
            return or_value
        try:
            return cast(raw)
        except ValueError as exc:
            raise ConfigurationError.invalid_format(name, raw, kind) from exc

    def get_int(self, name: str, or_value: int) -> int:
        """Fetch a setting and coerce it to ``int``."""

        return self._coerce(name, or_value, int, "an integer")

    def get_float(self, name: str, or_value: float) -> float:
        """Fetch a setting and coerce it to ``float``."""

        return self._coerce(name, or_value, float, "a float")

    def get_seconds(self, name: str, or_value: int) -> int:
        """Convenience wrapper for durations stored as seconds."""

        value = self.get_int(name, or_value)
        if value < 0:
            raise ConfigurationError.invalid_value(name, value, "Durations must be non-negative")
        return value

    def get_bool(self, name: str, or_value: bool) -> bool:
        """Fetch a setting and coerce it to ``bool``."""

        raw = self.get_str(name)
        if raw is None:
            return or_value

        lowered = raw.lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ConfigurationError.invalid_format(name, raw, f"one of {sorted(_TRUE_VALUES | _FALSE_VALUES)}")

    def get_list(
        self,
        name: str,
        *,
        or_value: Sequence[str] = (),
        separator: str = ",",
    ) -> tuple[str, ...]:
        """Fetch a delimited list; blanks and repeats are dropped."""

        raw = self.get_str(name)
        if raw is None:
            return tuple(or_value)
        return split_list(raw, separator)


__all__ = ["ConfigurationError", "SettingsSource"]

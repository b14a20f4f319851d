from __future__ import annotations

"""
Reader for ``netwatch.conf``.

The file stays sourceable by a POSIX shell, so values follow shell word
rules: quotes are removed, unquoted ``#`` starts a comment and a leading
``export`` is accepted. Command substitution and variable expansion are not
performed.
"""

import logging
import re
import shlex
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

_ASSIGNMENT = re.compile(r"^(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)=(.*)$")


def parse_assignment(line: str) -> Optional[Tuple[str, str]]:
    """
    Parse one ``NAME=value`` line.

    Returns:
        ``(name, value)``, or None for blanks, comments and lines that are not
        assignments

    Raises:
        ConfigurationError: If the value has unbalanced quotes
    """
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None
    match = _ASSIGNMENT.match(stripped)
    if match is None:
        logger.debug("Ignoring non-assignment line %r", stripped)
        return None

    name, raw_value = match.groups()
    if raw_value[:1].isspace():
        # ``NAME= value`` assigns an empty string in a shell.
        return name, ""
    try:
        words = shlex.split(raw_value, comments=True)
    except ValueError as exc:
        raise ConfigurationError.invalid_format(name, raw_value, "shell quoting") from exc
    return name, " ".join(words)


def load_conf_file(path: Path) -> Dict[str, str]:
    """Return the assignments of ``path``; later lines win, a missing file is empty."""

    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigurationError.load_failed("configuration", str(path)) from exc

    values: Dict[str, str] = {}
    for line in text.splitlines():
        assignment = parse_assignment(line)
        if assignment is not None:
            name, value = assignment
            values[name] = value
    return values


def split_list(raw_value: str, separator: str = ",") -> Tuple[str, ...]:
    """Split a delimited setting, dropping blanks and repeated items while keeping order."""

    items: Iterable[str] = (item.strip() for item in raw_value.split(separator))
    return tuple(dict.fromkeys(item for item in items if item))


__all__ = ["load_conf_file", "parse_assignment", "split_list"]

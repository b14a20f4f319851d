from __future__ import annotations

"""
Parsers for the line-oriented list files in the configuration directory.

Every list ignores blank lines and ``#`` comments; malformed entries are
skipped with a debug message and never abort a check.
"""

import logging
import shlex
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterator, List, Optional

logger = logging.getLogger(__name__)

_NO_PORT_MARKERS = {"", "none"}
_MAX_PORT = 65535


def iter_config_lines(path: Path) -> Iterator[str]:
    """Yield the meaningful lines of ``path``; a missing or unreadable file yields nothing."""

    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.debug("List file %s not found", path)
        return
    except (OSError, UnicodeDecodeError) as exc:  # policy_guard: allow-silent-handler
        logger.warning("Unable to read list file %s: %s", path, exc)
        return

    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        yield stripped


@dataclass(frozen=True)
class ServerEndpoint:
    host: str
    port: Optional[int] = None

    @property
    def label(self) -> str:
        if self.port is None:
            return self.host
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


def _split_host_port(line: str) -> tuple[str, str]:
    if line.startswith("["):
        host, _, rest = line[1:].partition("]")
        return host, rest.lstrip(":")
    if line.count(":") > 1:
        # Bare IPv6 address.
        return line, ""
    host, _, port = line.partition(":")
    return host, port


def parse_endpoint(line: str) -> Optional[ServerEndpoint]:
    """Parse ``host`` or ``host:port``; ``none`` as port means an ICMP probe."""

    host, raw_port = (part.strip() for part in _split_host_port(line.strip()))
    if not host or any(char.isspace() for char in host):
        return None
    if raw_port.lower() in _NO_PORT_MARKERS:
        return ServerEndpoint(host=host)
    try:
        port = int(raw_port)
    except ValueError:
        return None
    if not 0 < port <= _MAX_PORT:
        return None
    return ServerEndpoint(host=host, port=port)


class RestartAction(Enum):
    NONE = "none"
    DEFAULT = "default"
    COMMAND = "command"


@dataclass(frozen=True)
class ServiceSpec:
    pattern: str
    display_name: str
    directive: str = ""

    @property
    def action(self) -> RestartAction:
        if not self.directive:
            return RestartAction.NONE
        if "default" in self.directive.lower():
            return RestartAction.DEFAULT
        return RestartAction.COMMAND

    @property
    def argv(self) -> List[str]:
        return shlex.split(self.directive)


def parse_service_spec(line: str) -> Optional[ServiceSpec]:
    """Parse ``process_pattern : display_name : restart_directive``."""

    parts = [part.strip() for part in line.split(":", 2)]
    pattern = parts[0]
    if not pattern:
        return None
    display_name = parts[1] if len(parts) > 1 and parts[1] else pattern
    directive = parts[2] if len(parts) > 2 else ""
    if directive:
        try:
            shlex.split(directive)
        except ValueError:
            return None
    return ServiceSpec(pattern=pattern, display_name=display_name, directive=directive)


def load_endpoints(path: Path) -> List[ServerEndpoint]:
    endpoints = []
    for line in iter_config_lines(path):
        endpoint = parse_endpoint(line)
        if endpoint is None:
            logger.debug("Skipping malformed server entry %r in %s", line, path)
            continue
        endpoints.append(endpoint)
    return endpoints


def load_service_specs(path: Path) -> List[ServiceSpec]:
    specs = []
    for line in iter_config_lines(path):
        spec = parse_service_spec(line)
        if spec is None:
            logger.debug("Skipping malformed service entry %r in %s", line, path)
            continue
        specs.append(spec)
    return specs


def load_directory_roots(path: Path) -> List[Path]:
    return [Path(line).expanduser() for line in iter_config_lines(path)]


__all__ = [
    "RestartAction",
    "ServerEndpoint",
    "ServiceSpec",
    "iter_config_lines",
    "load_directory_roots",
    "load_endpoints",
    "load_service_specs",
    "parse_endpoint",
    "parse_service_spec",
]

from __future__ import annotations

"""Detection of the host service manager and service start requests."""

import asyncio
import logging
import shutil
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Sequence

logger = logging.getLogger(__name__)

_INIT_D = Path("/etc/init.d")
_SYSTEMD_UNIT_DIRS = (Path("/usr/lib/systemd/system"), Path("/lib/systemd/system"))


class ServiceManagerNotFoundError(RuntimeError):
    """Raised when no usable facility to start services is detected."""

    def __init__(self) -> None:
        super().__init__("error: command to start services not detected")


class ServiceManagerKind(Enum):
    SYSTEMCTL = "systemctl"
    SERVICE = "service"
    INITD = "initd"


@dataclass(frozen=True)
class ServiceManager:
    kind: ServiceManagerKind
    init_d: Path = _INIT_D
    timeout_seconds: float = 30.0

    def command_for(self, service: str) -> List[str]:
        if self.kind is ServiceManagerKind.SYSTEMCTL:
            return ["systemctl", "start", service]
        if self.kind is ServiceManagerKind.SERVICE:
            return ["service", service, "start"]
        return [str(self.init_d / service), "start"]

    async def start(self, service: str) -> bool:
        """Ask the service manager to start ``service``; failures are logged, not raised."""

        argv = self.command_for(service)
        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as exc:  # policy_guard: allow-silent-handler
            logger.error("error: unable to run %s: %s", " ".join(argv), exc)
            return False

        try:
            output, _ = await asyncio.wait_for(proc.communicate(), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:  # policy_guard: allow-silent-handler
            proc.kill()
            await proc.wait()
            logger.error("error: starting service %s timed out after %.0fs", service, self.timeout_seconds)
            return False

        if proc.returncode != 0:
            logger.error(
                "error: starting service %s failed (exit %s): %s",
                service,
                proc.returncode,
                output.decode("utf-8", errors="replace").strip(),
            )
            return False
        logger.info("Started service %s via %s", service, self.kind.value)
        return True


def detect_service_manager(
    *,
    init_d: Path = _INIT_D,
    systemd_unit_dirs: Sequence[Path] = _SYSTEMD_UNIT_DIRS,
    which: Callable[[str], Optional[str]] = shutil.which,
) -> ServiceManager:
    """
    Pick the facility used to start services.

    ``/etc/init.d`` wins when present (through ``service`` when installed,
    otherwise by invoking the init script directly); systemd is used when its
    unit directory exists and ``systemctl`` is installed.

    Raises:
        ServiceManagerNotFoundError: If neither is available
    """
    if init_d.is_dir():
        kind = ServiceManagerKind.SERVICE if which("service") else ServiceManagerKind.INITD
        return ServiceManager(kind=kind, init_d=init_d)

    if any(directory.is_dir() for directory in systemd_unit_dirs) and which("systemctl"):
        return ServiceManager(kind=ServiceManagerKind.SYSTEMCTL, init_d=init_d)

    raise ServiceManagerNotFoundError()


__all__ = [
    "ServiceManager",
    "ServiceManagerKind",
    "ServiceManagerNotFoundError",
    "detect_service_manager",
]

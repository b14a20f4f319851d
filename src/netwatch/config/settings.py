from __future__ import annotations

"""
Immutable agent configuration.

``load_settings`` reads ``netwatch.conf`` (``KEY=VALUE`` lines) and the process
environment once at startup and returns a frozen ``NetwatchSettings`` that is
passed explicitly to every component.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Mapping, Optional

from .errors import ConfigurationError
from .runtime import SettingsSource

if TYPE_CHECKING:
    from ..evaluation.threshold import Threshold

logger = logging.getLogger(__name__)

THIRTY_MINUTES = 60 * 30
ONE_HOUR = 60 * 60
SIX_HOURS = ONE_HOUR * 6
ONE_DAY = ONE_HOUR * 24

HOME_ENV = "NETWATCH_HOME"
CONF_ENV = "NETWATCH_CONF"


@dataclass(frozen=True)
class StatePaths:
    """Directory tree shared by every invocation on the host."""

    home: Path
    config_dir: Path
    cache_dir: Path
    timers_dir: Path
    log_dir: Path

    @classmethod
    def under(cls, home: Path) -> "StatePaths":
        return cls(
            home=home,
            config_dir=home / "config",
            cache_dir=home / "cache",
            timers_dir=home / "timers",
            log_dir=home / "logs",
        )

    def ensure(self) -> None:
        for directory in (self.cache_dir, self.timers_dir, self.log_dir):
            directory.mkdir(parents=True, exist_ok=True)


@dataclass(frozen=True)
class ScanIntervals:
    """Minimum seconds between two scans of each check."""

    cpu: int = 30
    mem: int = 30
    disk: int = THIRTY_MINUTES
    proc: int = 60 * 3
    servers: int = 60 * 5
    directories: int = ONE_DAY
    net: int = 60


@dataclass(frozen=True)
class AlertIntervals:
    """Minimum seconds between two alerts of the single-severity checks."""

    proc: int = 60 * 5
    servers: int = SIX_HOURS
    directories: int = SIX_HOURS
    net: int = SIX_HOURS


@dataclass(frozen=True)
class NetworkSettings:
    threshold_kib: int = 10240
    interfaces: tuple[str, ...] = ()
    sample_window: float = 1.0


@dataclass(frozen=True)
class ProbeSettings:
    timeout: float = 5.0
    concurrency: int = 16


@dataclass(frozen=True)
class NetwatchSettings:
    paths: StatePaths
    conf_file: Path
    log_file: Path
    server_list: Path
    proc_list: Path
    dir_list: Path
    email_to: str
    custom_email_command: str
    scan: ScanIntervals
    alerts: AlertIntervals
    cpu: Threshold
    mem: Threshold
    swap: Threshold
    disk: Threshold
    network: NetworkSettings
    probes: ProbeSettings
    cpu_sample_window: float = 1.0
    notify_timeout: float = 30.0
    allow_threading: bool = True
    telegram_bot_token: Optional[str] = None
    telegram_chat_ids: tuple[str, ...] = ()

    @property
    def manifest_file(self) -> Path:
        return self.paths.cache_dir / "directories_status.txt"


def _threshold(source: SettingsSource, resource: str, defaults: tuple[int, int, int, int], interval_prefix: str) -> Threshold:
    from ..evaluation.threshold import Threshold

    warning, critical, warn_interval, crit_interval = defaults
    return Threshold(
        warning_pct=source.get_int(f"WARNING_{resource}", warning),
        critical_pct=source.get_int(f"CRITICAL_{resource}", critical),
        warn_interval=source.get_seconds(f"{interval_prefix}_EMAIL_WARN_INTERVAL", warn_interval),
        crit_interval=source.get_seconds(f"{interval_prefix}_EMAIL_CRIT_INTERVAL", crit_interval),
        resource=resource.lower(),
    )


def _positive_float(source: SettingsSource, name: str, or_value: float) -> float:
    value = source.get_float(name, or_value)
    if value <= 0:
        raise ConfigurationError.invalid_value(name, value, "Must be positive")
    return value


def _positive_int(source: SettingsSource, name: str, or_value: int) -> int:
    value = source.get_int(name, or_value)
    if value <= 0:
        raise ConfigurationError.invalid_value(name, value, "Must be positive")
    return value


def default_home(environ: Mapping[str, str]) -> Path:
    configured = environ.get(HOME_ENV)
    if configured:
        return Path(configured).expanduser()
    return Path.home() / "netwatch"


def build_settings(source: SettingsSource, paths: StatePaths, conf_file: Path) -> NetwatchSettings:
    """Assemble settings from an already resolved source."""

    defaults = ScanIntervals()
    scan = ScanIntervals(
        cpu=source.get_seconds("CPU_SCAN_INTERVAL", defaults.cpu),
        mem=source.get_seconds("MEM_SCAN_INTERVAL", defaults.mem),
        disk=source.get_seconds("DISK_SCAN_INTERVAL", defaults.disk),
        proc=source.get_seconds("PROC_SCAN_INTERVAL", defaults.proc),
        servers=source.get_seconds("SERVERS_SCAN_INTERVAL", defaults.servers),
        directories=source.get_seconds("DIRECTORIES_SCAN_INTERVAL", defaults.directories),
        net=source.get_seconds("NET_SCAN_INTERVAL", defaults.net),
    )
    alert_defaults = AlertIntervals()
    alerts = AlertIntervals(
        proc=source.get_seconds("PROC_EMAIL_INTERVAL", alert_defaults.proc),
        servers=source.get_seconds("SERVERS_EMAIL_INTERVAL", alert_defaults.servers),
        directories=source.get_seconds("DIRECTORIES_EMAIL_INTERVAL", alert_defaults.directories),
        net=source.get_seconds("NET_EMAIL_INTERVAL", alert_defaults.net),
    )

    # ALERT_EMAIL is the newer spelling and wins over EMAIL_TO.
    email_to = source.get_str("ALERT_EMAIL") or source.get_str("EMAIL_TO", "root") or "root"

    log_file_raw = source.get_str("LOG_FILE")
    log_file = Path(log_file_raw).expanduser() if log_file_raw else paths.log_dir / "netwatch.log"

    def _list_path(name: str, filename: str) -> Path:
        raw = source.get_str(name)
        return Path(raw).expanduser() if raw else paths.config_dir / filename

    return NetwatchSettings(
        paths=paths,
        conf_file=conf_file,
        log_file=log_file,
        server_list=_list_path("SERVER_LIST", "server.list"),
        proc_list=_list_path("PROC_LIST", "proc.list"),
        dir_list=_list_path("DIR_LIST", "dir.list"),
        email_to=email_to,
        custom_email_command=source.get_str("CUSTOM_EMAIL_COMMAND", "") or "",
        scan=scan,
        alerts=alerts,
        cpu=_threshold(source, "CPU", (75, 95, ONE_DAY, ONE_HOUR), "CPU"),
        mem=_threshold(source, "MEM", (75, 90, ONE_DAY, SIX_HOURS), "MEM"),
        swap=_threshold(source, "SWAP", (65, 80, ONE_DAY, SIX_HOURS), "MEM"),
        disk=_threshold(source, "DISK", (75, 90, ONE_DAY, SIX_HOURS), "DISK"),
        network=NetworkSettings(
            threshold_kib=source.get_int("NET_THRESHOLD_KB_S", NetworkSettings.threshold_kib),
            interfaces=source.get_list("MONITOR_INTERFACES"),
            sample_window=_positive_float(source, "NET_SAMPLE_WINDOW", NetworkSettings.sample_window),
        ),
        probes=ProbeSettings(
            timeout=_positive_float(source, "SERVER_PROBE_TIMEOUT", ProbeSettings.timeout),
            concurrency=_positive_int(source, "SERVER_PROBE_CONCURRENCY", ProbeSettings.concurrency),
        ),
        cpu_sample_window=_positive_float(source, "CPU_SAMPLE_WINDOW", 1.0),
        notify_timeout=_positive_float(source, "NOTIFY_TIMEOUT", 30.0),
        allow_threading=source.get_bool("ALLOW_THREADING", True),
        telegram_bot_token=source.get_str("TELEGRAM_BOT_TOKEN"),
        telegram_chat_ids=source.get_list("TELEGRAM_CHAT_IDS"),
    )


def load_settings(
    conf_file: Optional[Path] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> NetwatchSettings:
    """
    Load the agent configuration.

    Args:
        conf_file: Explicit configuration file; defaults to ``$NETWATCH_CONF`` or
            ``<home>/config/netwatch.conf``
        environ: Environment mapping, ``os.environ`` when omitted

    Raises:
        ConfigurationError: If a value is malformed or thresholds are inconsistent
    """
    env = os.environ if environ is None else environ
    paths = StatePaths.under(default_home(env))
    if conf_file is None:
        conf_file = Path(env[CONF_ENV]).expanduser() if env.get(CONF_ENV) else paths.config_dir / "netwatch.conf"

    source = SettingsSource.from_file(conf_file, environ=env)
    settings = build_settings(source, paths, conf_file)
    logger.debug("Loaded configuration from %s (exists: %s)", conf_file, conf_file.exists())
    return settings


__all__ = [
    "AlertIntervals",
    "NetwatchSettings",
    "NetworkSettings",
    "ProbeSettings",
    "ScanIntervals",
    "StatePaths",
    "build_settings",
    "load_settings",
]

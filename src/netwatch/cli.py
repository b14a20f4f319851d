from __future__ import annotations

"""Command-line entry point: ``netwatch [command]``."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from .config.errors import ConfigurationError
from .config.settings import load_settings
from .logging_config import setup_logging
from .scheduler import ALL_COMMAND, CHECK_REGISTRY, COMMAND_ALIASES, run_command
from .service_manager import ServiceManagerNotFoundError, detect_service_manager
from .state.files import FileLockUnavailableError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ENVIRONMENT = 1
EXIT_USAGE = 2

HELP_COMMAND = "help"
COMMANDS = [ALL_COMMAND, *CHECK_REGISTRY, *COMMAND_ALIASES, HELP_COMMAND]

_EPILOG = """\
commands:
  all          run every check (default)
  mem          memory and swap usage
  cpu          CPU usage
  disk         filesystem usage
  dirs         file changes in watched directories (alias: directories)
  servers      reachability of the servers in server.list
  services     liveness of the services in proc.list
  net          interface bandwidth and errors
  help         show this message

exit status: 0 success, 1 configuration or environment error, 2 invalid argument
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="netwatch",
        description="Host health watchdog with throttled alerts",
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("command", nargs="?", default=ALL_COMMAND, choices=COMMANDS, metavar="command")
    parser.add_argument("--config", type=Path, default=None, help="configuration file (default: $NETWATCH_CONF)")
    parser.add_argument("--verbose", action="store_true", help="log debug output to the console")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point - parse arguments, load configuration and run the selected checks once."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == HELP_COMMAND:
        parser.print_help()
        return EXIT_OK

    try:
        settings = load_settings(args.config)
    except ConfigurationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_ENVIRONMENT

    try:
        settings.paths.ensure()
    except OSError as exc:
        print(f"error: unable to create {settings.paths.home}: {exc}", file=sys.stderr)
        return EXIT_ENVIRONMENT

    setup_logging(settings.log_file, verbose=args.verbose)

    try:
        service_manager = detect_service_manager()
    except ServiceManagerNotFoundError as exc:
        logger.error("%s", exc)
        print(exc, file=sys.stderr)
        return EXIT_ENVIRONMENT

    try:
        asyncio.run(run_command(settings, args.command, service_manager=service_manager))
    except FileLockUnavailableError as exc:
        logger.error("error: %s", exc)
        return EXIT_ENVIRONMENT
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())

"""Command line entry point for GitHub Release Monitor.

Loads the configuration, sets up logging, and runs one monitoring pass.
Intended to be invoked by a scheduler (cron, systemd timer); the exit code
is 0 on success or nothing to do, 1 on a fatal error, 130 on interruption.
"""

import argparse
import signal
import sys
from typing import List, Optional

from release_monitor import __version__
from release_monitor.config.settings import load_config
from release_monitor.exceptions import ConfigInvalidError
from release_monitor.monitor import EXIT_FAILURE, EXIT_INTERRUPTED, ReleaseMonitor
from release_monitor.utils.logging import get_logger, setup_logging


class MonitorArgumentParser(argparse.ArgumentParser):
    """Argument parser that reports usage errors with the fatal exit code."""

    def error(self, message: str) -> None:
        self.print_usage(sys.stderr)
        self.exit(EXIT_FAILURE, f"{self.prog}: error: {message}\n")


def build_arg_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = MonitorArgumentParser(
        prog="github-release-monitor",
        description=(
            "Monitor a GitHub repository for new releases matching a version "
            "prefix and download their assets."
        ),
    )
    parser.add_argument(
        "-c", "--config",
        required=True,
        metavar="FILE",
        help="Load configuration from FILE (JSON, or KEY=\"value\" lines)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def _raise_interrupt(signum, frame) -> None:
    """Turn SIGTERM into KeyboardInterrupt so it is handled like Ctrl+C."""
    raise KeyboardInterrupt(f"received signal {signum}")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run one monitoring pass.

    Args:
        argv: Command line arguments (default: sys.argv[1:])

    Returns:
        Process exit code
    """
    try:
        args = build_arg_parser().parse_args(argv)
    except SystemExit as e:
        # -h/--version exit 0; usage errors exit EXIT_FAILURE
        return e.code if isinstance(e.code, int) else EXIT_FAILURE

    # Console-only logging until the configuration names a log file
    logger = setup_logging(verbose=args.verbose)

    previous_handler = signal.signal(signal.SIGTERM, _raise_interrupt)
    try:
        try:
            config = load_config(args.config)
        except ConfigInvalidError as e:
            logger.error(str(e))
            return EXIT_FAILURE

        if args.verbose:
            config = config.with_overrides(verbose=True)

        try:
            logger = setup_logging(verbose=config.verbose, log_file=config.log_file)
        except OSError as e:
            logger.error(f"Cannot open log file {config.log_file}: {e}")
            return EXIT_FAILURE

        logger.info(f"Loaded configuration from {args.config}")
        get_logger("release_monitor.main").debug(f"Configuration: {config.describe()}")

        report = ReleaseMonitor(config).run()
        return report.exit_code
    except KeyboardInterrupt:
        logger.error("Release monitor interrupted")
        return EXIT_INTERRUPTED
    finally:
        signal.signal(signal.SIGTERM, previous_handler)


if __name__ == "__main__":
    sys.exit(main())

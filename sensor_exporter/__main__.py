"""
Entry point for Sensor Exporter.

Usage:
    python -m sensor_exporter --web.listen-address :9255
    python -m sensor_exporter --help
"""

import argparse
import asyncio
import sys

from . import __version__
from .app import run_app
from .config.schema import Config
from .const import (
    DEFAULT_HDDTEMP_ADDRESS,
    DEFAULT_HDDTEMP_TIMEOUT,
    DEFAULT_HWMON_PATH,
    DEFAULT_LISTEN_ADDRESS,
    DEFAULT_LM_INTERVAL,
    DEFAULT_TELEMETRY_PATH,
)
from .errors import ConfigError
from .logging import LogConfig, get_logger, setup_logging

logger = get_logger("main")


def build_parser() -> argparse.ArgumentParser:
    """Create the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="sensor-exporter",
        description="Prometheus exporter for hwmon sensors and hddtemp disk temperatures",
    )

    parser.add_argument(
        "--web.listen-address",
        dest="listen_address",
        default=DEFAULT_LISTEN_ADDRESS,
        help=f"Address on which to expose metrics and web interface (default: {DEFAULT_LISTEN_ADDRESS})",
    )

    parser.add_argument(
        "--web.telemetry-path",
        dest="telemetry_path",
        default=DEFAULT_TELEMETRY_PATH,
        help=f"Path under which to expose metrics (default: {DEFAULT_TELEMETRY_PATH})",
    )

    parser.add_argument(
        "--hddtemp-address",
        dest="hddtemp_address",
        default=DEFAULT_HDDTEMP_ADDRESS,
        help=f"Address to fetch hdd metrics from (default: {DEFAULT_HDDTEMP_ADDRESS})",
    )

    parser.add_argument(
        "--hddtemp-timeout",
        dest="hddtemp_timeout",
        type=float,
        default=DEFAULT_HDDTEMP_TIMEOUT,
        metavar="SECONDS",
        help="Connect and read timeout for hddtemp",
    )

    parser.add_argument(
        "--hddtemp-no-reconnect",
        dest="hddtemp_no_reconnect",
        action="store_true",
        help="Use only the connection opened at startup, never reconnect",
    )

    parser.add_argument(
        "--lm-interval",
        dest="lm_interval",
        type=float,
        default=DEFAULT_LM_INTERVAL,
        metavar="SECONDS",
        help="Seconds between hwmon sensor polls",
    )

    parser.add_argument(
        "--hwmon-path",
        dest="hwmon_path",
        default=DEFAULT_HWMON_PATH,
        help=argparse.SUPPRESS,
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging (INFO level)",
    )

    parser.add_argument(
        "-d", "--debug",
        action="store_true",
        help="Enable debug logging (DEBUG level)",
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Quiet mode (only errors)",
    )

    parser.add_argument(
        "--log-file",
        metavar="PATH",
        help="Write logs to file",
    )

    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )

    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate configuration and exit",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser


def log_config_from_args(args: argparse.Namespace) -> LogConfig:
    """Build logging settings from the verbosity flags."""
    log_config = LogConfig()

    if args.debug:
        log_config.console_level = "debug"
    elif args.verbose:
        log_config.console_level = "info"
    elif args.quiet:
        log_config.console_level = "error"

    if args.no_color:
        log_config.console_colors = False

    if args.log_file:
        log_config.file_enabled = True
        log_config.file_path = args.log_file

    return log_config


def print_config(config: Config) -> None:
    """Print the resolved configuration summary."""
    print("Configuration summary:")
    print(f"  Listen address: {config.web.listen_address}")
    print(f"  Telemetry path: {config.web.telemetry_path}")
    print(f"  hddtemp: {config.hddtemp.address} (timeout {config.hddtemp.timeout}s, "
          f"reconnect {'on' if config.hddtemp.reconnect else 'off'})")
    print(f"  hwmon: {config.lm.hwmon_path} every {config.lm.interval}s")
    print("\nConfiguration is valid!")


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    setup_logging(log_config_from_args(args))

    try:
        config = Config.from_args(args)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    if args.validate:
        print_config(config)
        return 0

    try:
        asyncio.run(run_app(config))
        return 0
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 0
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())

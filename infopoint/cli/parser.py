"""Command-line argument parsing for InfoPoint.

This module builds the argument parser for the rotation engine and its
maintenance modes (configuration validation and status).
"""

import argparse
from pathlib import Path

from .. import __version__


def create_parser() -> argparse.ArgumentParser:
    """Create command line argument parser.

    Returns:
        argparse.ArgumentParser: Configured parser

    Example:
        >>> parser = create_parser()
        >>> args = parser.parse_args(['--config', '/tmp/urls.json', '--verbose'])
        >>> print(args.config)
    """
    parser = argparse.ArgumentParser(
        prog="infopoint",
        description="InfoPoint - full-screen browser rotation engine for unattended displays",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                                  # Run the rotation with default paths
  %(prog)s --config ./urls.json --verbose   # Run with a local rotation file
  %(prog)s --validate-config                # Check and migrate the rotation file
  %(prog)s --status                         # Show whether an engine is running

Signals:
  SIGTERM/SIGINT stop the engine, SIGHUP reloads the rotation from the first item.
        """,
    )

    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}", help="Show version"
    )

    parser.add_argument(
        "--config",
        type=Path,
        metavar="FILE",
        help="Rotation JSON file (default: /opt/infopoint/config/urls.json)",
    )

    parser.add_argument(
        "--settings",
        type=Path,
        metavar="FILE",
        help="Engine settings YAML file",
    )

    parser.add_argument(
        "--no-network-wait",
        action="store_true",
        help="Start rotating without waiting for network reachability",
    )

    mode_group = parser.add_mutually_exclusive_group()
    mode_group.add_argument(
        "--validate-config",
        action="store_true",
        help="Validate (and migrate) the rotation file, print the effective rotation and exit",
    )
    mode_group.add_argument(
        "--status",
        action="store_true",
        help="Report whether an engine is running and whether its browser is alive",
    )

    logging_group = parser.add_argument_group("logging", "Logging options")
    logging_group.add_argument(
        "--log-level",
        choices=["DEBUG", "VERBOSE", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="Log level for console and file output",
    )
    logging_group.add_argument(
        "--verbose", "-v", action="store_true", help="Log dwell progress (VERBOSE level)"
    )
    logging_group.add_argument(
        "--quiet", "-q", action="store_true", help="Only log errors to the console"
    )
    logging_group.add_argument("--log-file", type=Path, metavar="FILE", help="Log file path")
    logging_group.add_argument(
        "--no-log-colors", action="store_true", help="Disable colored console output"
    )

    return parser

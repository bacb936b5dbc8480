"""CLI module for InfoPoint.

This module provides the command-line interface: argument parsing and
dispatch to the engine or one of its maintenance modes.
"""

from typing import Optional

from .modes.kiosk import check_status, run_kiosk_mode, run_validate_config
from .parser import create_parser


async def main_entry(argv: Optional[list[str]] = None) -> int:
    """Main entry point with argument parsing.

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.validate_config:
        return run_validate_config(args)
    if args.status:
        return check_status(args)
    return await run_kiosk_mode(args)


__all__ = [
    "check_status",
    "create_parser",
    "main_entry",
    "run_kiosk_mode",
    "run_validate_config",
]

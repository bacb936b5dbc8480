"""Entry point for `python -m infopoint` command.

This module provides the standard Python module execution interface that
delegates to the CLI module.
"""

import asyncio
import sys

from infopoint.cli import main_entry
from infopoint.kiosk.manager import EXIT_ERROR, EXIT_INTERRUPTED


def main() -> None:
    """Entry point for python -m infopoint and the console script."""
    try:
        exit_code = asyncio.run(main_entry())
        sys.exit(exit_code)
    except KeyboardInterrupt:
        print("Operation cancelled by user")
        sys.exit(EXIT_INTERRUPTED)
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(EXIT_ERROR)


if __name__ == "__main__":
    main()

"""Utility functions and helpers package."""

from .daemon import DaemonAlreadyRunningError, DaemonError, LockFileError, RunLock
from .logging import VERBOSE, setup_logging
from .network import probe_network, wait_for_network
from .process import find_browser_processes, is_pid_alive, kill_browser_processes

__all__ = [
    "VERBOSE",
    "DaemonAlreadyRunningError",
    "DaemonError",
    "LockFileError",
    "RunLock",
    "find_browser_processes",
    "is_pid_alive",
    "kill_browser_processes",
    "probe_network",
    "setup_logging",
    "wait_for_network",
]

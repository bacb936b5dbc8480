"""Process management utilities for the kiosk browser."""

import logging
import os
from pathlib import Path
from typing import Optional

import psutil

logger = logging.getLogger(__name__)


class ProcessInfo:
    """Information about a running process."""

    def __init__(self, pid: int, command: str, full_command: str):
        self.pid = pid
        self.command = command
        self.full_command = full_command

    def __str__(self) -> str:
        return f"PID {self.pid}: {self.command}"


def is_pid_alive(pid: Optional[int]) -> bool:
    """Check whether a PID maps to a live, non-zombie process.

    Args:
        pid: Process ID to check

    Returns:
        True if the process exists and has not exited
    """
    if pid is None or pid <= 0:
        return False

    try:
        process = psutil.Process(pid)
        return process.is_running() and process.status() != psutil.STATUS_ZOMBIE
    except psutil.NoSuchProcess:
        return False
    except psutil.AccessDenied:
        # Exists but belongs to another user
        return True


def _matches_executable(name: str, cmdline: list[str], executable_name: str) -> bool:
    if name == executable_name:
        return True
    return bool(cmdline) and Path(cmdline[0]).name == executable_name


def is_browser_process(pid: Optional[int], executable: str) -> bool:
    """Check whether a live PID is an instance of the browser executable.

    Processes that cannot be inspected do not count, so callers never signal
    a process they could not identify.

    Args:
        pid: Process ID to check
        executable: Browser executable name or path

    Returns:
        True if the process name or command line matches the executable
    """
    if not is_pid_alive(pid):
        return False

    try:
        process = psutil.Process(pid)
        name = process.name()
        cmdline = process.cmdline()
    except (psutil.NoSuchProcess, psutil.AccessDenied):
        return False

    return _matches_executable(name, cmdline, Path(executable).name)


def find_browser_processes(
    executable: str, exclude_pids: Optional[set[int]] = None
) -> list[ProcessInfo]:
    """Find running processes of the browser executable.

    Args:
        executable: Browser executable name or path
        exclude_pids: PIDs to leave out of the result

    Returns:
        List of ProcessInfo objects for matching processes
    """
    executable_name = Path(executable).name
    excluded = set(exclude_pids or ()) | {os.getpid()}
    processes = []

    for process in psutil.process_iter(["pid", "name", "cmdline"]):
        try:
            if process.pid in excluded:
                continue
            name = process.info.get("name") or ""
            cmdline = process.info.get("cmdline") or []
            if not _matches_executable(name, cmdline, executable_name):
                continue
            processes.append(ProcessInfo(process.pid, name, " ".join(cmdline)))
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue

    return processes


def kill_browser_processes(
    executable: str, exclude_pids: Optional[set[int]] = None, timeout: float = 3.0
) -> tuple[int, list[str]]:
    """Terminate every running instance of the browser executable.

    Sends SIGTERM first, then SIGKILL to anything still alive after ``timeout``.

    Args:
        executable: Browser executable name or path
        exclude_pids: PIDs to leave running
        timeout: Maximum seconds to wait for graceful termination

    Returns:
        Tuple of (killed_count, error_messages)
    """
    found = find_browser_processes(executable, exclude_pids)
    if not found:
        logger.debug(f"No stray {executable} processes found")
        return 0, []

    logger.info(f"Found {len(found)} stray {executable} processes to terminate")
    errors: list[str] = []
    targets: list[psutil.Process] = []

    for info in found:
        try:
            process = psutil.Process(info.pid)
            process.terminate()
            targets.append(process)
        except psutil.NoSuchProcess:
            logger.debug(f"Process {info.pid} already terminated")
        except psutil.AccessDenied:
            error_msg = f"Permission denied killing process {info.pid}"
            logger.warning(error_msg)
            errors.append(error_msg)

    gone, alive = psutil.wait_procs(targets, timeout=timeout)

    for process in alive:
        try:
            logger.warning(f"Process {process.pid} still running, sending SIGKILL")
            process.kill()
        except psutil.NoSuchProcess:
            pass
        except psutil.AccessDenied:
            error_msg = f"Permission denied force-killing process {process.pid}"
            logger.warning(error_msg)
            errors.append(error_msg)

    killed_count = len(gone) + len(alive)
    logger.info(f"Terminated {killed_count} stray {executable} processes")
    return killed_count, errors


def read_pid_file(pid_file: Path) -> Optional[int]:
    """Read a PID from a side-channel file.

    Returns:
        The recorded PID, or None if the file is missing or invalid
    """
    try:
        pid_str = pid_file.read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        return None
    except OSError as e:
        logger.warning(f"Failed to read PID file {pid_file}: {e}")
        return None

    try:
        pid = int(pid_str)
    except ValueError:
        logger.warning(f"Invalid PID file contents in {pid_file}: {pid_str!r}")
        return None

    return pid if pid > 0 else None


def write_pid_file(pid_file: Path, pid: int) -> None:
    """Record a PID in a side-channel file, logging instead of failing."""
    try:
        pid_file.parent.mkdir(parents=True, exist_ok=True)
        pid_file.write_text(f"{pid}\n", encoding="utf-8")
    except OSError as e:
        logger.warning(f"Failed to write PID file {pid_file}: {e}")


def remove_pid_file(pid_file: Path) -> None:
    try:
        pid_file.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Failed to remove PID file {pid_file}: {e}")

"""Single-instance run lock for the InfoPoint engine.

The engine owns the browser and the display, so only one engine may run per
host. Exclusion uses an advisory ``flock`` on a lock file. The kernel drops the
lock when the holder exits, so a crashed engine never leaves a stale lock behind.
The holder's PID is written into the lock file for status reporting only.
"""

import contextlib
import fcntl
import logging
import os
from pathlib import Path
from typing import IO, Any, Optional

logger = logging.getLogger(__name__)


class DaemonError(Exception):
    """Base exception for daemon-related errors."""


class DaemonAlreadyRunningError(DaemonError):
    """Raised when another engine already holds the run lock."""

    def __init__(self, message: str, holder_pid: Optional[int] = None) -> None:
        super().__init__(message)
        self.holder_pid = holder_pid


class LockFileError(DaemonError):
    """Raised when the lock file cannot be opened."""


class RunLock:
    """Exclusive, non-blocking run lock backed by ``fcntl.flock``.

    Example:
        >>> with RunLock(Path("/tmp/infopoint_switcher.lock")):
        ...     run_engine()
    """

    def __init__(self, lock_file: Path) -> None:
        self.lock_file = Path(lock_file)
        self._handle: Optional[IO[str]] = None

    @property
    def held(self) -> bool:
        return self._handle is not None

    def acquire(self) -> None:
        """Take the lock without blocking.

        Raises:
            DaemonAlreadyRunningError: If another process holds the lock
            LockFileError: If the lock file cannot be opened
        """
        if self._handle is not None:
            return

        try:
            self.lock_file.parent.mkdir(parents=True, exist_ok=True)
            handle = self.lock_file.open("a+", encoding="utf-8")
        except OSError as e:
            raise LockFileError(f"Failed to open lock file {self.lock_file}: {e}") from e

        try:
            fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError:
            handle.close()
            holder = read_lock_holder(self.lock_file)
            raise DaemonAlreadyRunningError(
                f"InfoPoint engine already running (lock {self.lock_file}"
                + (f", PID {holder})" if holder else ")"),
                holder_pid=holder,
            ) from None

        handle.seek(0)
        handle.truncate()
        handle.write(f"{os.getpid()}\n")
        handle.flush()
        self._handle = handle
        logger.debug(f"Acquired run lock {self.lock_file}")

    def release(self) -> None:
        """Drop the lock. Safe to call more than once."""
        handle = self._handle
        if handle is None:
            return
        self._handle = None

        try:
            handle.seek(0)
            handle.truncate()
            fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
        except OSError as e:
            logger.warning(f"Error releasing run lock {self.lock_file}: {e}")
        finally:
            handle.close()
        logger.debug(f"Released run lock {self.lock_file}")

    def __enter__(self) -> "RunLock":
        self.acquire()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.release()


def read_lock_holder(lock_file: Path) -> Optional[int]:
    """Return the PID recorded in the lock file, if any."""
    try:
        pid_str = Path(lock_file).read_text(encoding="utf-8").strip()
    except OSError:
        return None

    try:
        pid = int(pid_str)
    except ValueError:
        return None
    return pid if pid > 0 else None


def is_lock_held(lock_file: Path) -> bool:
    """Check whether some process currently holds the run lock.

    Probes with a non-blocking shared lock that is released immediately.
    """
    lock_file = Path(lock_file)
    if not lock_file.exists():
        return False

    try:
        handle = lock_file.open("r", encoding="utf-8")
    except OSError:
        return False

    with handle:
        try:
            fcntl.flock(handle.fileno(), fcntl.LOCK_SH | fcntl.LOCK_NB)
        except OSError:
            return True
        with contextlib.suppress(OSError):
            fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
    return False

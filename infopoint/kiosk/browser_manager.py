"""
Browser manager component for kiosk mode with Chromium process lifecycle management.

This module owns the single full-screen browser process used by the display
rotation: it launches Chromium in kiosk mode on a clean slate, detects when the
process has died, stops it gracefully on shutdown and cleans up after a previous
engine that left a browser behind.

Classes:
    BrowserState: Browser process state enumeration
    BrowserStatus: Browser status information
    BrowserManager: Core browser process management
    BrowserError: Exception for browser-related errors

Example:
    >>> manager = BrowserManager(BrowserSettings())
    >>> pid = await manager.start("https://www.raspberrypi.org")
    >>> manager.is_alive()
    True
    >>> await manager.stop()
"""

import asyncio
import logging
import os
import subprocess
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

import psutil

from ..config.settings import BrowserSettings
from ..utils.process import (
    is_browser_process,
    is_pid_alive,
    kill_browser_processes,
    read_pid_file,
    remove_pid_file,
    write_pid_file,
)

logger = logging.getLogger(__name__)

KIOSK_FLAGS = (
    "--kiosk",
    "--start-fullscreen",
    "--start-maximized",
    "--noerrdialogs",
    "--disable-infobars",
    "--no-first-run",
    "--no-default-browser-check",
    "--disable-session-crashed-bubble",
    "--disable-component-update",
    "--disable-background-timer-throttling",
    "--disable-backgrounding-occluded-windows",
    "--disable-renderer-backgrounding",
    "--disable-features=TranslateUI",
    "--disable-default-apps",
    "--disable-popup-blocking",
    "--disable-prompt-on-repost",
    "--no-pings",
    "--autoplay-policy=no-user-gesture-required",
)


class BrowserState(Enum):
    """Browser process states.

    Attributes:
        NOT_RUNNING: No live browser process is tracked
        RUNNING: The launched browser process is alive
    """

    NOT_RUNNING = "not_running"
    RUNNING = "running"


@dataclass
class BrowserStatus:
    """Browser status information for monitoring and the ``--status`` report.

    Attributes:
        state: Current browser state
        pid: Process ID of browser (None if not running)
        start_time: When browser was started (None if not running)
        uptime: How long browser has been running (None if not running)
        current_url: URL the browser was launched with
        launch_count: Successful launches since the engine started
        crash_count: Times the browser was found dead without being stopped
        last_error: Last error message (None if no errors)
        error_time: When last error occurred (None if no errors)
    """

    state: BrowserState
    pid: Optional[int]
    start_time: Optional[datetime]
    uptime: Optional[timedelta]
    current_url: Optional[str]

    launch_count: int
    crash_count: int

    last_error: Optional[str]
    error_time: Optional[datetime]


class BrowserError(Exception):
    """Exception raised for browser-related errors.

    Attributes:
        message: Error description
        error_code: Optional error code for categorization
        browser_state: Browser state when error occurred
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        browser_state: Optional[BrowserState] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.browser_state = browser_state


class BrowserManager:
    """Chromium browser process management for kiosk displays.

    Only this class ever holds the browser PID. Other components ask it whether
    the browser is alive and ask it to (re)launch on a URL.

    Features:
        - Clean-slate launch: stray browser processes are killed first
        - Crash detection through the OS process table
        - Graceful stop with forced kill after a timeout
        - PID side-channel file for orphan recovery across engine restarts
    """

    def __init__(self, settings: BrowserSettings) -> None:
        self.settings = settings
        self.logger = logging.getLogger(f"{__name__}.BrowserManager")

        self._process: Optional[subprocess.Popen] = None
        self._state = BrowserState.NOT_RUNNING
        self._current_url: Optional[str] = None

        self._start_time: Optional[datetime] = None
        self._launch_count = 0
        self._crash_count = 0

        self._last_error: Optional[str] = None
        self._error_time: Optional[datetime] = None

    @property
    def pid(self) -> Optional[int]:
        return self._process.pid if self._process else None

    @property
    def state(self) -> BrowserState:
        return self._state

    def is_alive(self) -> bool:
        """Check whether the launched browser process is still running.

        Reaps the child if it has exited. Zombies count as dead. A dead process
        moves the state to NOT_RUNNING and clears the recorded PID.

        Returns:
            True if the tracked browser process is alive
        """
        if self._process is None:
            return False

        pid = self._process.pid
        exit_code = self._process.poll()
        if exit_code is None and is_pid_alive(pid):
            return True

        self._crash_count += 1
        self._record_error(f"Browser process {pid} exited (code {exit_code})")
        self.logger.warning(f"Browser process {pid} is no longer running (exit code {exit_code})")
        self._cleanup_process_state()
        return False

    async def start(self, url: str) -> int:
        """Start Chromium in kiosk mode on a clean slate.

        Stops the tracked instance, kills any other process of the browser
        executable, waits for the kills to settle and launches a fresh browser.

        Args:
            url: URL to open

        Returns:
            PID of the launched browser

        Raises:
            BrowserError: If the URL is empty or the browser fails to launch
        """
        if not url or not url.strip():
            raise BrowserError("URL cannot be empty", "INVALID_URL", self._state)

        if self._process is not None:
            await self.stop()

        killed, errors = await asyncio.to_thread(
            kill_browser_processes,
            self.settings.executable_path,
            None,
            self.settings.shutdown_timeout,
        )
        for error in errors:
            self.logger.warning(error)
        if killed:
            self.logger.info(f"Killed {killed} stray browser processes before launch")

        if self.settings.kill_settle_delay > 0:
            await asyncio.sleep(self.settings.kill_settle_delay)

        self.logger.info(f"Launching browser: {url}")
        process = await self._launch_process(self._build_chromium_args(url))

        self._process = process
        self._state = BrowserState.RUNNING
        self._current_url = url
        self._start_time = datetime.now()
        self._launch_count += 1
        write_pid_file(self.settings.pid_file, process.pid)

        self.logger.info(f"Browser started (PID: {process.pid})")
        return process.pid

    async def stop(self) -> bool:
        """Stop the browser gracefully, forcing termination after the timeout.

        The recorded PID and PID file are always cleared.

        Returns:
            True if the browser stopped (or was not running)
        """
        process = self._process
        if process is None:
            self._cleanup_process_state()
            return True

        self.logger.info(f"Stopping browser (PID: {process.pid})")
        try:
            if process.poll() is not None:
                self.logger.debug("Browser already exited")
                return True

            process.terminate()
            try:
                await asyncio.wait_for(
                    self._wait_for_process_exit(process), timeout=self.settings.shutdown_timeout
                )
                self.logger.info("Browser stopped gracefully")
            except asyncio.TimeoutError:
                self.logger.warning("Browser did not stop gracefully, forcing shutdown")
                process.kill()
                await asyncio.to_thread(process.wait)
            return True

        except ProcessLookupError:
            return True
        except OSError as e:
            self.logger.error(f"Error stopping browser: {e}")
            self._record_error(f"Error stopping browser: {e}")
            return False
        finally:
            self._cleanup_process_state()

    def recover_orphan(self) -> Optional[int]:
        """Kill a browser left behind by a previous engine run.

        The previous run's PID file is the only trace of that browser. A live
        recorded process is terminated, since this run cannot drive a window it
        did not launch. A file whose PID is gone or belongs to some other
        program is simply removed.

        Returns:
            PID of the killed orphan, or None
        """
        pid_file = self.settings.pid_file
        pid = read_pid_file(pid_file)
        if pid is None:
            remove_pid_file(pid_file)
            return None

        if pid == self.pid:
            return None

        if not is_pid_alive(pid):
            self.logger.info(f"Removing stale browser PID file (PID {pid} not running)")
            remove_pid_file(pid_file)
            return None

        if not is_browser_process(pid, self.settings.executable_path):
            self.logger.warning(
                f"PID {pid} from the browser PID file is not {self.settings.executable_path}, "
                "leaving it running and removing the stale file"
            )
            remove_pid_file(pid_file)
            return None

        self.logger.warning(f"Found orphaned browser from a previous run (PID {pid}), killing it")
        try:
            orphan = psutil.Process(pid)
            orphan.terminate()
            try:
                orphan.wait(timeout=self.settings.shutdown_timeout)
            except psutil.TimeoutExpired:
                self.logger.warning(f"Orphaned browser {pid} ignored SIGTERM, sending SIGKILL")
                orphan.kill()
        except psutil.NoSuchProcess:
            self.logger.debug(f"Orphaned browser {pid} exited on its own")
        except psutil.AccessDenied:
            self.logger.error(f"Permission denied killing orphaned browser {pid}")
        finally:
            remove_pid_file(pid_file)

        return pid

    def get_browser_status(self) -> BrowserStatus:
        """Snapshot of browser state and counters."""
        uptime = None
        if self._start_time and self._state == BrowserState.RUNNING:
            uptime = datetime.now() - self._start_time

        return BrowserStatus(
            state=self._state,
            pid=self.pid,
            start_time=self._start_time,
            uptime=uptime,
            current_url=self._current_url,
            launch_count=self._launch_count,
            crash_count=self._crash_count,
            last_error=self._last_error,
            error_time=self._error_time,
        )

    def _build_chromium_args(self, url: str) -> list[str]:
        """Build the Chromium command line.

        Args:
            url: Target URL to load

        Returns:
            Executable, kiosk flags, extra flags and the URL
        """
        args = [self.settings.executable_path, *KIOSK_FLAGS, *self.settings.extra_flags, url]
        return [arg for arg in args if arg]

    def build_environment(self) -> dict[str, str]:
        env = os.environ.copy()
        if self.settings.display:
            env["DISPLAY"] = self.settings.display
        if self.settings.xauthority:
            env["XAUTHORITY"] = self.settings.xauthority
        return env

    async def _launch_process(self, cmd_args: list[str]) -> subprocess.Popen:
        """Launch Chromium in its own session and check it survived startup.

        Args:
            cmd_args: Command line arguments for Chromium

        Returns:
            Process handle of the running browser

        Raises:
            BrowserError: If the executable is missing or the process exits at once
        """
        try:
            process = subprocess.Popen(
                cmd_args,
                env=self.build_environment(),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except FileNotFoundError as e:
            message = f"Browser executable not found: {cmd_args[0]}"
            self._record_error(message)
            self.logger.error(message)
            raise BrowserError(message, "EXECUTABLE_NOT_FOUND", self._state) from e
        except OSError as e:
            message = f"Failed to launch browser: {e}"
            self._record_error(message)
            self.logger.error(message)
            raise BrowserError(message, "LAUNCH_FAILED", self._state) from e

        if self.settings.launch_check_delay > 0:
            await asyncio.sleep(self.settings.launch_check_delay)

        exit_code = process.poll()
        if exit_code is not None:
            message = f"Browser process exited immediately (code {exit_code})"
            self._record_error(message)
            self.logger.error(message)
            raise BrowserError(message, "EARLY_EXIT", self._state)

        return process

    async def _wait_for_process_exit(self, process: subprocess.Popen) -> None:
        while process.poll() is None:
            await asyncio.sleep(0.1)

    def _record_error(self, message: str) -> None:
        self._last_error = message
        self._error_time = datetime.now()

    def _cleanup_process_state(self) -> None:
        """Clean up process state after shutdown or crash."""
        self._process = None
        self._state = BrowserState.NOT_RUNNING
        self._start_time = None
        remove_pid_file(self.settings.pid_file)

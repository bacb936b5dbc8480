"""
Kiosk manager component - the lifecycle owner of the display rotation engine.

This module wires the rotation components together and owns everything that
lives for the whole run: the single-instance lock, OS signal handling, orphan
recovery, the startup network gate and the ordered shutdown.

Classes:
    KioskStatus: Engine status information
    KioskManager: Lifecycle coordinator for the rotation engine
    KioskError: Exception raised for kiosk-related errors

Example:
    >>> settings = load_settings()
    >>> manager = KioskManager(settings)
    >>> exit_code = await manager.run()
"""

import asyncio
import logging
import signal
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ..config.settings import InfoPointSettings
from ..settings.persistence import RotationConfigStore
from ..utils.daemon import DaemonAlreadyRunningError, LockFileError, RunLock
from ..utils.network import wait_for_network
from .browser_manager import BrowserManager, BrowserStatus
from .clock import InterruptibleClock
from .navigator import Navigator
from .scheduler import RotationScheduler, SchedulerState

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_ALREADY_RUNNING = 3
EXIT_INTERRUPTED = 130

SHUTDOWN_SIGNALS = (signal.SIGTERM, signal.SIGINT)
RELOAD_SIGNALS = (signal.SIGHUP,)


@dataclass
class KioskStatus:
    """Engine status information.

    Attributes:
        is_running: Whether the engine is running
        start_time: When the engine was started (None if not running)
        uptime: How long the engine has been running (None if not running)
        scheduler_state: Current rotation state
        rotation_index: Position of the next item to show
        browser_status: Status of the browser process
        last_error: Last error message (None if no errors)
        error_time: When the last error occurred (None if no errors)
    """

    is_running: bool
    start_time: Optional[datetime]
    uptime: Optional[timedelta]

    scheduler_state: SchedulerState
    rotation_index: int
    browser_status: BrowserStatus

    last_error: Optional[str]
    error_time: Optional[datetime]


class KioskError(Exception):
    """Exception raised for kiosk-related errors.

    Attributes:
        message: Error description
        component: Component where error occurred (optional)
        error_code: Error code for categorization (optional)
    """

    def __init__(
        self, message: str, component: Optional[str] = None, error_code: Optional[str] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.component = component
        self.error_code = error_code


class KioskManager:
    """Lifecycle coordinator for the display rotation engine.

    Startup order: run lock, signal handlers, orphan recovery, network gate,
    rotation. Shutdown runs in reverse and is safe to trigger more than once.
    Components can be injected for testing; otherwise they are built from the
    engine settings.
    """

    def __init__(
        self,
        settings: InfoPointSettings,
        store: Optional[RotationConfigStore] = None,
        browser: Optional[BrowserManager] = None,
        navigator: Optional[Navigator] = None,
        clock: Optional[InterruptibleClock] = None,
        scheduler: Optional[RotationScheduler] = None,
        run_lock: Optional[RunLock] = None,
    ) -> None:
        self.settings = settings
        self.clock = clock or InterruptibleClock()
        self.store = store or RotationConfigStore(
            settings.rotation_file, settings.effective_backup_file
        )
        self.browser = browser or BrowserManager(settings.browser)
        self.navigator = navigator or Navigator(settings.navigation, self.browser)
        self.scheduler = scheduler or RotationScheduler(
            self.store,
            self.navigator,
            self.clock,
            settings.rotation,
            launch_retry_delay=settings.browser.launch_retry_delay,
        )
        self.run_lock = run_lock or RunLock(settings.lock_file)

        self._start_time: Optional[datetime] = None
        self._running = False
        self._shutdown_complete = False
        self._installed_signals: list[signal.Signals] = []
        self._loop: Optional[asyncio.AbstractEventLoop] = None

        self._last_error: Optional[str] = None
        self._error_time: Optional[datetime] = None

    async def run(self) -> int:
        """Run the engine until a shutdown signal arrives.

        Returns:
            Process exit code
        """
        try:
            self.run_lock.acquire()
        except DaemonAlreadyRunningError as e:
            logger.error(f"{e}, refusing to start a second engine")
            return EXIT_ALREADY_RUNNING
        except LockFileError as e:
            logger.error(str(e))
            return EXIT_ERROR

        self._running = True
        self._shutdown_complete = False
        self._start_time = datetime.now()
        logger.info(f"InfoPoint engine starting (rotation file {self.settings.rotation_file})")

        exit_code = EXIT_OK
        try:
            self._install_signal_handlers()

            orphan = await asyncio.to_thread(self.browser.recover_orphan)
            if orphan:
                logger.info(f"Cleaned up browser {orphan} left by a previous run")

            self.scheduler.state = SchedulerState.AWAITING_NETWORK
            if await wait_for_network(self.settings.network, self.clock):
                await self.scheduler.run()

        except KioskError as e:
            self._record_error(e.message)
            logger.error(f"Kiosk engine failed in {e.component or 'engine'}: {e.message}")
            exit_code = EXIT_ERROR
        except Exception as e:
            self._record_error(str(e))
            logger.exception("Kiosk engine failed")
            exit_code = EXIT_ERROR
        finally:
            await self.shutdown()

        return exit_code

    def request_shutdown(self) -> None:
        if self.clock.shutdown_requested:
            logger.debug("Shutdown already in progress")
            return
        logger.info("Shutdown requested")
        self.clock.request_shutdown()

    def request_reload(self) -> None:
        logger.info("Configuration reload requested")
        self.clock.request_reload()

    async def shutdown(self) -> None:
        """Stop the browser, remove signal handlers and release the lock.

        Safe to call more than once; later calls do nothing.
        """
        if self._shutdown_complete:
            return
        self._shutdown_complete = True

        self.clock.request_shutdown()
        self.scheduler.state = SchedulerState.SHUTTING_DOWN
        logger.info("Shutting down InfoPoint engine")

        try:
            await self.browser.stop()
        finally:
            self._remove_signal_handlers()
            self.run_lock.release()
            self._running = False
            logger.info("InfoPoint engine stopped")

    def get_kiosk_status(self) -> KioskStatus:
        uptime = None
        if self._running and self._start_time:
            uptime = datetime.now() - self._start_time

        return KioskStatus(
            is_running=self._running,
            start_time=self._start_time,
            uptime=uptime,
            scheduler_state=self.scheduler.state,
            rotation_index=self.scheduler.index,
            browser_status=self.browser.get_browser_status(),
            last_error=self._last_error,
            error_time=self._error_time,
        )

    def _install_signal_handlers(self) -> None:
        """Route OS signals to the clock through the running event loop.

        Raises:
            KioskError: If the event loop cannot install signal handlers
        """
        loop = asyncio.get_running_loop()
        self._loop = loop
        try:
            for sig in SHUTDOWN_SIGNALS:
                loop.add_signal_handler(sig, self._on_shutdown_signal, sig)
                self._installed_signals.append(sig)
            for sig in RELOAD_SIGNALS:
                loop.add_signal_handler(sig, self._on_reload_signal, sig)
                self._installed_signals.append(sig)
        except (NotImplementedError, RuntimeError) as e:
            raise KioskError(
                f"Cannot install signal handlers: {e}",
                component="signals",
                error_code="SIGNALS_UNSUPPORTED",
            ) from e

    def _remove_signal_handlers(self) -> None:
        if self._loop is None:
            self._installed_signals.clear()
            return
        for sig in self._installed_signals:
            self._loop.remove_signal_handler(sig)
        self._installed_signals.clear()
        self._loop = None

    def _on_shutdown_signal(self, sig: signal.Signals) -> None:
        if self.clock.shutdown_requested:
            logger.debug(f"Ignoring repeated {sig.name}")
            return
        logger.info(f"Received {sig.name}, shutting down")
        self.clock.request_shutdown()

    def _on_reload_signal(self, sig: signal.Signals) -> None:
        logger.info(f"Received {sig.name}, reloading configuration")
        self.clock.request_reload()

    def _record_error(self, message: str) -> None:
        self._last_error = message
        self._error_time = datetime.now()

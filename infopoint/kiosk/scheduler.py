"""
Rotation scheduler: the state machine that cycles the display through its pages.

Each tick re-reads the rotation file, shows the current item, dwells on it,
pauses for the transition delay and advances. Edits to the file therefore take
effect on the next tick without a restart. All waits go through the
InterruptibleClock so shutdown and reload requests cut them short.
"""

import asyncio
import logging
from enum import Enum
from typing import Optional

from ..config.settings import RotationTimingSettings
from ..settings.persistence import RotationConfigStore
from ..settings.rotation_models import RotationConfig, RotationItem
from ..utils.logging import VERBOSE
from .browser_manager import BrowserError
from .clock import InterruptibleClock, WakeReason
from .navigator import NavigationOutcome, Navigator

logger = logging.getLogger(__name__)


class SchedulerState(Enum):
    """Rotation lifecycle states."""

    AWAITING_NETWORK = "awaiting_network"
    CYCLING = "cycling"
    SHUTTING_DOWN = "shutting_down"


class RotationScheduler:
    """Drives the display through the configured rotation.

    Attributes:
        index: Position of the next item to show
        state: Current lifecycle state
    """

    def __init__(
        self,
        store: RotationConfigStore,
        navigator: Navigator,
        clock: InterruptibleClock,
        timing: RotationTimingSettings,
        launch_retry_delay: float = 5.0,
    ) -> None:
        self.store = store
        self.navigator = navigator
        self.clock = clock
        self.timing = timing
        self.launch_retry_delay = launch_retry_delay

        self.index = 0
        self.state = SchedulerState.AWAITING_NETWORK

        self._snapshot: Optional[RotationConfig] = None
        self._config_retry_delay: Optional[float] = None

    async def run(self) -> None:
        """Tick until shutdown is requested."""
        self.state = SchedulerState.CYCLING
        logger.info("Rotation started")

        while not self.clock.shutdown_requested:
            try:
                await self.tick()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Unexpected error in rotation, pausing before next attempt")
                await self.clock.sleep(self.timing.idle_interval)

        self.state = SchedulerState.SHUTTING_DOWN
        logger.info("Rotation stopped")

    async def tick(self) -> None:
        """Show one rotation item for its full dwell and transition period."""
        if self.clock.consume_reload():
            logger.info("Reload requested, restarting rotation from the first item")
            self.index = 0

        config = await self._load_config()
        if config is None:
            return

        if config.is_empty:
            logger.info(
                f"No URLs configured, checking again in {self.timing.idle_interval:g}s"
            )
            await self.clock.sleep(self.timing.idle_interval)
            return

        count = len(config.items)
        if self.index >= count or self.index < 0:
            logger.debug(f"Rotation index {self.index} out of range for {count} items, resetting")
            self.index = 0

        item = config.items[self.index]
        dwell_seconds = config.resolve_dwell_ms(item) / 1000

        logger.info(
            f"Showing [{self.index + 1}/{count}] {item.name}: {item.url} ({dwell_seconds:g}s)"
        )
        try:
            outcome = await self.navigator.go_to(item.url)
        except BrowserError as e:
            logger.error(
                f"Could not display {item.url}: {e.message}; "
                f"retrying in {self.launch_retry_delay:g}s"
            )
            await self.clock.sleep(self.launch_retry_delay)
            return

        if outcome is NavigationOutcome.IN_PLACE_FAILED:
            logger.warning(f"Keeping previous page on screen while dwelling on {item.name}")

        if await self._dwell(item, dwell_seconds) is not WakeReason.ELAPSED:
            return

        if config.transition_delay_ms > 0:
            transition_seconds = config.transition_delay_ms / 1000
            logger.info(f"Transition delay: {transition_seconds:g}s")
            if await self.clock.sleep(transition_seconds) is not WakeReason.ELAPSED:
                return

        self.index = (self.index + 1) % count

    async def _load_config(self) -> Optional[RotationConfig]:
        """Load the rotation, falling back to the last good snapshot.

        Returns:
            Configuration for this tick, or None if a backoff wait was interrupted
        """
        result = self.store.load()

        if not result.failed:
            if self._config_retry_delay is not None:
                logger.info("Configuration readable again")
            self._config_retry_delay = None
            self._snapshot = result.config
            return result.config

        if self._snapshot is None:
            logger.warning("Configuration unreadable and no previous rotation, using defaults")
            return result.config

        delay = self._next_config_retry_delay()
        logger.warning(
            f"Configuration unreadable ({result.error}), keeping previous rotation; "
            f"waiting {delay:g}s"
        )
        if await self.clock.sleep(delay) is not WakeReason.ELAPSED:
            return None
        return self._snapshot

    def _next_config_retry_delay(self) -> float:
        if self._config_retry_delay is None:
            self._config_retry_delay = self.timing.config_retry_initial
        else:
            self._config_retry_delay = min(
                self._config_retry_delay * 2, self.timing.config_retry_max
            )
        return self._config_retry_delay

    async def _dwell(self, item: RotationItem, seconds: float) -> WakeReason:
        """Keep the item on screen, logging progress for long dwells."""
        if seconds <= self.timing.progress_threshold:
            return await self.clock.sleep(seconds)

        remaining = seconds
        while remaining > 0:
            step = min(self.timing.progress_interval, remaining)
            reason = await self.clock.sleep(step)
            if reason is not WakeReason.ELAPSED:
                return reason
            remaining -= step
            if remaining > 0:
                logger.log(VERBOSE, f"{item.name}: {remaining:g}s remaining")

        return WakeReason.ELAPSED

"""Interruptible waits for the rotation loop."""

import asyncio
import logging
from enum import Enum

logger = logging.getLogger(__name__)


class WakeReason(Enum):
    """Why a clock sleep returned."""

    ELAPSED = "elapsed"
    SHUTDOWN = "shutdown"
    RELOAD = "reload"


class InterruptibleClock:
    """Sleeps that end early on shutdown or reload requests.

    Signal handlers only set events here, so every wait in the engine can be
    cut short without cancelling the task that is waiting.
    """

    def __init__(self) -> None:
        self._shutdown = asyncio.Event()
        self._reload = asyncio.Event()

    @property
    def shutdown_requested(self) -> bool:
        return self._shutdown.is_set()

    @property
    def reload_requested(self) -> bool:
        return self._reload.is_set()

    def request_shutdown(self) -> None:
        self._shutdown.set()

    def request_reload(self) -> None:
        self._reload.set()

    def consume_reload(self) -> bool:
        """Clear a pending reload request.

        Returns:
            True if a reload was pending
        """
        if self._reload.is_set():
            self._reload.clear()
            return True
        return False

    async def sleep(self, seconds: float) -> WakeReason:
        """Wait up to ``seconds``, returning early on shutdown or reload.

        Shutdown takes priority over a pending reload.
        """
        if self._shutdown.is_set():
            return WakeReason.SHUTDOWN
        if self._reload.is_set():
            return WakeReason.RELOAD
        if seconds <= 0:
            return WakeReason.ELAPSED

        shutdown_wait = asyncio.ensure_future(self._shutdown.wait())
        reload_wait = asyncio.ensure_future(self._reload.wait())
        try:
            await asyncio.wait(
                {shutdown_wait, reload_wait},
                timeout=seconds,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            for waiter in (shutdown_wait, reload_wait):
                if not waiter.done():
                    waiter.cancel()

        if self._shutdown.is_set():
            return WakeReason.SHUTDOWN
        if self._reload.is_set():
            return WakeReason.RELOAD
        return WakeReason.ELAPSED

"""Network reachability checks used before the rotation starts."""

import asyncio
import logging
from typing import TYPE_CHECKING

import aiohttp

if TYPE_CHECKING:
    from ..config.settings import NetworkSettings
    from ..kiosk.clock import InterruptibleClock

logger = logging.getLogger(__name__)


async def probe_network(url: str, timeout: float = 3.0) -> bool:
    """Check whether the probe URL answers.

    Any HTTP response counts as reachable, including error statuses: the
    question is whether the network is up, not whether the site is healthy.

    Args:
        url: URL to send a HEAD request to
        timeout: Total request timeout in seconds

    Returns:
        True if a response was received
    """
    client_timeout = aiohttp.ClientTimeout(total=timeout)
    try:
        async with aiohttp.ClientSession(timeout=client_timeout) as session:
            async with session.head(url, allow_redirects=False) as response:
                logger.debug(f"Network probe {url} returned HTTP {response.status}")
                return True
    except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
        logger.debug(f"Network probe {url} failed: {e}")
        return False


async def wait_for_network(settings: "NetworkSettings", clock: "InterruptibleClock") -> bool:
    """Poll until the network is reachable.

    There is no upper bound: a display without network has nothing to show.
    The wait ends early only when shutdown is requested on the clock.

    Args:
        settings: Network probe settings
        clock: Clock providing interruptible sleeps

    Returns:
        True once the network is reachable, False if shutdown was requested
    """
    if not settings.wait_enabled:
        logger.info("Network wait disabled, starting rotation immediately")
        return True

    attempts = 0
    while not clock.shutdown_requested:
        attempts += 1
        if await probe_network(settings.probe_url, settings.request_timeout):
            if attempts > 1:
                logger.info(f"Network available after {attempts} checks")
            else:
                logger.info("Network available")
            return True

        if attempts == 1:
            logger.warning(
                f"Network not available, retrying every {settings.poll_interval:g}s"
            )
        else:
            logger.debug(f"Network still unavailable (check {attempts})")

        await clock.sleep(settings.poll_interval)

    logger.info("Shutdown requested while waiting for network")
    return False

"""Unit tests for InterruptibleClock."""

import asyncio
import time

import pytest

from infopoint.kiosk.clock import InterruptibleClock, WakeReason


class TestInterruptibleClock:
    """Test interruptible sleeps."""

    @pytest.mark.asyncio
    async def test_sleep_when_undisturbed_then_elapsed(self) -> None:
        clock = InterruptibleClock()

        assert await clock.sleep(0.01) is WakeReason.ELAPSED

    @pytest.mark.asyncio
    async def test_sleep_when_zero_then_elapsed_immediately(self) -> None:
        assert await InterruptibleClock().sleep(0) is WakeReason.ELAPSED

    @pytest.mark.asyncio
    async def test_sleep_when_shutdown_already_requested_then_returns_at_once(self) -> None:
        clock = InterruptibleClock()
        clock.request_shutdown()

        started = time.monotonic()
        reason = await clock.sleep(30)

        assert reason is WakeReason.SHUTDOWN
        assert time.monotonic() - started < 0.5

    @pytest.mark.asyncio
    async def test_sleep_when_shutdown_requested_midway_then_wakes_promptly(self) -> None:
        clock = InterruptibleClock()
        asyncio.get_running_loop().call_later(0.01, clock.request_shutdown)

        started = time.monotonic()
        reason = await clock.sleep(10)

        assert reason is WakeReason.SHUTDOWN
        assert time.monotonic() - started < 1.0
        assert clock.shutdown_requested

    @pytest.mark.asyncio
    async def test_sleep_when_reload_requested_then_reload_until_consumed(self) -> None:
        clock = InterruptibleClock()
        asyncio.get_running_loop().call_later(0.01, clock.request_reload)

        assert await clock.sleep(10) is WakeReason.RELOAD
        assert clock.reload_requested
        assert await clock.sleep(10) is WakeReason.RELOAD

        assert clock.consume_reload() is True
        assert clock.consume_reload() is False
        assert await clock.sleep(0.01) is WakeReason.ELAPSED

    @pytest.mark.asyncio
    async def test_sleep_when_shutdown_and_reload_pending_then_shutdown_wins(self) -> None:
        clock = InterruptibleClock()
        clock.request_reload()
        clock.request_shutdown()

        assert await clock.sleep(1) is WakeReason.SHUTDOWN

"""Unit tests for network reachability probing and the startup wait."""

from unittest.mock import AsyncMock, MagicMock, Mock, patch

import aiohttp
import pytest

from infopoint.config.settings import NetworkSettings
from infopoint.utils.network import probe_network, wait_for_network


def _session_returning(status: int) -> MagicMock:
    response = MagicMock(status=status)
    request_cm = MagicMock()
    request_cm.__aenter__.return_value = response
    request_cm.__aexit__.return_value = False
    session = MagicMock()
    session.head.return_value = request_cm
    session_cm = MagicMock()
    session_cm.__aenter__.return_value = session
    session_cm.__aexit__.return_value = False
    return session_cm


class TestProbeNetwork:
    """Test single reachability probes."""

    @pytest.mark.asyncio
    async def test_probe_when_any_http_response_then_reachable(self) -> None:
        with patch(
            "infopoint.utils.network.aiohttp.ClientSession", return_value=_session_returning(503)
        ):
            assert await probe_network("https://www.google.com") is True

    @pytest.mark.asyncio
    async def test_probe_when_connection_fails_then_unreachable(self) -> None:
        session_cm = _session_returning(200)
        session_cm.__aenter__.return_value.head.side_effect = aiohttp.ClientConnectionError(
            "Network is unreachable"
        )

        with patch("infopoint.utils.network.aiohttp.ClientSession", return_value=session_cm):
            assert await probe_network("https://www.google.com") is False

    @pytest.mark.asyncio
    async def test_probe_when_timeout_then_unreachable(self) -> None:
        session_cm = _session_returning(200)
        session_cm.__aenter__.side_effect = TimeoutError()

        with patch("infopoint.utils.network.aiohttp.ClientSession", return_value=session_cm):
            assert await probe_network("https://www.google.com", timeout=0.1) is False


class TestWaitForNetwork:
    """Test the polling wait before the rotation starts."""

    @pytest.mark.asyncio
    async def test_wait_when_disabled_then_true_without_probe(self) -> None:
        clock = Mock(shutdown_requested=False)

        with patch("infopoint.utils.network.probe_network", new=AsyncMock()) as mock_probe:
            assert await wait_for_network(NetworkSettings(wait_enabled=False), clock) is True

        mock_probe.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_wait_when_network_comes_up_then_polls_at_interval(self) -> None:
        clock = Mock(shutdown_requested=False)
        clock.sleep = AsyncMock()
        settings = NetworkSettings(poll_interval=5.0)

        with patch(
            "infopoint.utils.network.probe_network",
            new=AsyncMock(side_effect=[False, False, True]),
        ):
            assert await wait_for_network(settings, clock) is True

        assert [call.args[0] for call in clock.sleep.await_args_list] == [5.0, 5.0]

    @pytest.mark.asyncio
    async def test_wait_when_shutdown_requested_then_false(self) -> None:
        clock = Mock(shutdown_requested=False)

        async def _sleep(_seconds: float) -> None:
            clock.shutdown_requested = True

        clock.sleep = AsyncMock(side_effect=_sleep)

        with patch("infopoint.utils.network.probe_network", new=AsyncMock(return_value=False)):
            assert await wait_for_network(NetworkSettings(), clock) is False

        clock.sleep.assert_awaited_once()

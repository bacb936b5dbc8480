"""Fakes for driving the rotation state machine without real time or processes."""

from typing import Callable, Optional, Union

import pytest

from infopoint.kiosk.clock import WakeReason
from infopoint.kiosk.navigator import NavigationOutcome
from infopoint.settings.persistence import ConfigSource, LoadResult
from infopoint.settings.rotation_models import RotationConfig, RotationItem


class FakeClock:
    """Records requested sleeps and returns immediately.

    ``hooks`` maps a 1-based sleep number to a callable run during that sleep,
    which is how tests inject shutdown or reload requests mid-wait.
    """

    def __init__(self, max_sleeps: Optional[int] = None) -> None:
        self.sleeps: list[float] = []
        self.max_sleeps = max_sleeps
        self.hooks: dict[int, Callable[[], None]] = {}
        self._shutdown = False
        self._reload = False

    @property
    def shutdown_requested(self) -> bool:
        return self._shutdown

    @property
    def reload_requested(self) -> bool:
        return self._reload

    def request_shutdown(self) -> None:
        self._shutdown = True

    def request_reload(self) -> None:
        self._reload = True

    def consume_reload(self) -> bool:
        pending = self._reload
        self._reload = False
        return pending

    async def sleep(self, seconds: float) -> WakeReason:
        if self._shutdown:
            return WakeReason.SHUTDOWN
        if self._reload:
            return WakeReason.RELOAD

        self.sleeps.append(seconds)
        hook = self.hooks.pop(len(self.sleeps), None)
        if hook:
            hook()
        if self.max_sleeps is not None and len(self.sleeps) >= self.max_sleeps:
            self._shutdown = True

        if self._shutdown:
            return WakeReason.SHUTDOWN
        if self._reload:
            return WakeReason.RELOAD
        return WakeReason.ELAPSED


class FakeStore:
    """Returns queued load results; the last one repeats."""

    def __init__(self, *results: LoadResult) -> None:
        self.results = list(results)
        self.loads = 0

    def load(self) -> LoadResult:
        self.loads += 1
        if len(self.results) > 1:
            return self.results.pop(0)
        return self.results[0]


class FakeNavigator:
    """Records navigation requests; queued effects are returned or raised in order."""

    def __init__(self) -> None:
        self.urls: list[str] = []
        self.effects: list[Union[NavigationOutcome, Exception]] = []

    async def go_to(self, url: str) -> NavigationOutcome:
        self.urls.append(url)
        if self.effects:
            effect = self.effects.pop(0)
            if isinstance(effect, Exception):
                raise effect
            return effect
        return NavigationOutcome.IN_PLACE


def build_config(
    *specs: tuple[str, Optional[int]], global_timeout: int = 30000, transition: int = 0
) -> RotationConfig:
    return RotationConfig(
        items=[RotationItem(url=url, timeout=timeout) for url, timeout in specs],
        global_timeout_ms=global_timeout,
        transition_delay_ms=transition,
    )


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_navigator() -> FakeNavigator:
    return FakeNavigator()


@pytest.fixture
def make_config() -> Callable[..., RotationConfig]:
    return build_config


@pytest.fixture
def loaded() -> Callable[..., LoadResult]:
    """Wrap a config in a LoadResult with the given source."""

    def _loaded(
        config: RotationConfig,
        source: ConfigSource = ConfigSource.PRIMARY,
        error: Optional[str] = None,
    ) -> LoadResult:
        return LoadResult(config=config, source=source, error=error)

    return _loaded


@pytest.fixture
def make_store() -> Callable[..., FakeStore]:
    return FakeStore


@pytest.fixture
def make_clock() -> Callable[..., FakeClock]:
    return FakeClock

"""
In-place navigation of the running kiosk browser.

Relaunching Chromium for every page costs several seconds of blank screen, so
while the browser is alive the navigator drives its address bar through desktop
input automation instead: focus the window, Ctrl+L, type the URL, Return. When
the browser is gone, or no automation tool is available, it falls back to a
fresh launch through the BrowserManager.
"""

import asyncio
import logging
import shutil
from enum import Enum
from typing import Optional

from ..config.settings import NavigationSettings
from .browser_manager import BrowserManager

logger = logging.getLogger(__name__)

BACKEND_TOOLS = {
    "xdotool": ("xdotool",),
    "wtype": ("wtype", "wmctrl"),
    "none": (),
}


class NavigationOutcome(Enum):
    """Result of a navigation request.

    Attributes:
        IN_PLACE: The running browser was pointed at the URL
        IN_PLACE_FAILED: Automation failed; the browser keeps its previous page
        LAUNCHED: A fresh browser was launched on the URL
    """

    IN_PLACE = "in_place"
    IN_PLACE_FAILED = "in_place_failed"
    LAUNCHED = "launched"


class NavigationError(Exception):
    """Raised when an automation step fails or times out."""

    def __init__(self, message: str, command: Optional[list[str]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.command = command


class Navigator:
    """Points the kiosk browser at a URL, in place when possible."""

    def __init__(self, settings: NavigationSettings, browser: BrowserManager) -> None:
        self.settings = settings
        self.browser = browser
        self._tools_checked = False
        self._tools_available = False

    @property
    def available(self) -> bool:
        """Whether the configured automation backend can be used."""
        if self.settings.backend == "none":
            return False
        if not self._tools_checked:
            missing = [
                tool for tool in BACKEND_TOOLS[self.settings.backend] if shutil.which(tool) is None
            ]
            if missing:
                logger.warning(
                    f"Navigation backend {self.settings.backend} unavailable "
                    f"(missing {', '.join(missing)}), pages will be opened by relaunching"
                )
            self._tools_available = not missing
            self._tools_checked = True
        return self._tools_available

    async def go_to(self, url: str) -> NavigationOutcome:
        """Show ``url`` on the display.

        Args:
            url: Page to show

        Returns:
            How the page was brought up

        Raises:
            BrowserError: If a relaunch was needed and failed
        """
        if not self.browser.is_alive() or not self.available:
            await self.browser.start(url)
            return NavigationOutcome.LAUNCHED

        logger.debug(f"Navigating in place via {self.settings.backend}: {url}")
        try:
            await self._navigate_in_place(url)
        except NavigationError as e:
            logger.warning(f"In-place navigation failed: {e.message}")
            return NavigationOutcome.IN_PLACE_FAILED

        return NavigationOutcome.IN_PLACE

    def _build_steps(self, url: str) -> list[list[str]]:
        window = self.settings.window_name
        if self.settings.backend == "xdotool":
            return [
                ["xdotool", "search", "--onlyvisible", "--class", window, "windowactivate", "--sync"],
                ["xdotool", "key", "--clearmodifiers", "ctrl+l"],
                ["xdotool", "type", "--delay", "12", url],
                ["xdotool", "key", "--clearmodifiers", "Return"],
            ]
        return [
            ["wmctrl", "-a", window],
            ["wtype", "-M", "ctrl", "l", "-m", "ctrl"],
            ["wtype", url],
            ["wtype", "-k", "Return"],
        ]

    async def _navigate_in_place(self, url: str) -> None:
        focus, *keystrokes = self._build_steps(url)

        await self._run_step(focus)
        if self.settings.focus_delay > 0:
            await asyncio.sleep(self.settings.focus_delay)

        for index, step in enumerate(keystrokes):
            if index and self.settings.step_delay > 0:
                await asyncio.sleep(self.settings.step_delay)
            await self._run_step(step)

    async def _run_step(self, command: list[str]) -> None:
        """Run one automation command with a timeout.

        Raises:
            NavigationError: If the command cannot start, times out or fails
        """
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
                env=self.browser.build_environment(),
            )
        except OSError as e:
            raise NavigationError(f"Cannot run {command[0]}: {e}", command) from e

        try:
            _, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.settings.command_timeout
            )
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise NavigationError(
                f"{command[0]} timed out after {self.settings.command_timeout:g}s", command
            ) from None

        if process.returncode != 0:
            detail = stderr.decode(errors="replace").strip() if stderr else ""
            raise NavigationError(
                f"{' '.join(command[:2])} exited with code {process.returncode}"
                + (f": {detail}" if detail else ""),
                command,
            )

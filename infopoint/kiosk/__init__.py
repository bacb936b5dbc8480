"""
Kiosk display rotation components.

This package provides the pieces that keep a full-screen browser cycling
through the configured pages: browser process supervision, in-place
navigation, the rotation scheduler and the lifecycle manager.
"""

from .browser_manager import BrowserError, BrowserManager, BrowserState, BrowserStatus
from .clock import InterruptibleClock, WakeReason
from .manager import (
    EXIT_ALREADY_RUNNING,
    EXIT_ERROR,
    EXIT_INTERRUPTED,
    EXIT_OK,
    KioskError,
    KioskManager,
    KioskStatus,
)
from .navigator import NavigationError, NavigationOutcome, Navigator
from .scheduler import RotationScheduler, SchedulerState

__all__ = [
    "EXIT_ALREADY_RUNNING",
    "EXIT_ERROR",
    "EXIT_INTERRUPTED",
    "EXIT_OK",
    "BrowserError",
    "BrowserManager",
    "BrowserState",
    "BrowserStatus",
    "InterruptibleClock",
    "KioskError",
    "KioskManager",
    "KioskStatus",
    "NavigationError",
    "NavigationOutcome",
    "Navigator",
    "RotationScheduler",
    "SchedulerState",
    "WakeReason",
]

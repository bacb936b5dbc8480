"""CLI mode handlers."""

from .kiosk import check_status, run_kiosk_mode, run_validate_config

__all__ = ["check_status", "run_kiosk_mode", "run_validate_config"]

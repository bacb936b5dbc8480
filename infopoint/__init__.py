"""InfoPoint - unattended digital-signage display rotation engine."""

__version__ = "1.0.0"
__author__ = "InfoPoint Team"

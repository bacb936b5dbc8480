"""Engine settings for InfoPoint."""

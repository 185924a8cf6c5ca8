"""
Configuration for dirwatch.

Loads settings from environment variables with sensible defaults. Timing
values are in seconds.
"""

import os
from dataclasses import dataclass


@dataclass
class Config:
    """dirwatch configuration."""

    # Watching
    watch_root: str = os.environ.get("DIRWATCH_ROOT", ".")
    poll_interval: float = float(os.environ.get("DIRWATCH_POLL_INTERVAL", "1.0"))
    debounce: float = float(os.environ.get("DIRWATCH_DEBOUNCE", "1.0"))

    # Process management
    startup_delay: float = float(os.environ.get("DIRWATCH_STARTUP_DELAY", "0.1"))
    settle_delay: float = float(os.environ.get("DIRWATCH_SETTLE_DELAY", "0.5"))
    stop_timeout: float = float(os.environ.get("DIRWATCH_STOP_TIMEOUT", "10"))

    # Logging
    log_level: str = os.environ.get("DIRWATCH_LOG_LEVEL", "WARNING")
    log_file: str = os.environ.get("DIRWATCH_LOG_FILE", "")
    log_max_bytes: int = int(os.environ.get("LOG_MAX_BYTES", str(10 * 1024 * 1024)))  # 10MB
    log_backup_count: int = int(os.environ.get("LOG_BACKUP_COUNT", "5"))

    def __post_init__(self):
        """Validate timing values."""
        for name in ("poll_interval", "debounce", "startup_delay", "settle_delay", "stop_timeout"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")
        self.log_level = self.log_level.upper()


config = Config()

"""Infrastructure layer - external services and configuration."""

from spamtrace.infrastructure.log_config import configure_logging
from spamtrace.infrastructure.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
]

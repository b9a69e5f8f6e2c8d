"""logshare configuration package."""

from config.defaults import (
    CONTAINER_EXTENSION,
    DEBOUNCE_SECONDS,
    LAST_HOUR_SECONDS,
    TEXT_EXTENSION,
)
from config.settings import ShareConfig

__all__ = [
    "ShareConfig",
    "DEBOUNCE_SECONDS",
    "LAST_HOUR_SECONDS",
    "CONTAINER_EXTENSION",
    "TEXT_EXTENSION",
]

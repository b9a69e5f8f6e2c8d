"""logshare — ShareConfig and environment-based configuration loading.

All runtime configuration flows through ShareConfig. Paths may be overridden
from the environment (or a .env file) without touching code.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from config.defaults import (
    ARTIFACT_PREFIX,
    ARTIFACT_TIMESTAMP_FORMAT,
    CONTAINER_EXTENSION,
    DEBOUNCE_SECONDS,
    DEFAULT_LOG_LEVEL,
    SETTINGS_PATH,
    TEMP_DIR_PREFIX,
    TEMP_ROOT,
    TEXT_BLOCK_SEPARATOR,
    TEXT_BODY_LIMIT,
    TEXT_EXTENSION,
)

# Load .env file if present; silently skip if missing
load_dotenv()


@dataclass
class ShareConfig:
    """Single configuration object threaded through the export pipeline.

    Debounce timing, artifact naming, temporary storage and settings paths
    live here. Never use module-level globals or hard-coded values in
    pipeline code.
    """

    # ── Coordinator ───────────────────────────────────────────────────────────
    debounce_seconds: float = DEBOUNCE_SECONDS

    # ── Artifact naming ───────────────────────────────────────────────────────
    artifact_prefix: str = ARTIFACT_PREFIX
    container_extension: str = CONTAINER_EXTENSION
    text_extension: str = TEXT_EXTENSION
    timestamp_format: str = ARTIFACT_TIMESTAMP_FORMAT

    # ── Text rendering ────────────────────────────────────────────────────────
    text_block_separator: str = TEXT_BLOCK_SEPARATOR
    text_body_limit: int = TEXT_BODY_LIMIT

    # ── Temporary storage ─────────────────────────────────────────────────────
    temp_dir_prefix: str = TEMP_DIR_PREFIX
    temp_root: Optional[str] = field(
        default_factory=lambda: os.getenv("LOGSHARE_TEMP_ROOT", TEMP_ROOT) or None
    )

    # ── Settings persistence ──────────────────────────────────────────────────
    settings_path: str = field(
        default_factory=lambda: os.getenv("LOGSHARE_SETTINGS_PATH", SETTINGS_PATH)
    )

    # ── Logging ───────────────────────────────────────────────────────────────
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL))

    def __post_init__(self) -> None:
        if self.debounce_seconds < 0:
            raise ValueError(f"debounce_seconds must be >= 0, got {self.debounce_seconds}")
        if self.text_body_limit < 0:
            self.text_body_limit = 0

    @property
    def resolved_settings_path(self) -> Path:
        """Settings file path with ``~`` expanded."""
        return Path(self.settings_path).expanduser()

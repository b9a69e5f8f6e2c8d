"""logshare — All default values and configuration constants.

All tuneable values live here. Never hard-code magic numbers in source files.
Import constants from this module; override via ShareConfig at runtime.
"""

# ── Option debouncing ──────────────────────────────────────────────────────────
# Quiet period (seconds) after the last option change before an export is triggered
DEBOUNCE_SECONDS: float = 0.5

# ── Default sharing options ────────────────────────────────────────────────────
DEFAULT_TIME_RANGE: str = "currentSession"
DEFAULT_MIN_LEVEL: str = "trace"
DEFAULT_FORMAT: str = "container"

# ── Filter windows ─────────────────────────────────────────────────────────────
# Lookback for the "Last Hour" time range (seconds)
LAST_HOUR_SECONDS: int = 3600

# ── Artifact naming ────────────────────────────────────────────────────────────
ARTIFACT_PREFIX: str = "logs"
CONTAINER_EXTENSION: str = "logarchive"
TEXT_EXTENSION: str = "txt"
# strftime format for the <timestamp> part of logs-<timestamp>.<ext>
ARTIFACT_TIMESTAMP_FORMAT: str = "%Y-%m-%d-%H-%M-%S"

# ── Container archive layout ───────────────────────────────────────────────────
ARCHIVE_DATABASE_NAME: str = "logs.sqlite"
ARCHIVE_INFO_NAME: str = "info.json"
STORE_VERSION: str = "1.0.0"

# ── Text rendering ─────────────────────────────────────────────────────────────
# Joiner placed between rendered blocks in text exports
TEXT_BLOCK_SEPARATOR: str = "\n"
# Maximum characters of a request/response body included in a task block
TEXT_BODY_LIMIT: int = 4096

# ── Temporary storage ──────────────────────────────────────────────────────────
# Prefix of per-job temporary directories
TEMP_DIR_PREFIX: str = "logshare-"
# Root for temporary directories (empty string = system default)
TEMP_ROOT: str = ""

# ── Settings persistence ───────────────────────────────────────────────────────
SETTINGS_PATH: str = "~/.logshare/sharing.json"

# ── Logging ────────────────────────────────────────────────────────────────────
DEFAULT_LOG_LEVEL: str = "INFO"

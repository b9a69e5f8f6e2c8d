#!/usr/bin/env python3
"""logshare CLI — export logs from a store to a file.

Usage:
    python scripts/run_export.py --store logs.sqlite --output exports/
    python scripts/run_export.py --store logs.sqlite --time-range today --min-level error --format text
    python scripts/run_export.py --store logs.sqlite --output exports/ --save-options
"""

from __future__ import annotations

import argparse
import hashlib
import logging
import sys
from pathlib import Path

# Ensure project root is on sys.path for consistent import resolution
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from config.defaults import DEFAULT_LOG_LEVEL  # noqa: E402
from config.settings import ShareConfig  # noqa: E402
from logshare.clients.sqlite_store import SQLiteLogStore  # noqa: E402
from logshare.io.settings_store import SharingSettingsStore  # noqa: E402
from logshare.models.options import (  # noqa: E402
    ExportFormat,
    ExportOptions,
    SeverityLevel,
    TimeRange,
)
from logshare.sharing.coordinator import ExportCoordinator  # noqa: E402
from logshare.sharing.presenter import SaveAsPresenter  # noqa: E402
from logshare.utils.logging_utils import configure_logging  # noqa: E402


def build_arg_parser() -> argparse.ArgumentParser:
    """Build the argparse argument parser."""
    parser = argparse.ArgumentParser(
        prog="run_export",
        description="logshare — filter and export logs from a local log store",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    # ── Source and destination ───────────────────────────────────────────────
    parser.add_argument("--store", type=Path, required=True, help="SQLite log store path")
    parser.add_argument(
        "--output", type=Path, default=Path("."), help="Directory receiving the exported file"
    )
    parser.add_argument(
        "--overwrite", action="store_true", help="Replace an existing file with the same name"
    )

    # ── Sharing options (default: last saved choice) ─────────────────────────
    parser.add_argument(
        "--time-range",
        choices=[t.value for t in TimeRange],
        default=None,
        help="Time range to export",
    )
    parser.add_argument(
        "--min-level",
        choices=[lvl.name.lower() for lvl in SeverityLevel],
        default=None,
        help="Minimum log level to export",
    )
    parser.add_argument(
        "--format",
        choices=[f.value for f in ExportFormat],
        default=None,
        help="Output format",
    )
    parser.add_argument(
        "--session-id",
        type=str,
        default=None,
        help="Session treated as current for --time-range currentSession "
        "(default: the most recently recorded session)",
    )
    parser.add_argument(
        "--save-options", action="store_true", help="Persist the chosen options for next time"
    )
    parser.add_argument(
        "--settings-path", type=str, default=None, help="Sharing settings JSON file"
    )

    # ── Output and logging ───────────────────────────────────────────────────
    parser.add_argument(
        "--log-level",
        type=str,
        default=DEFAULT_LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    parser.add_argument("--log-file", type=str, default=None, help="Also log to this file")
    parser.add_argument(
        "--timeout", type=float, default=300.0, help="Seconds to wait for the export"
    )
    return parser


def file_checksum(path: Path) -> str:
    """SHA-256 hex digest of the saved export, logged so a shared copy can be verified."""
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()


def resolve_options(args: argparse.Namespace, saved: ExportOptions) -> ExportOptions:
    """Overlay CLI flags on the saved sharing options."""
    changes = {}
    if args.time_range:
        changes["time_range"] = TimeRange(args.time_range)
    if args.min_level:
        changes["min_level"] = SeverityLevel.from_name(args.min_level)
    if args.format:
        changes["format"] = ExportFormat(args.format)
    return saved.with_changes(**changes)


def main(argv=None) -> int:
    """CLI entrypoint. Returns the process exit code."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    configure_logging(log_level=args.log_level, log_file=args.log_file)
    logger = logging.getLogger("run_export")

    config = ShareConfig(log_level=args.log_level)
    if args.settings_path:
        config.settings_path = args.settings_path
    settings = SharingSettingsStore(config.resolved_settings_path)
    options = resolve_options(args, settings.load())
    if args.save_options:
        settings.save(options)

    if not args.store.exists():
        logger.error("Log store not found: %s", args.store)
        return 1

    presenter = SaveAsPresenter(args.output, overwrite=args.overwrite)
    try:
        with SQLiteLogStore(args.store, session_id=args.session_id) as store, \
                ExportCoordinator(config=config, options=options) as coordinator:
            if args.session_id is None:
                store.resume_latest_session()
            coordinator.display(store)
            if not coordinator.wait_until_idle(timeout=args.timeout):
                logger.error("Export did not finish within %.0fs", args.timeout)
                return 1

            state = coordinator.share_state
            if state.result is None:
                logger.error("Export failed: %s", state.status_text)
                return 1
            handle = state.result
            logger.info("%s", state.status_text)
            if handle.info is not None:
                logger.info(
                    "Archive holds %d messages and %d network tasks",
                    handle.info.message_count,
                    handle.info.task_count,
                )
            if not coordinator.share(presenter) or not presenter.saved_paths:
                logger.error("Artifact was not saved to %s", args.output)
                return 1
    except KeyboardInterrupt:
        logger.info("Export interrupted by user")
        return 130
    except Exception as exc:
        logger.exception("Export failed with unhandled exception: %s", exc)
        return 1

    saved = presenter.saved_paths[-1]
    logger.info("Saved %s (sha256 %s)", saved, file_checksum(saved))
    print(saved)
    return 0


if __name__ == "__main__":
    sys.exit(main())

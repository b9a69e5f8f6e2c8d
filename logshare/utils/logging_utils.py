"""Logging utilities for logshare.

Provides job-context injection and YAML-based configuration loading. All
loggers are namespaced under 'logshare'.
"""

from __future__ import annotations

import logging
import logging.config
import os
from pathlib import Path
from typing import Any, MutableMapping, Optional

import yaml


def configure_logging(
    config_path: Optional[str] = None,
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
) -> None:
    """Configure logging from the YAML configuration file.

    Falls back to basicConfig if the YAML file is not found.

    Args:
        config_path: Path to logging.yaml (defaults to config/logging.yaml).
        log_level: Override log level (e.g., "DEBUG", "INFO", "WARNING").
        log_file: Append a file handler writing to this path.
    """
    if config_path is None:
        config_path = str(Path(__file__).parent.parent.parent / "config" / "logging.yaml")

    if os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f)

        if log_file:
            handler_cfg = {"class": "logging.FileHandler", "filename": log_file, "encoding": "utf-8"}
            if cfg.get("formatters"):
                handler_cfg["formatter"] = next(iter(cfg["formatters"]))
            cfg.setdefault("handlers", {})["file"] = handler_cfg
            for logger_cfg in cfg.get("loggers", {}).values():
                logger_cfg.setdefault("handlers", []).append("file")

        if log_level and "loggers" in cfg:
            for logger_cfg in cfg["loggers"].values():
                logger_cfg["level"] = log_level.upper()
            if "root" in cfg:
                cfg["root"]["level"] = log_level.upper()

        logging.config.dictConfig(cfg)
    else:
        logging.basicConfig(
            level=getattr(logging, (log_level or "INFO").upper(), logging.INFO),
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            filename=log_file,
        )


def get_logger(name: str) -> logging.Logger:
    """Get a namespaced logger under 'logshare'.

    Args:
        name: Module or component name (e.g., "sharing.coordinator").

    Returns:
        Logger instance with full 'logshare.<name>' namespace.
    """
    if name.startswith("logshare"):
        return logging.getLogger(name)
    return logging.getLogger(f"logshare.{name}")


class JobContextAdapter(logging.LoggerAdapter):
    """Logger adapter that prefixes every message with the export job generation.

    Usage:
        logger = get_job_logger("pipeline", generation=3)
        logger.info("Encoding snapshot")
        # Output: [INFO] logshare.pipeline: [job 3] Encoding snapshot
    """

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        generation = self.extra.get("generation", "?")
        return f"[job {generation}] {msg}", kwargs


def get_job_logger(name: str, generation: int) -> JobContextAdapter:
    """Get a job-context-aware logger adapter.

    Args:
        name: Module or component name.
        generation: Export job generation token.

    Returns:
        LoggerAdapter that prefixes all messages with [job <generation>].
    """
    return JobContextAdapter(get_logger(name), {"generation": generation})

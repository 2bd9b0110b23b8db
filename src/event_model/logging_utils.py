"""Logging bootstrap utilities with optional structured output."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import structlog

PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def _best_effort_private_permissions(path: Path) -> None:
    if os.name != "posix":
        return
    try:
        path.chmod(0o600)
    except OSError:
        logging.getLogger(__name__).warning(
            "Unable to enforce 0600 permissions for %s", path
        )


def _package_only_filter(record: logging.LogRecord) -> bool:
    return record.name.startswith("event_model")


def _structured_formatter() -> logging.Formatter:
    """Route stdlib records through structlog and render them as JSON lines."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    return structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False, separators=(",", ":")),
        ],
        foreign_pre_chain=[
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.ExtraAdder(),
            structlog.processors.TimeStamper(fmt="iso", utc=True),
        ],
    )


def configure_logging(logging_config: dict[str, Any]) -> None:
    """Configure root logging according to the ``logging`` config section."""
    level_name = str(logging_config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)
    structured = bool(logging_config.get("structured", True))
    log_to_file = bool(logging_config.get("log_to_file", False))
    log_file_path = str(
        logging_config.get(
            "log_file_path", "~/.local/state/event-model/event-model.log"
        )
    )

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    formatter = (
        _structured_formatter() if structured else logging.Formatter(PLAIN_FORMAT)
    )

    # Only event_model records reach stderr, and only warnings and above.
    stderr_handler = logging.StreamHandler()
    stderr_handler.setLevel(max(level, logging.WARNING))
    stderr_handler.setFormatter(formatter)
    stderr_handler.addFilter(_package_only_filter)
    root.addHandler(stderr_handler)

    if log_to_file:
        target = Path(log_file_path).expanduser()
        target.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(target, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
        _best_effort_private_permissions(target)

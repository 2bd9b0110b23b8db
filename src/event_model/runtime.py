"""One-call setup of logging and event dispatch from the user configuration."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from .config import load_config
from .events.model import configure_events
from .logging_utils import configure_logging

LOGGER = logging.getLogger(__name__)


def bootstrap(config_path: Path | None = None) -> dict[str, dict[str, Any]]:
    """Load configuration, then configure logging and event dispatch with it."""
    config = load_config(config_path=config_path)
    configure_logging(config["logging"])
    configure_events(config["events"])
    LOGGER.info(
        "event_model.configured",
        extra={
            "event": "event_model.configured",
            "handler_errors": config["events"]["handler_errors"],
            "trace_dispatch": config["events"]["trace_dispatch"],
        },
    )
    return config

"""Tests for logging bootstrap behavior."""

from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path
import unittest

import structlog

from event_model.logging_utils import configure_logging


class ConfigureLoggingTests(unittest.TestCase):
    """Validate configure_logging() handler setup behavior."""

    def setUp(self) -> None:
        # Preserve root logger state so tests do not pollute each other.
        root = logging.getLogger()
        self._original_level = root.level
        self._original_handlers = list(root.handlers)

    def tearDown(self) -> None:
        root = logging.getLogger()
        for handler in root.handlers:
            if handler not in self._original_handlers:
                handler.close()
        root.setLevel(self._original_level)
        root.handlers.clear()
        root.handlers.extend(self._original_handlers)

    def _stream_handlers(self) -> list[logging.Handler]:
        return [
            h
            for h in logging.getLogger().handlers
            if isinstance(h, logging.StreamHandler)
            and not isinstance(h, logging.FileHandler)
        ]

    def _record(self, name: str, msg: str = "ok") -> logging.LogRecord:
        return logging.LogRecord(
            name=name,
            level=logging.WARNING,
            pathname=__file__,
            lineno=1,
            msg=msg,
            args=(),
            exc_info=None,
        )

    def test_configure_logging_adds_stderr_handler(self) -> None:
        configure_logging({"level": "DEBUG", "structured": False, "log_to_file": False})
        self.assertEqual(len(self._stream_handlers()), 1)

    def test_configure_logging_sets_root_level(self) -> None:
        configure_logging({"level": "DEBUG", "structured": False, "log_to_file": False})
        self.assertEqual(logging.getLogger().level, logging.DEBUG)

    def test_stderr_handler_shows_warnings_and_above(self) -> None:
        configure_logging({"level": "DEBUG", "structured": False, "log_to_file": False})
        self.assertEqual(self._stream_handlers()[0].level, logging.WARNING)

    def test_structured_formatter_renders_json_with_extra_fields(self) -> None:
        configure_logging({"level": "INFO", "structured": True, "log_to_file": False})
        handler = self._stream_handlers()[0]
        self.assertIsInstance(handler.formatter, structlog.stdlib.ProcessorFormatter)

        record = self._record("event_model.events.model", "event.handler.failed")
        record.event_name = "model.loaded"
        data = json.loads(handler.format(record))

        self.assertEqual(data["event"], "event.handler.failed")
        self.assertEqual(data["event_name"], "model.loaded")
        self.assertEqual(data["level"], "warning")
        self.assertEqual(data["logger"], "event_model.events.model")

    def test_plain_formatter_when_not_structured(self) -> None:
        configure_logging({"level": "INFO", "structured": False, "log_to_file": False})
        handler = self._stream_handlers()[0]
        self.assertNotIsInstance(handler.formatter, structlog.stdlib.ProcessorFormatter)
        self.assertIn("event_model.runtime", handler.format(self._record("event_model.runtime")))

    def test_file_handler_created(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            log_path = Path(tmp) / "logs" / "test.log"
            configure_logging(
                {
                    "level": "DEBUG",
                    "structured": False,
                    "log_to_file": True,
                    "log_file_path": str(log_path),
                }
            )
            file_handlers = [
                h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)
            ]
            self.assertEqual(len(file_handlers), 1)
            self.assertTrue(log_path.exists())
            for handler in file_handlers:
                handler.close()

    def test_stderr_handler_filters_to_event_model(self) -> None:
        configure_logging({"level": "DEBUG", "structured": False, "log_to_file": False})
        handler = self._stream_handlers()[0]
        self.assertTrue(handler.filter(self._record("event_model.events.model")))
        self.assertFalse(handler.filter(self._record("urllib3")))


if __name__ == "__main__":
    unittest.main()

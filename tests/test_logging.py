"""Tests for benchdiff.logging — logger setup."""

from __future__ import annotations

import logging
import sys
import tempfile
import unittest
from pathlib import Path

from benchdiff.logging import attach_log_file, get_logger, reset_logging, setup_logging


class TestSetupLogging(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)

    def tearDown(self) -> None:
        reset_logging()
        self._tmp.cleanup()

    def test_default_level_info(self) -> None:
        logger = setup_logging()
        self.assertEqual(logger.name, "benchdiff")
        self.assertEqual(len(logger.handlers), 1)
        self.assertEqual(logger.handlers[0].level, logging.INFO)

    def test_console_writes_to_stderr(self) -> None:
        """Reports go to stdout, so log records must not."""
        handler = setup_logging().handlers[0]
        assert isinstance(handler, logging.StreamHandler)
        self.assertIs(handler.stream, sys.stderr)

    def test_verbose_and_quiet(self) -> None:
        self.assertEqual(setup_logging(verbose=True).handlers[0].level, logging.DEBUG)
        self.assertEqual(setup_logging(quiet=True).handlers[0].level, logging.WARNING)
        self.assertEqual(
            setup_logging(verbose=True, quiet=True).handlers[0].level, logging.DEBUG
        )

    def test_reconfigure_replaces_handlers(self) -> None:
        setup_logging()
        logger = setup_logging()
        self.assertEqual(len(logger.handlers), 1)

    def test_reconfigure_closes_log_file(self) -> None:
        """A file handler dropped by reconfiguration releases its file."""
        logger = setup_logging(log_file=self.dir / "first.log")
        first = [h for h in logger.handlers if isinstance(h, logging.FileHandler)][0]
        setup_logging()
        self.assertIsNone(first.stream)
        self.assertNotIn(first, logger.handlers)

    def test_log_file(self) -> None:
        log_path = self.dir / "benchdiff.log"
        setup_logging(quiet=True, log_file=log_path)
        get_logger("store").debug("stored run #1")
        reset_logging()
        self.assertIn("stored run #1", log_path.read_text())


class TestAttachLogFile(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)
        setup_logging(quiet=True)

    def tearDown(self) -> None:
        reset_logging()
        self._tmp.cleanup()

    def test_creates_parent_directory(self) -> None:
        log_path = self.dir / "nested" / "logs" / "run.log"
        attach_log_file(log_path)
        get_logger("cli").info("hello")
        reset_logging()
        self.assertIn("hello", log_path.read_text())

    def test_replaces_previous_file(self) -> None:
        first = attach_log_file(self.dir / "a.log")
        second = attach_log_file(self.dir / "b.log")
        handlers = logging.getLogger("benchdiff").handlers
        self.assertNotIn(first, handlers)
        self.assertIn(second, handlers)
        self.assertIsNone(first.stream)
        # The console handler is kept.
        self.assertEqual(len(handlers), 2)

    def test_reset_logging_removes_everything(self) -> None:
        handler = attach_log_file(self.dir / "a.log")
        reset_logging()
        self.assertEqual(logging.getLogger("benchdiff").handlers, [])
        self.assertIsNone(handler.stream)


class TestGetLogger(unittest.TestCase):
    def test_namespace(self) -> None:
        self.assertEqual(get_logger("parser").name, "benchdiff.parser")


if __name__ == "__main__":
    unittest.main()

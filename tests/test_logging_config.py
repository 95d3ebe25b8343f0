import logging
import unittest
from logging.handlers import RotatingFileHandler
from unittest.mock import patch

from voice_bridge.config.logging_config import configure_logging


class TestLoggingConfig(unittest.TestCase):
    def test_configure_logging(self):
        # Test that the function returns a logger
        logger = configure_logging("INFO")
        self.assertIsInstance(logger, logging.Logger)

        # Test that the logger has the correct name
        self.assertEqual(logger.name, "voice_bridge")

        # Test that the logger has the correct level
        self.assertEqual(logger.level, logging.INFO)
        self.assertFalse(logger.propagate)

        # Test that the logger has the correct handlers and format
        self.assertGreaterEqual(len(logger.handlers), 1)  # At least one handler (console)
        handler = logger.handlers[0]  # Check first handler (should be console handler)
        self.assertIsInstance(handler, logging.StreamHandler)
        formatter = handler.formatter
        self.assertEqual(formatter._fmt, "%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    def test_level_from_environment(self):
        with patch.dict("os.environ", {"LOG_LEVEL": "debug"}):
            logger = configure_logging()
        self.assertEqual(logger.level, logging.DEBUG)

    def test_reconfiguring_does_not_duplicate_handlers(self):
        first = len(configure_logging("INFO").handlers)
        second = len(configure_logging("INFO").handlers)
        self.assertEqual(first, second)

    def test_file_handler_is_rotating(self):
        logger = configure_logging("INFO")
        file_handlers = [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]
        for handler in file_handlers:
            self.assertEqual(handler.maxBytes, 10 * 1024 * 1024)
            self.assertEqual(handler.backupCount, 5)


if __name__ == "__main__":
    unittest.main()

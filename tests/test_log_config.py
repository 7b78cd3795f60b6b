import json
import sys
import logging
import unittest

from log_config import JsonFormatter, setup_logging


class TestLogConfig(unittest.TestCase):

    def setUp(self):
        self.root = logging.getLogger()
        self._handlers = self.root.handlers[:]
        self._level = self.root.level

    def tearDown(self):
        for h in self.root.handlers[:]:
            self.root.removeHandler(h)
        for h in self._handlers:
            self.root.addHandler(h)
        self.root.setLevel(self._level)

    def test_json_formatter_fields(self):
        record = logging.LogRecord("data_ingestion.sync_all_wallets", logging.INFO, __file__, 1,
                                   "Completed sync for %d wallets", (3,), None)

        line = json.loads(JsonFormatter().format(record))

        self.assertEqual(line["level"], "INFO")
        self.assertEqual(line["message"], "Completed sync for 3 wallets")
        self.assertEqual(line["name"], "data_ingestion.sync_all_wallets")
        self.assertIn("timestamp", line)
        self.assertNotIn("exc_info", line)

    def test_json_formatter_includes_traceback(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.getLogger("worker").makeRecord(
                "worker", logging.ERROR, __file__, 1, "Job failed", (), sys.exc_info()
            )

        line = json.loads(JsonFormatter().format(record))
        self.assertIn("RuntimeError: boom", line["exc_info"])

    def test_setup_logging_replaces_handlers(self):
        setup_logging(level="debug", log_file="")
        setup_logging(level="warning", log_file="")

        self.assertEqual(len(self.root.handlers), 1)
        self.assertIsInstance(self.root.handlers[0].formatter, JsonFormatter)
        self.assertEqual(self.root.level, logging.WARNING)


if __name__ == "__main__":
    unittest.main()

# PATH: tests/unit/test_logging_contract.py
"""
Tests for logging contract enforcement.

No kwargs to logger; only extra={"context": {...}} allowed.
"""

import ast
import json
import logging
import unittest
from pathlib import Path
from typing import Any, Dict, List

from core.logging import (
    ConsoleFormatter,
    GlobalContextFilter,
    StructuredFormatter,
    clear_global_context,
    set_global_context,
)

PROJECT_ROOT = Path(__file__).parent.parent.parent


class TestLoggingContractEnforcement(unittest.TestCase):
    """AST-based tests for logging contract."""

    ALLOWED_KWARGS = {"exc_info", "extra", "stack_info", "stacklevel"}

    SCAN_PATTERNS = [
        "core/**/*.py",
        "chains/**/*.py",
        "config/**/*.py",
        "run_backend.py",
    ]

    def _find_logger_violations(self, source_code: str) -> List[Dict[str, Any]]:
        """Find logger calls with invalid kwargs using AST."""
        violations = []
        tree = ast.parse(source_code)

        for node in ast.walk(tree):
            if not isinstance(node, ast.Call) or not isinstance(node.func, ast.Attribute):
                continue

            method_name = node.func.attr
            if method_name not in ("debug", "info", "warning", "error", "critical", "exception"):
                continue

            obj = node.func.value
            if isinstance(obj, ast.Name):
                is_logger = "log" in obj.id.lower()
            elif isinstance(obj, ast.Attribute):
                is_logger = "log" in obj.attr.lower()
            else:
                is_logger = False

            if not is_logger:
                continue

            for kw in node.keywords:
                if kw.arg and kw.arg not in self.ALLOWED_KWARGS:
                    violations.append({
                        "line": node.lineno,
                        "method": method_name,
                        "invalid_kwarg": kw.arg,
                    })

        return violations

    def test_detector_flags_invalid_kwarg(self):
        """The scanner itself catches logger.info(..., txid=...)."""
        source = 'logger.info("x", txid="abc")\nlogger.info("y", extra={"context": {}})\n'
        violations = self._find_logger_violations(source)
        self.assertEqual(len(violations), 1)
        self.assertEqual(violations[0]["invalid_kwarg"], "txid")

    def test_project_has_no_invalid_kwargs(self):
        """No module passes context to a logger outside extra."""
        files = [
            path
            for pattern in self.SCAN_PATTERNS
            for path in PROJECT_ROOT.glob(pattern)
            if "__pycache__" not in str(path)
        ]
        self.assertGreater(len(files), 0, "No files scanned!")

        msg = ""
        for filepath in files:
            for v in self._find_logger_violations(filepath.read_text(encoding="utf-8")):
                msg += f"  {filepath}:{v['line']}: logger.{v['method']}(..., {v['invalid_kwarg']}=...)\n"
        if msg:
            self.fail(f"Logging violations:\n{msg}")


class TestLoggingContextCapture(unittest.TestCase):
    """Context is captured in records and rendered by the formatters."""

    def setUp(self):
        clear_global_context()
        self.captured_records = []

        class CapturingHandler(logging.Handler):
            def __init__(self, records_list):
                super().__init__()
                self.records = records_list

            def emit(self, record):
                self.records.append(record)

        self.logger = logging.getLogger(f"test_capture_{id(self)}")
        self.logger.setLevel(logging.DEBUG)
        self.logger.handlers = []
        self.handler = CapturingHandler(self.captured_records)
        self.handler.addFilter(GlobalContextFilter())
        self.logger.addHandler(self.handler)
        self.logger.propagate = False

    def tearDown(self):
        clear_global_context()

    def test_context_captured_in_record(self):
        self.logger.info(
            "Block fetched",
            extra={"context": {"hash": "abc", "height": 123}}
        )

        record = self.captured_records[0]
        self.assertEqual(record.context["hash"], "abc")
        self.assertEqual(record.context["height"], 123)

    def test_global_context_merged_under_call_context(self):
        set_global_context(service="nimbook", network="mainnet")
        self.logger.info("rpc: block chain", extra={"context": {"network": "testnet"}})

        record = self.captured_records[0]
        self.assertEqual(record.context["service"], "nimbook")
        self.assertEqual(record.context["network"], "testnet")

    def test_structured_formatter_emits_json(self):
        self.logger.error(
            "Caught error",
            extra={"context": {"operation": "get_block"}}
        )

        data = json.loads(StructuredFormatter().format(self.captured_records[0]))
        self.assertEqual(data["level"], "ERROR")
        self.assertEqual(data["message"], "Caught error")
        self.assertEqual(data["context"], {"operation": "get_block"})

    def test_console_formatter_includes_context(self):
        self.logger.info("rpc: shutdown", extra={"context": {"coin": "Nimiq"}})

        line = ConsoleFormatter().format(self.captured_records[0])
        self.assertIn("rpc: shutdown", line)
        self.assertIn("coin=Nimiq", line)


if __name__ == "__main__":
    unittest.main()

"""Test output parsing: line classification and marker name extraction."""

from wasmbrowsertest.parsing.line_classifier import LineKind, classify_line, extract_test_name  # noqa: F401

__all__ = ["LineKind", "classify_line", "extract_test_name"]

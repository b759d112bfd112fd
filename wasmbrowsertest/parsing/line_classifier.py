"""Classify ``go test -v`` output lines by their role in the test stream.

The test binary writes a flat text stream.  Test boundaries are only
recoverable from marker lines:

* ``=== RUN   TestName`` opens a (sub-)test,
* ``--- PASS: TestName (0.00s)`` / ``--- FAIL: TestName (0.00s)`` close it,
* bare summary lines (``PASS``, ``FAIL``, ``ok``, ``coverage:``, ...) belong
  to the whole binary rather than to any single test.

Sub-test names are hierarchical (``TestParent/Child``) and are compared by
exact string match.
"""

from __future__ import annotations

from enum import Enum


class LineKind(Enum):
    """Role of a single output line in the test stream."""

    GLOBAL_SUMMARY = "global_summary"
    RUN_MARKER = "run_marker"
    PASS_MARKER = "pass_marker"
    FAIL_MARKER = "fail_marker"
    OTHER = "other"


# Prefixes of process-level lines. Checked with startswith, so "PASS"
# also matches "PASS:" etc. but never the indented "--- PASS:" markers.
GLOBAL_PREFIXES = (
    "FAIL",
    "PASS",
    "coverage:",
    "pkg:",
    "ok",
    "panic:",
    "exit status",
)

PASS_MARKER = "--- PASS:"
FAIL_MARKER = "--- FAIL:"

_RUN_FIELDS = ["===", "RUN"]


def _is_run_marker(fields: list[str]) -> bool:
    return fields[:2] == _RUN_FIELDS


def classify_line(line: str) -> LineKind:
    """Classify one output line.

    Rules are checked in priority order: global summary prefixes, then
    pass markers, run markers and fail markers.  Anything else is OTHER.

    Args:
        line: A single line without its line terminator.

    Returns:
        The line's kind.
    """
    if line.startswith(GLOBAL_PREFIXES):
        return LineKind.GLOBAL_SUMMARY
    if PASS_MARKER in line:
        return LineKind.PASS_MARKER
    if _is_run_marker(line.split()):
        return LineKind.RUN_MARKER
    if FAIL_MARKER in line:
        return LineKind.FAIL_MARKER
    return LineKind.OTHER


def extract_test_name(line: str) -> str | None:
    """Return the test name carried by a RUN, PASS or FAIL marker line.

    The name is the token right after the ``RUN`` / ``PASS:`` / ``FAIL:``
    label.  Returns None for other lines, or when nothing follows the label.
    """
    kind = classify_line(line)
    if kind is LineKind.RUN_MARKER:
        return run_marker_name(line)
    if kind is LineKind.PASS_MARKER:
        return _name_after(line.split(), "PASS:")
    if kind is LineKind.FAIL_MARKER:
        return _name_after(line.split(), "FAIL:")
    return None


def _name_after(fields: list[str], label: str) -> str | None:
    for i, f in enumerate(fields):
        if f == label and i + 1 < len(fields):
            return fields[i + 1]
    return None


def run_marker_name(line: str) -> str | None:
    """Return the test name if *line* is a RUN marker, else None."""
    fields = line.split()
    if _is_run_marker(fields) and len(fields) >= 3:
        return fields[2]
    return None

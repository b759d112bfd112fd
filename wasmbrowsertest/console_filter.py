"""ConsoleFilter: quiet-mode suppression of passing-test output.

In verbose mode every line is written straight to the output sink.  In
quiet mode lines are held in a buffer and the log block of each test is
dropped as soon as that test reports ``--- PASS:``.  Whatever is still
buffered when a global summary line arrives (or when the session ends and
the caller flushes) is the context of failing or unfinished tests, and is
written out in arrival order.

Removal of a passing block has three shapes:

* **clean** - no other RUN marker between ``=== RUN T`` and
  ``--- PASS: T``: the whole block is dropped.
* **interleaved** - another test started inside the block (a sub-test or
  a parallel sibling): only the two marker lines are dropped, the other
  tests' lines stay for their own outcome to decide.
* **not found** - the RUN marker is no longer buffered (e.g. flushed by an
  earlier summary line): only the PASS marker is dropped.
"""

from __future__ import annotations

import logging
from typing import Callable

from wasmbrowsertest.log_setup import TRACE
from wasmbrowsertest.parsing.line_classifier import (
    LineKind,
    classify_line,
    extract_test_name,
    run_marker_name,
)

logger = logging.getLogger(__name__)

DEFAULT_PASS_BANNER = "✅ All tests passed!"
DEFAULT_FAIL_BANNER = "❌ WASM tests failed"


def _print_line(line: str) -> None:
    print(line)


class ConsoleFilter:
    """Buffers test output and drops the logs of passing tests in quiet mode.

    One instance belongs to one test-execution session.  Calls must come
    from a single producer in the order the output occurred; the filter
    does no locking of its own.
    """

    def __init__(
        self,
        quiet: bool,
        output: Callable[[str], None] | None = None,
        *,
        pass_banner: str = DEFAULT_PASS_BANNER,
        fail_banner: str = DEFAULT_FAIL_BANNER,
    ) -> None:
        """Create a filter.

        Args:
            quiet: Suppress passing-test output. Fixed for the filter's
                lifetime.
            output: Sink called once per emitted line. Defaults to printing
                the line to stdout.
            pass_banner: Emitted in place of a bare ``PASS`` summary line.
            fail_banner: Emitted in place of a bare ``FAIL`` summary line.
        """
        self._quiet = quiet
        self._output = output or _print_line
        self._pass_banner = pass_banner
        self._fail_banner = fail_banner
        self._buffer: list[str] = []

    @property
    def quiet(self) -> bool:
        return self._quiet

    @property
    def buffered(self) -> list[str]:
        """Snapshot of the lines currently held back, oldest first."""
        return list(self._buffer)

    def add(self, text: str) -> None:
        """Feed one chunk of output, which may span several lines.

        Empty segments, including the one after a trailing newline, are
        kept as empty lines.
        """
        for line in text.split("\n"):
            self._add_line(line)

    def flush(self) -> None:
        """Write every buffered line to the sink and empty the buffer.

        If the sink raises, the line it failed on and everything after it
        stay buffered.
        """
        if not self._buffer:
            return
        logger.debug("Flushing %d buffered lines", len(self._buffer))
        emitted = 0
        try:
            for line in self._buffer:
                self._output(line)
                emitted += 1
        finally:
            del self._buffer[:emitted]

    def _add_line(self, line: str) -> None:
        if not self._quiet:
            self._output(line)
            return

        kind = classify_line(line)
        if kind is LineKind.GLOBAL_SUMMARY:
            self.flush()
            trimmed = line.strip()
            if trimmed == "FAIL":
                self._output(self._fail_banner)
            elif trimmed == "PASS":
                self._output(self._pass_banner)
            else:
                self._output(line)
            return

        # FAIL markers are buffered like any other line so the failing
        # test keeps its logs; they go out on the next flush.
        self._buffer.append(line)
        if kind is LineKind.PASS_MARKER:
            self._remove_passing_test_logs(line)

    def _remove_passing_test_logs(self, pass_line: str) -> None:
        """Drop the block of the test whose PASS marker was just appended."""
        test_name = extract_test_name(pass_line)
        if test_name is None:
            return

        # The PASS line is the last element; the scan starts before it.
        search_start = len(self._buffer) - 2
        if search_start < 0:
            return

        found_run = -1
        interleaved = False
        for i in range(search_start, -1, -1):
            run_name = run_marker_name(self._buffer[i])
            if run_name is None:
                continue
            if run_name == test_name:
                found_run = i
                break
            interleaved = True

        if found_run == -1:
            self._buffer.pop()
            logger.log(TRACE, "PASS %s: RUN marker not buffered, dropped PASS line", test_name)
        elif not interleaved:
            removed = len(self._buffer) - found_run
            del self._buffer[found_run:]
            logger.log(TRACE, "PASS %s: dropped clean block of %d lines", test_name, removed)
        else:
            self._buffer.pop()
            del self._buffer[found_run]
            logger.log(TRACE, "PASS %s: interleaved block, dropped RUN/PASS markers only", test_name)

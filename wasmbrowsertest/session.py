"""Per-session routing of browser events into the console filter.

The browser driver (whatever speaks the DevTools protocol) reports what
the test binary does through a handful of events.  ``TestSession`` owns the
session's single :class:`ConsoleFilter` and decides, per event, what to
feed it and when buffered output must be flushed:

* console API calls carry the test binary's stdout, one argument at a time,
* an uncaught exception, a target crash or an inspector detach all end the
  useful life of the page, so the buffer is flushed before their notice
  is written.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Callable, Union

from wasmbrowsertest.config import FilterConfig
from wasmbrowsertest.console_filter import ConsoleFilter

logger = logging.getLogger(__name__)


@dataclass
class RemoteObject:
    """One console argument as reported by the browser.

    Attributes:
        value: JSON encoding of the value; strings arrive double-quoted.
        description: Human-readable rendering, used when ``value`` is empty
            (objects, errors, symbols).
    """

    value: str = ""
    description: str = ""


@dataclass
class ConsoleAPICalled:
    """``console.log`` and friends were called by the page."""

    args: list[RemoteObject] = field(default_factory=list)

    @classmethod
    def from_text(cls, text: str) -> ConsoleAPICalled:
        """Build the event a ``console.log(text)`` call would produce."""
        return cls(args=[RemoteObject(value=json.dumps(text))])


@dataclass
class ExceptionThrown:
    """An uncaught exception escaped the page's JavaScript."""

    url: str
    line_number: int
    column_number: int
    text: str
    exception_description: str | None = None


@dataclass
class TargetCrashed:
    """The browser tab running the test crashed."""

    status: str
    error_code: int


@dataclass
class InspectorDetached:
    """The DevTools connection to the page was dropped."""

    reason: str


BrowserEvent = Union[ConsoleAPICalled, ExceptionThrown, TargetCrashed, InspectorDetached]


def decode_console_value(arg: RemoteObject) -> str:
    """Render one console argument as the text the page printed.

    Strings are JSON-quoted in ``value`` and are unquoted here.  Anything
    that does not decode to valid text (numbers, booleans, descriptions,
    strings holding lone surrogates) is returned as-is.
    """
    line = arg.value or arg.description
    try:
        decoded = json.loads(line)
    except (json.JSONDecodeError, TypeError):
        return line
    if not isinstance(decoded, str):
        return line
    try:
        decoded.encode("utf-8")
    except UnicodeEncodeError:
        return line
    return decoded


class TestSession:
    """Routes the events of one test run into one console filter.

    Args:
        quiet: Suppress passing-test output.
        output: Line sink shared by the filter and the session's own
            notices. Defaults to printing to stdout.
        cancel: Called after a crash or inspector detach to stop the
            browser run. Errors it raises are logged, not propagated.
        config: Banner overrides; ``quiet`` above takes precedence over
            ``config.quiet``.
    """

    __test__ = False

    def __init__(
        self,
        quiet: bool,
        output: Callable[[str], None] | None = None,
        cancel: Callable[[], None] | None = None,
        config: FilterConfig | None = None,
    ) -> None:
        config = config or FilterConfig()
        self._output = output or print
        self._cancel = cancel
        self._filter = ConsoleFilter(
            quiet,
            self._output,
            pass_banner=config.pass_banner,
            fail_banner=config.fail_banner,
        )
        self._closed = False

    @property
    def filter(self) -> ConsoleFilter:
        return self._filter

    @property
    def closed(self) -> bool:
        return self._closed

    def handle_event(self, event: BrowserEvent) -> None:
        """Apply one browser event, in the order the browser reported it."""
        if isinstance(event, ConsoleAPICalled):
            for arg in event.args:
                self._filter.add(decode_console_value(arg))
        elif isinstance(event, ExceptionThrown):
            self._filter.flush()
            self._output(
                f"{event.url}:{event.line_number}:{event.column_number} {event.text}"
            )
            if event.exception_description is not None:
                self._output(event.exception_description)
        elif isinstance(event, TargetCrashed):
            self._filter.flush()
            self._output(
                f"target crashed: status: {event.status}, error code:{event.error_code}"
            )
            self._request_cancel()
        elif isinstance(event, InspectorDetached):
            self._filter.flush()
            self._output(f"inspector detached: {event.reason}")
            self._request_cancel()
        else:
            logger.debug("Ignoring unhandled event %s", type(event).__name__)

    def close(self) -> None:
        """Final flush at the end of the session. Safe to call repeatedly."""
        self._filter.flush()
        if not self._closed:
            logger.debug("Session closed (quiet=%s)", self._filter.quiet)
        self._closed = True

    def _request_cancel(self) -> None:
        if self._cancel is None:
            return
        try:
            self._cancel()
        except Exception as exc:
            logger.warning("error in cancelling context: %s", exc)

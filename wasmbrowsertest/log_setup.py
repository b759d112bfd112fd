from __future__ import annotations

import logging
import os
from datetime import datetime

TRACE = 5
TRACE_DIR = "debug"
LOGGER_NAME = "wasmbrowsertest"

logging.addLevelName(TRACE, "TRACE")


def _trace(self, message, *args, **kwargs):
    if self.isEnabledFor(TRACE):
        self._log(TRACE, message, args, **kwargs)


logging.Logger.trace = _trace

_CONSOLE_FMT = "[wasmbrowsertest]: %(levelname)s %(name)s: %(message)s"
_FILE_FMT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s:%(funcName)s:%(lineno)d %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    *, debug: bool, trace: bool, verbose: bool
) -> logging.Logger:
    """Configure the ``wasmbrowsertest`` logger tree.

    Diagnostics go to stderr so they never mix with the filtered test
    output on stdout.  With *trace*, every TRACE record (including each
    removed passing-test block) is also written to ``debug/trace-*.log``.
    """
    root = logging.getLogger(LOGGER_NAME)
    for handler in root.handlers:
        handler.close()
    root.handlers.clear()
    root.setLevel(TRACE)

    # Console handler
    console = logging.StreamHandler()
    if trace and verbose:
        console.setLevel(TRACE)
    elif debug or trace:
        console.setLevel(logging.DEBUG)
    else:
        console.setLevel(logging.INFO)
    console.setFormatter(logging.Formatter(_CONSOLE_FMT))
    root.addHandler(console)

    # File handler (trace only)
    if trace:
        os.makedirs(TRACE_DIR, exist_ok=True)
        timestamp = datetime.now().strftime("%Y-%m-%dT%H-%M-%S")
        filepath = os.path.join(TRACE_DIR, f"trace-{timestamp}.log")
        fh = logging.FileHandler(filepath)
        fh.setLevel(TRACE)
        fh.setFormatter(logging.Formatter(_FILE_FMT, datefmt=_FILE_DATEFMT))
        root.addHandler(fh)

    return root

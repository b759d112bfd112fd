from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import TextIO

from wasmbrowsertest.config import ConfigError, load_config
from wasmbrowsertest.event_pump import EventPump
from wasmbrowsertest.log_setup import setup_logging
from wasmbrowsertest.session import ConsoleAPICalled, TestSession

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_USAGE = 2


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Filter go test -v output, hiding the logs of passing tests"
    )
    parser.add_argument("input", nargs="?", default="-",
                        help="Test output file to read (default: - for stdin)")
    parser.add_argument("--quiet", action="store_true",
                        help="Disable printing of passing test logs")
    parser.add_argument("--config", default=None,
                        help="Path to YAML config file")
    parser.add_argument("--debug", action="store_true",
                        help="Enable debug mode (verbose logging)")
    parser.add_argument("--trace", action="store_true",
                        help="Enable trace mode (writes trace file to debug/)")
    parser.add_argument("--verbose", action="store_true",
                        help="With --trace, also send trace output to terminal")
    return parser.parse_args(argv)


async def filter_stream(stream: TextIO, session: TestSession) -> None:
    """Feed every line of *stream* through *session*, then close it.

    Lines are read on a worker thread and handed to an :class:`EventPump`
    as console events, so the session sees exactly what the browser would
    have reported for a test binary printing the same text.
    """
    pump = EventPump(session)
    pump.start()
    loop = asyncio.get_running_loop()
    count = 0
    try:
        while True:
            line = await loop.run_in_executor(None, stream.readline)
            if not line:
                break
            pump.submit(ConsoleAPICalled.from_text(line.rstrip("\r\n")))
            count += 1
    finally:
        await pump.close()
    logger.debug("Filtered %d input lines", count)


def _stdin_text() -> TextIO:
    """Return stdin decoded as UTF-8, replacing undecodable bytes."""
    stream = sys.stdin
    if hasattr(stream, "reconfigure"):
        stream.reconfigure(encoding="utf-8", errors="replace")
    return stream


async def main(argv: list[str] | None = None) -> int:
    """Entry point: filter one test run's output to stdout."""
    args = _parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        setup_logging(debug=args.debug, trace=args.trace, verbose=args.verbose)
        logger.error("%s", exc)
        return EXIT_USAGE

    if args.debug:
        config.debug.enabled = True
    if args.trace:
        config.debug.trace = True
    if args.verbose:
        config.debug.verbose = True
    setup_logging(
        debug=config.debug.enabled,
        trace=config.debug.trace,
        verbose=config.debug.verbose,
    )

    quiet = args.quiet or config.filter.quiet
    session = TestSession(quiet, config=config.filter)
    logger.debug("Filtering %s (quiet=%s)", args.input, quiet)

    try:
        if args.input == "-":
            await filter_stream(_stdin_text(), session)
        else:
            with open(args.input, encoding="utf-8", errors="replace") as f:
                await filter_stream(f, session)
    except OSError as exc:
        logger.error("Cannot read %s: %s", args.input, exc)
        session.close()
        return EXIT_USAGE
    return EXIT_OK


def cli() -> int:
    """Console-script wrapper around :func:`main`."""
    return asyncio.run(main())


if __name__ == "__main__":
    sys.exit(cli())

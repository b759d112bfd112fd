#!/usr/bin/env python3
"""Filter go test -v output, hiding the logs of passing tests.

Usage:
    python run.py [output.txt] [--quiet] [--config config.yaml] [--debug] [--trace] [--verbose]
    go test -v ./... 2>&1 | python run.py --quiet
"""
import asyncio
import sys

from wasmbrowsertest.main import main

if __name__ == "__main__":
    sys.exit(asyncio.run(main()))

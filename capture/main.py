#!/usr/bin/env python3
"""
CLI entrypoint: capture every HTML page of a directory on every device.

Usage: capture-pages <target-directory> [--device NAME ...] [--concurrency N]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from dotenv import load_dotenv
from playwright.async_api import Error as PlaywrightError

from capture.directories import InvalidTargetDirectoryError
from capture.orchestrator import run_capture
from capture.server import PortExhaustedError
from shared.config import get_config
from shared.logging import configure_logging, get_logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="capture-pages",
        description="Screenshot every HTML page under a directory for a set of devices.",
    )
    parser.add_argument("target_dir", help="Directory of static HTML pages to capture")
    parser.add_argument(
        "--device",
        dest="devices",
        action="append",
        help="Device name to capture (repeatable). Defaults to the built-in device list.",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        help="Max pages open at once per device.",
    )
    parser.add_argument(
        "--output-dir",
        help="Screenshot directory (default: ./verification).",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the capture; returns the process exit code."""
    load_dotenv()
    args = build_parser().parse_args(argv)

    try:
        config = get_config()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.concurrency is not None and args.concurrency < 1:
        print("Error: --concurrency must be at least 1", file=sys.stderr)
        return 1

    config = config.with_overrides(
        concurrency_limit=args.concurrency,
        output_dir=args.output_dir,
        devices=tuple(args.devices) if args.devices else None,
    )

    log_level = logging.getLevelName(config.log_level.upper())
    configure_logging(
        level=log_level,
        log_file=config.log_file,
        log_stdout=config.log_stdout,
        log_format=config.log_format,
    )
    logger = get_logger(__name__)

    try:
        summary = asyncio.run(run_capture(args.target_dir, config=config))
    except (InvalidTargetDirectoryError, PortExhaustedError, PlaywrightError, OSError, ValueError) as e:
        # Startup failures surface before any page is captured.
        logger.error("run.failed", error=str(e), error_type=type(e).__name__)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(
        f"All done! {summary.captured} screenshot(s) saved, {summary.failed} failed "
        f"across {len(summary.devices_processed)} device(s)."
    )
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()

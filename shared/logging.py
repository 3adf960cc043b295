"""
Structured logging setup for the page capture tool.

All runtime logging goes through structlog. Logs are JSON lines by default
and readable console lines when LOG_FORMAT=console. Each line carries an ISO
timestamp, the level and the fields (run_id, device, page) bound via
contextvars, so concurrent capture workers keep their own context.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, Mapping, Optional

import structlog


def _build_shared_processors(
    log_format: str = "json",
    colors: bool = False,
) -> list[structlog.types.Processor]:
    timestamper = structlog.processors.TimeStamper(fmt="iso", utc=True)

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        timestamper,
    ]
    if log_format == "console":
        # ConsoleRenderer formats exc_info itself and expects the "event" key.
        processors.append(structlog.dev.ConsoleRenderer(colors=colors))
        return processors

    processors.extend(
        [
            structlog.processors.EventRenamer("message"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    )
    return processors


def _attach(root: logging.Logger, handler: logging.Handler, level: int) -> None:
    # structlog renders the full line; stdlib only passes it through.
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(handler)


def configure_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    log_stdout: bool = True,
    log_format: str = "json",
) -> None:
    """
    Configure structlog and the standard logging module.

    Call once at process startup.

    - When log_stdout is True (default), a StreamHandler(sys.stdout) is added.
    - When log_file is set, a FileHandler is added (parent dir created if needed).
    - At least one handler is always added: if both log_stdout=False and log_file
      is unset, stdout is used as fallback so the process never has zero handlers.
    - log_format "console" renders readable key=value lines for interactive runs;
      colors are used only when stdout is a terminal and no log file is written.
    """

    root = logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers:
        handler.close()
    root.handlers.clear()

    if log_stdout:
        _attach(root, logging.StreamHandler(sys.stdout), level)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        _attach(root, logging.FileHandler(log_file, encoding="utf-8"), level)

    if not root.handlers:
        _attach(root, logging.StreamHandler(sys.stdout), level)

    structlog.configure(
        processors=_build_shared_processors(
            log_format=log_format,
            colors=log_format == "console" and not log_file and sys.stdout.isatty(),
        ),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None) -> structlog.BoundLogger:
    """
    Obtain a structured logger.

    Usage:
        from shared.logging import get_logger, bind_request_context

        logger = get_logger(__name__)
        bind_request_context(device="iPhone 16", page="index.html")
        logger.info("capture.saved")
    """

    # If configure_logging() has not been called yet, fall back to a
    # minimal configuration to avoid silent failures.
    if not structlog.is_configured():
        configure_logging()

    return structlog.get_logger(name) if name else structlog.get_logger()


def bind_request_context(
    *,
    run_id: Optional[str] = None,
    device: Optional[str] = None,
    page: Optional[str] = None,
    **extra: Any,
) -> Mapping[str, Any]:
    """
    Bind common context fields for capture logging.

    Keys with None values are dropped. Bindings live in contextvars, so a
    value bound inside an asyncio task stays local to that task.
    """

    context: dict[str, Any] = {
        "run_id": run_id,
        "device": device,
        "page": page,
        **extra,
    }

    filtered_context = {k: v for k, v in context.items() if v is not None}

    structlog.contextvars.bind_contextvars(**filtered_context)
    return filtered_context

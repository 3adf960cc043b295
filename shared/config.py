"""
Environment-based configuration for the page capture tool.

This module exposes a small, typed configuration surface shared by the
CLI, the orchestrator and the capture workers. All values are sourced from
environment variables with sensible defaults; CLI flags are layered on top
with `AppConfig.with_overrides`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Any, Literal, Optional

Environment = Literal["local", "dev", "ci", "prod"]
LogFormat = Literal["json", "console"]

# Default device list; order is the processing order.
TARGET_DEVICES: tuple[str, ...] = (
    "Desktop Chrome",
    "iPhone 12",
    "iPhone 12 Pro",
    "iPhone 12 Pro Max",
    "iPhone 13",
    "iPhone 13 Pro",
    "iPhone 13 Pro Max",
    "iPhone 14",
    "iPhone 14 Pro",
    "iPhone 14 Pro Max",
    # iPhone 15/16 family
    "iPhone 15",
    "iPhone 15 Pro",
    "iPhone 15 Pro Max",
    "iPhone 16",
    "iPhone 16 Pro",
    "iPhone 16 Pro Max",
)


@dataclass(frozen=True)
class AppConfig:
    """
    Top-level application configuration.

    Timeouts are in milliseconds. The port range is inclusive on both ends.
    """

    environment: Environment
    log_level: str

    # Optional file path for structured JSON logs; when set, logs are written
    # to file (and stdout if log_stdout).
    log_file: Optional[str]
    # When True, logs go to stdout. When False, only file (if LOG_FILE set). Default True.
    log_stdout: bool
    # "json" (default) or "console" for human-readable interactive runs.
    log_format: LogFormat

    # Screenshots land under <cwd>/<output_dir> unless output_dir is absolute.
    output_dir: str
    concurrency_limit: int

    # Ephemeral static server
    server_host: str
    port_range_min: int
    port_range_max: int
    port_max_attempts: int

    # Browser
    nav_timeout_ms: int
    idle_timeout_ms: int
    headless: bool
    devices: tuple[str, ...]

    @classmethod
    def from_env(cls) -> "AppConfig":
        """
        Construct configuration from environment variables.

        All fields have defaults suitable for local runs.
        """

        environment = os.getenv("APP_ENV", "local")

        if environment not in {"local", "dev", "ci", "prod"}:
            raise ValueError(f"Unsupported APP_ENV value: {environment!r}")

        def _bool_env(name: str, default: bool) -> bool:
            raw = (os.getenv(name) or str(default)).strip().lower()
            return raw in ("true", "1", "yes")

        log_format = os.getenv("LOG_FORMAT", "json").strip().lower()
        if log_format not in {"json", "console"}:
            raise ValueError(f"Unsupported LOG_FORMAT value: {log_format!r}")

        port_min = int(os.getenv("CAPTURE_PORT_MIN", "3000"))
        port_max = int(os.getenv("CAPTURE_PORT_MAX", "4000"))
        if not 1 <= port_min <= port_max <= 65535:
            raise ValueError(
                f"Invalid CAPTURE_PORT_MIN/CAPTURE_PORT_MAX range: {port_min}-{port_max}"
            )

        port_attempts = int(os.getenv("CAPTURE_PORT_ATTEMPTS", "10"))
        if port_attempts < 1:
            raise ValueError(f"CAPTURE_PORT_ATTEMPTS must be >= 1, got {port_attempts}")

        def _devices() -> tuple[str, ...]:
            raw = os.getenv("CAPTURE_DEVICES", "").strip()
            if not raw:
                return TARGET_DEVICES
            names = tuple(name.strip() for name in raw.split(",") if name.strip())
            return names or TARGET_DEVICES

        return cls(
            environment=environment,  # type: ignore[arg-type]
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=os.getenv("LOG_FILE") or None,
            log_stdout=_bool_env("LOG_STDOUT", True),
            log_format=log_format,  # type: ignore[arg-type]
            output_dir=os.getenv("CAPTURE_OUTPUT_DIR", "verification"),
            concurrency_limit=max(1, int(os.getenv("CAPTURE_CONCURRENCY", "5"))),
            server_host=os.getenv("CAPTURE_SERVER_HOST", "127.0.0.1"),
            port_range_min=port_min,
            port_range_max=port_max,
            port_max_attempts=port_attempts,
            nav_timeout_ms=int(os.getenv("CAPTURE_NAV_TIMEOUT_MS", "30000")),
            idle_timeout_ms=int(os.getenv("CAPTURE_IDLE_TIMEOUT_MS", "30000")),
            headless=_bool_env("CAPTURE_HEADLESS", True),
            devices=_devices(),
        )

    def with_overrides(self, **overrides: Any) -> "AppConfig":
        """Return a copy with the given fields replaced; None values are ignored."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self


def get_config() -> AppConfig:
    """
    Helper to obtain the current configuration.

    Long-lived callers should build one `AppConfig` at startup and pass it
    explicitly through the run.
    """

    return AppConfig.from_env()

"""
Multi-device screenshot capture for directories of static HTML pages.

Public API: re-exports the pieces used by the CLI and tests so that
`from capture import ...` stays valid if modules move.
"""

from __future__ import annotations

from capture.devices import DeviceProfile, profile_for_device, resolve_device_profile
from capture.directories import (
    DirectoryCreationCache,
    InvalidTargetDirectoryError,
    TargetDirectoryNotFoundError,
    TargetNotADirectoryError,
    validate_target_directory,
)
from capture.orchestrator import chromium_launcher, run_capture
from capture.pages import (
    UnsafePagePathError,
    build_page_url,
    discover_html_pages,
    validate_page_path,
)
from capture.run import CaptureRun, PoolSummary, RunState, RunSummary
from capture.server import EphemeralServer, PortExhaustedError, bind_random_port
from capture.storage import build_screenshot_path, sanitize_device_name
from capture.worker_pool import capture_page, run_capture_pool

__all__ = [
    # devices
    "DeviceProfile",
    "resolve_device_profile",
    "profile_for_device",
    # directories
    "DirectoryCreationCache",
    "InvalidTargetDirectoryError",
    "TargetDirectoryNotFoundError",
    "TargetNotADirectoryError",
    "validate_target_directory",
    # pages
    "UnsafePagePathError",
    "build_page_url",
    "discover_html_pages",
    "validate_page_path",
    # storage
    "build_screenshot_path",
    "sanitize_device_name",
    # server
    "EphemeralServer",
    "PortExhaustedError",
    "bind_random_port",
    # run
    "CaptureRun",
    "PoolSummary",
    "RunState",
    "RunSummary",
    "capture_page",
    "run_capture_pool",
    "run_capture",
    "chromium_launcher",
]

"""
Capture orchestrator: validate, serve, discover, then capture device by device.

Devices are processed strictly one after another, each in its own browsing
context; parallelism only exists across the pages of one device. The server
and browser live for the whole run and are released on every exit path.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncContextManager, AsyncIterator, Callable, Mapping, Optional, Sequence, Tuple

from playwright.async_api import Browser, async_playwright

from capture.devices import profile_for_device
from capture.directories import PathLike, validate_target_directory
from capture.pages import discover_html_pages
from capture.run import CaptureRun, RunState, RunSummary
from capture.server import EphemeralServer
from capture.worker_pool import run_capture_pool
from shared.config import AppConfig
from shared.logging import bind_request_context, get_logger

logger = get_logger(__name__)

Presets = Mapping[str, Mapping[str, Any]]
BrowserLauncher = Callable[[], AsyncContextManager[Tuple[Browser, Presets]]]


def chromium_launcher(headless: bool = True) -> BrowserLauncher:
    """Launcher for a local Chromium that also exposes Playwright's device presets."""

    @asynccontextmanager
    async def launch() -> AsyncIterator[Tuple[Browser, Presets]]:
        async with async_playwright() as p:
            browser = await p.chromium.launch(headless=headless)
            try:
                yield browser, p.devices
            finally:
                try:
                    await browser.close()
                except Exception as e:
                    logger.warning(
                        "browser.close_failed",
                        error=str(e),
                        error_type=type(e).__name__,
                    )

    return launch


def resolve_output_root(output_dir: str) -> Path:
    """Output directory as an absolute path; relative values hang off the working directory."""
    path = Path(output_dir)
    return path if path.is_absolute() else Path.cwd() / path


async def _capture_device(
    browser: Browser,
    presets: Presets,
    device_name: str,
    pages: Sequence[str],
    run: CaptureRun,
    summary: RunSummary,
) -> None:
    profile = profile_for_device(device_name, presets)
    if profile is None:
        logger.warning("device.not_found", device=device_name)
        summary.devices_skipped.append(device_name)
        return

    logger.info("device.started", device=device_name, profile=profile.label)

    try:
        context = await browser.new_context(**profile.to_context_options())
    except Exception as e:
        logger.error(
            "device.failed",
            device=device_name,
            error=str(e),
            error_type=type(e).__name__,
        )
        summary.devices_failed.append(device_name)
        return

    run.transition(RunState.CONTEXT_OPEN, device=device_name)
    try:
        run.transition(RunState.DRAINING, device=device_name)
        pool = await run_capture_pool(context, pages, device_name, run)
        summary.add(pool)
        summary.devices_processed.append(device_name)
    finally:
        try:
            await context.close()
        except Exception as e:
            logger.warning(
                "context.close_failed",
                device=device_name,
                error=str(e),
                error_type=type(e).__name__,
            )
        run.transition(RunState.CONTEXT_CLOSED, device=device_name)


async def run_capture(
    target_dir: PathLike,
    *,
    config: AppConfig,
    device_names: Optional[Sequence[str]] = None,
    browser_launcher: Optional[BrowserLauncher] = None,
) -> RunSummary:
    """
    Capture every HTML page under target_dir for every device.

    Raises InvalidTargetDirectoryError or PortExhaustedError before any
    capture starts. Per-device and per-page failures are logged and counted
    in the returned summary.
    """
    devices = list(device_names if device_names is not None else config.devices)
    launcher = browser_launcher or chromium_launcher(headless=config.headless)
    run = CaptureRun(config=config, output_root=resolve_output_root(config.output_dir))
    summary = RunSummary()
    bind_request_context(run_id=run.run_id)

    run.transition(RunState.VALIDATING)
    try:
        root = validate_target_directory(target_dir)
    except Exception:
        run.transition(RunState.FAILED)
        raise
    logger.info("run.target", target_dir=str(root), output_root=str(run.output_root))

    run.transition(RunState.SERVER_STARTING)
    server = EphemeralServer(
        root,
        host=config.server_host,
        port_min=config.port_range_min,
        port_max=config.port_range_max,
        max_attempts=config.port_max_attempts,
    )
    try:
        await server.start()
    except Exception:
        run.transition(RunState.FAILED)
        raise
    run.base_url = server.base_url

    try:
        run.transition(RunState.DISCOVERING)
        pages = discover_html_pages(root)
        summary.pages_found = len(pages)
        if not pages:
            logger.info("discovery.empty", target_dir=str(root))
        else:
            logger.info("discovery.completed", pages=len(pages), devices=len(devices))
            async with launcher() as (browser, presets):
                for device_name in devices:
                    await _capture_device(browser, presets, device_name, pages, run, summary)
    finally:
        try:
            await server.stop()
        except Exception as e:
            logger.warning(
                "server.stop_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
        run.transition(RunState.SERVER_STOPPED)

    run.transition(RunState.DONE)
    logger.info(
        "run.completed",
        pages_found=summary.pages_found,
        devices_processed=len(summary.devices_processed),
        devices_skipped=summary.devices_skipped,
        devices_failed=summary.devices_failed,
        captured=summary.captured,
        failed=summary.failed,
    )
    return summary

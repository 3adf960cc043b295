"""
Capture worker pool: one browsing context, many pages, bounded concurrency.

Workers race for pages on a shared queue. A failed page is logged and
skipped; it never stops the other workers or the run.
"""

from __future__ import annotations

import asyncio
from typing import Optional, Sequence

from playwright.async_api import BrowserContext, Page

from capture.pages import build_page_url, validate_page_path
from capture.run import CaptureRun, PoolSummary
from capture.storage import build_screenshot_path, relative_to_cwd, write_screenshot
from shared.logging import bind_request_context, get_logger

logger = get_logger(__name__)


async def capture_page(
    context: BrowserContext,
    page_path: str,
    device_name: str,
    run: CaptureRun,
) -> bool:
    """
    Capture one full-page screenshot of page_path.

    Returns True when the screenshot was written. Errors are logged with the
    device and page and reported as False.
    """
    bind_request_context(device=device_name, page=page_path)

    page: Optional[Page] = None
    try:
        safe_path = validate_page_path(page_path)
        url = build_page_url(run.base_url, safe_path)
        output_path = build_screenshot_path(run.output_root, safe_path, device_name)

        await run.directories.ensure(output_path.parent)

        page = await context.new_page()
        await page.goto(
            url,
            wait_until="domcontentloaded",
            timeout=run.config.nav_timeout_ms,
        )
        await page.wait_for_load_state("networkidle", timeout=run.config.idle_timeout_ms)

        screenshot_bytes = await page.screenshot(type="png", full_page=True)
        size, checksum = await write_screenshot(output_path, screenshot_bytes)

        logger.info(
            "capture.saved",
            url=url,
            output=relative_to_cwd(output_path),
            size_bytes=size,
            checksum=checksum,
        )
        return True

    except Exception as e:
        logger.error(
            "capture.failed",
            error=str(e),
            error_type=type(e).__name__,
        )
        return False

    finally:
        if page is not None:
            try:
                await page.close()
            except Exception as e:
                logger.warning(
                    "page.close_failed",
                    error=str(e),
                    error_type=type(e).__name__,
                )


async def _worker(
    worker_id: int,
    queue: "asyncio.Queue[str]",
    context: BrowserContext,
    device_name: str,
    run: CaptureRun,
    summary: PoolSummary,
) -> None:
    bind_request_context(worker=worker_id)
    while True:
        try:
            page_path = queue.get_nowait()
        except asyncio.QueueEmpty:
            return
        if await capture_page(context, page_path, device_name, run):
            summary.captured += 1
        else:
            summary.failed += 1


async def run_capture_pool(
    context: BrowserContext,
    pages: Sequence[str],
    device_name: str,
    run: CaptureRun,
) -> PoolSummary:
    """Capture every page in pages with up to concurrency_limit workers."""
    summary = PoolSummary()
    if not pages:
        return summary

    queue: asyncio.Queue[str] = asyncio.Queue()
    for page_path in pages:
        queue.put_nowait(page_path)

    worker_count = min(run.config.concurrency_limit, len(pages))
    logger.info(
        "pool.started",
        device=device_name,
        pages=len(pages),
        workers=worker_count,
    )

    # Each worker runs in its own task, so its bound log context stays local.
    await asyncio.gather(
        *(
            _worker(i, queue, context, device_name, run, summary)
            for i in range(worker_count)
        )
    )

    logger.info(
        "pool.completed",
        device=device_name,
        captured=summary.captured,
        failed=summary.failed,
    )
    return summary

"""
Shared fixtures for capture tests: config factory and an in-memory browser.

The fake browser mirrors the slice of Playwright's async API the capture
code uses (new_context / new_page / goto / wait_for_load_state /
screenshot / close). No real browser or network is required unless a test
asks the fake page to fetch URLs from the live static server.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Callable, Optional

import httpx
import pytest

from capture.run import CaptureRun
from shared.config import AppConfig

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def _config(**overrides: Any) -> AppConfig:
    base = AppConfig(
        environment="local",
        log_level="INFO",
        log_file=None,
        log_stdout=True,
        log_format="json",
        output_dir="verification",
        concurrency_limit=5,
        server_host="127.0.0.1",
        port_range_min=3000,
        port_range_max=4000,
        port_max_attempts=10,
        nav_timeout_ms=30000,
        idle_timeout_ms=30000,
        headless=True,
        devices=("Desktop Chrome", "iPhone 16"),
    )
    return base.with_overrides(**overrides)


@pytest.fixture
def make_config() -> Callable[..., AppConfig]:
    return _config


@pytest.fixture
def make_run(tmp_path: Path) -> Callable[..., CaptureRun]:
    def _make(base_url: str = "http://127.0.0.1:3123", **overrides: Any) -> CaptureRun:
        return CaptureRun(
            config=_config(**overrides),
            output_root=tmp_path / "verification",
            base_url=base_url,
        )

    return _make


class FakePage:
    def __init__(self, context: "FakeContext") -> None:
        self.context = context
        self.closed = False
        self.url: Optional[str] = None

    async def goto(self, url: str, wait_until: Optional[str] = None, timeout: Optional[float] = None):
        self.url = url
        self.context.visited.append(url)
        # Yield so workers interleave the way they would on real navigation.
        await asyncio.sleep(0)
        if self.context.goto_error is not None:
            raise self.context.goto_error
        if self.context.fetch:
            async with httpx.AsyncClient() as client:
                response = await client.get(url)
            self.context.statuses[url] = response.status_code
            if response.status_code != 200:
                raise RuntimeError(f"HTTP {response.status_code} for {url}")
        return None

    async def wait_for_load_state(self, state: str = "load", timeout: Optional[float] = None) -> None:
        await asyncio.sleep(0)

    async def screenshot(self, type: str = "png", full_page: bool = False) -> bytes:
        if not full_page:
            raise AssertionError("expected a full-page screenshot")
        if self.context.screenshot_error is not None:
            raise self.context.screenshot_error
        return PNG_BYTES

    async def close(self) -> None:
        self.closed = True
        self.context.open_pages -= 1


class FakeContext:
    def __init__(self, browser: "FakeBrowser", options: dict) -> None:
        self.browser = browser
        self.options = options
        self.pages: list[FakePage] = []
        self.visited: list[str] = []
        self.statuses: dict[str, int] = {}
        self.closed = False
        self.open_pages = 0
        self.max_open_pages = 0
        self.fetch = browser.fetch
        self.goto_error: Optional[BaseException] = None
        self.screenshot_error: Optional[BaseException] = None

    async def new_page(self) -> FakePage:
        page = FakePage(self)
        self.pages.append(page)
        self.open_pages += 1
        self.max_open_pages = max(self.max_open_pages, self.open_pages)
        return page

    async def close(self) -> None:
        self.closed = True
        self.browser.open_contexts -= 1


class FakeBrowser:
    def __init__(self, fetch: bool = False) -> None:
        self.fetch = fetch
        self.contexts: list[FakeContext] = []
        self.open_contexts = 0
        self.max_open_contexts = 0
        self.closed = False
        # new_context raises for this many calls before succeeding again
        self.failing_contexts = 0

    async def new_context(self, **options: Any) -> FakeContext:
        if self.failing_contexts > 0:
            self.failing_contexts -= 1
            raise RuntimeError("context launch failed")
        context = FakeContext(self, options)
        self.contexts.append(context)
        self.open_contexts += 1
        self.max_open_contexts = max(self.max_open_contexts, self.open_contexts)
        return context

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_browser() -> FakeBrowser:
    return FakeBrowser()


@pytest.fixture
def make_browser() -> type[FakeBrowser]:
    return FakeBrowser


@pytest.fixture
def fake_context(fake_browser: FakeBrowser) -> FakeContext:
    return FakeContext(fake_browser, {})


@pytest.fixture
def fake_launcher():
    """Build a launcher that yields the given browser and preset table."""

    def _make(browser: FakeBrowser, presets: Optional[dict] = None):
        @asynccontextmanager
        async def launch():
            try:
                yield browser, presets or {}
            finally:
                await browser.close()

        return launch

    return _make


@pytest.fixture
def site(tmp_path: Path) -> Path:
    """Content root with index.html and sub/page.html."""
    root = tmp_path / "site"
    (root / "sub").mkdir(parents=True)
    (root / "index.html").write_text("<html><body><h1>Home</h1></body></html>", encoding="utf-8")
    (root / "sub" / "page.html").write_text("<html><body><p>Sub</p></body></html>", encoding="utf-8")
    return root

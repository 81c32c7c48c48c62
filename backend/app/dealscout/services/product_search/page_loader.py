"""Page loaders turning a search URL into raw HTML."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional
from urllib.parse import urlparse

import requests
from playwright.async_api import Browser, BrowserContext, Playwright, async_playwright
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from dealscout.configs import Settings

from .errors import ExtractionFailure
from .utils import DEFAULT_HEADERS

logger = logging.getLogger("product_search.page_loader")

LAUNCH_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--window-size=1920,1080",
]


class PageLoader(ABC):
    """Async context manager loading pages of one extraction call."""

    async def __aenter__(self) -> "PageLoader":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Release any resource held by the loader."""

    @abstractmethod
    async def load(self, url: str, wait_selector: Optional[str] = None) -> str:
        """Return the HTML of ``url`` once it is usable."""
        raise NotImplementedError


class BrowserPageLoader(PageLoader):
    """Load pages in headless Chromium, one tab per call, one shared context."""

    def __init__(
        self,
        headless: bool = True,
        page_timeout: float = 60,
        selector_timeout: float = 10,
        settle_delay: float = 3,
    ) -> None:
        self.headless = headless
        self.page_timeout_ms = page_timeout * 1000
        self.selector_timeout_ms = selector_timeout * 1000
        self.settle_delay_ms = settle_delay * 1000
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None

    async def __aenter__(self) -> "BrowserPageLoader":
        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(
                headless=self.headless, args=LAUNCH_ARGS
            )
            self._context = await self._browser.new_context(
                user_agent=DEFAULT_HEADERS["User-Agent"],
                viewport={"width": 1920, "height": 1080},
                extra_http_headers={
                    "Accept": DEFAULT_HEADERS["Accept"],
                    "Accept-Language": DEFAULT_HEADERS["Accept-Language"],
                    "upgrade-insecure-requests": "1",
                },
            )
        except BaseException:
            await self.close()
            raise
        return self

    async def close(self) -> None:
        if self._context is not None:
            await self._context.close()
            self._context = None
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    async def load(self, url: str, wait_selector: Optional[str] = None) -> str:
        if self._context is None:
            raise RuntimeError("BrowserPageLoader used outside 'async with'.")

        page = await self._context.new_page()
        try:
            response = await page.goto(
                url, wait_until="domcontentloaded", timeout=self.page_timeout_ms
            )
            logger.info(
                "Loaded %s: %s (status %s)",
                url,
                await page.title(),
                response.status if response else None,
            )
            if self.settle_delay_ms:
                await page.wait_for_timeout(self.settle_delay_ms)
            if wait_selector:
                try:
                    await page.wait_for_selector(
                        wait_selector, timeout=self.selector_timeout_ms
                    )
                except PlaywrightTimeoutError:
                    logger.warning("Timed out waiting for '%s' on %s", wait_selector, url)
            return await page.content()
        except PlaywrightTimeoutError as exc:
            raise ExtractionFailure(
                urlparse(url).netloc, f"Timed out loading {url}."
            ) from exc
        finally:
            await page.close()


class HttpPageLoader(PageLoader):
    """Fetch raw HTML without running scripts."""

    def __init__(self, timeout: float = 15) -> None:
        self.timeout = timeout

    async def load(self, url: str, wait_selector: Optional[str] = None) -> str:
        return await asyncio.to_thread(self._get, url)

    def _get(self, url: str) -> str:
        host = urlparse(url).netloc
        try:
            response = requests.get(
                url,
                headers={**DEFAULT_HEADERS, "Connection": "keep-alive"},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as exc:
            raise ExtractionFailure(host, f"Request to {url} failed: {exc}") from exc

        if response.status_code != 200:
            raise ExtractionFailure(host, f"HTTP {response.status_code} loading {url}.")
        return response.text


def create_page_loader(settings: Settings) -> PageLoader:
    """Build the loader selected by ``PAGE_LOADER``."""
    if settings.PAGE_LOADER == "http":
        return HttpPageLoader(timeout=settings.HTTP_TIMEOUT_SECONDS)
    return BrowserPageLoader(
        headless=settings.HEADLESS,
        page_timeout=settings.PAGE_LOAD_TIMEOUT_SECONDS,
        selector_timeout=settings.SELECTOR_TIMEOUT_SECONDS,
        settle_delay=settings.SETTLE_DELAY_SECONDS,
    )

"""Browser Automation Engine.

Owns one Chromium browser and one page for the whole process. Launching a
browser costs seconds, so the page is created lazily on the first call that
needs it and reused while its browser stays connected. Capabilities borrow
the page through `session()`, which serializes them behind a single lock so
two overlapping calls queue instead of navigating the same tab at once.
"""
import asyncio
import inspect
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Awaitable, Callable, Optional, TypeVar, Union

from playwright.async_api import Browser, BrowserContext, Page, Playwright

from .browser import apply_stealth, launch_browser, new_context
from .config import BASE_URL
from .cookies_auth import apply_cookies, check_login_status
from .exceptions import NavigationError
from .navigation import goto_content_parsed, settle, wait_for_selector
from .session import SessionCredentials

logger = logging.getLogger(__name__)

WARMUP_URL = f"{BASE_URL}/feed/"
DEFAULT_WAIT_MS = 15000

T = TypeVar("T")
ExtractFn = Callable[[Page], Union[T, Awaitable[T]]]


@dataclass
class BrowserSession:
    playwright: Playwright
    browser: Browser
    context: BrowserContext
    page: Page

    @property
    def alive(self) -> bool:
        try:
            return self.browser.is_connected()
        except Exception:
            return False


class BrowserEngine:
    def __init__(
        self,
        credentials: SessionCredentials,
        headless: bool = True,
        slow_mo_ms: int = 0,
        navigation_timeout_ms: int = 45000,
        settle_ms: int = 3000,
        launcher=launch_browser,
    ) -> None:
        self.credentials = credentials
        self.headless = headless
        self.slow_mo_ms = slow_mo_ms
        self.navigation_timeout_ms = navigation_timeout_ms
        self.settle_ms = settle_ms
        self._launcher = launcher
        self._session: Optional[BrowserSession] = None
        self._lock = asyncio.Lock()
        self.launch_count = 0

    @property
    def is_alive(self) -> bool:
        return self._session is not None and self._session.alive

    async def get_page(self) -> Page:
        """Return the shared page, launching a fresh browser if needed."""
        if self._session is not None and self._session.alive:
            return self._session.page

        if self._session is not None:
            logger.warning("Browser disconnected; relaunching")
            await self._dispose()

        logger.info("Launching stealth browser...")
        playwright, browser = await self._launcher(self.headless, self.slow_mo_ms)
        try:
            context = await new_context(browser)
            await apply_stealth(context)
            if not await apply_cookies(context, self.credentials):
                raise NavigationError("Cookie injection failed; refusing to browse without a session", url=WARMUP_URL)
            page = await context.new_page()

            await goto_content_parsed(page, WARMUP_URL, self.navigation_timeout_ms)
            await settle(self.settle_ms)
        except BaseException:
            await self._shutdown(playwright, browser)
            raise

        is_guest, debug = await check_login_status(page)
        if is_guest:
            logger.warning("Browser session looks unauthenticated: %s", " | ".join(debug))

        self._session = BrowserSession(playwright=playwright, browser=browser, context=context, page=page)
        self.launch_count += 1
        logger.info("Browser ready.")
        return page

    @asynccontextmanager
    async def session(self) -> AsyncIterator[Page]:
        """Borrow the page exclusively for the duration of the block."""
        async with self._lock:
            page = await self.get_page()
            yield page

    async def wait_for_content(self, page: Page, selector: str, timeout_ms: int = DEFAULT_WAIT_MS) -> bool:
        return await wait_for_selector(page, selector, timeout_ms)

    async def navigate(self, page: Page, url: str, timeout_ms: Optional[int] = None) -> None:
        await goto_content_parsed(page, url, timeout_ms or self.navigation_timeout_ms)

    async def navigate_and_extract(
        self,
        page: Page,
        url: str,
        extract_fn: ExtractFn,
        timeout_ms: Optional[int] = None,
    ):
        """Navigate with the content-parsed wait, then run `extract_fn(page)`."""
        await self.navigate(page, url, timeout_ms)
        result = extract_fn(page)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def settle(self) -> None:
        await settle(self.settle_ms)

    async def snapshot(self, page: Page) -> str:
        """Rendered HTML of the current page, for pure extraction."""
        return await page.content()

    async def close(self) -> None:
        """Tear the browser down. Hosts call this once at process exit."""
        async with self._lock:
            await self._dispose()

    async def _dispose(self) -> None:
        if self._session is None:
            return
        session, self._session = self._session, None
        await self._shutdown(session.playwright, session.browser)

    @staticmethod
    async def _shutdown(playwright: Playwright, browser: Browser) -> None:
        try:
            await browser.close()
        except Exception as e:
            logger.debug("Browser close failed: %s", e)
        try:
            await playwright.stop()
        except Exception as e:
            logger.debug("Playwright stop failed: %s", e)

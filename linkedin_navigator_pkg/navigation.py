import asyncio
import logging
import random

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .exceptions import NavigationError

logger = logging.getLogger(__name__)


async def random_delay(min_sec: float = 0.5, max_sec: float = 1.5) -> None:
    """Sleep for a random duration to emulate human pacing."""
    await asyncio.sleep(random.uniform(min_sec, max_sec))


async def settle(settle_ms: int) -> None:
    """Fixed pause for client-side rendering after the DOM is parsed."""
    if settle_ms > 0:
        await asyncio.sleep(settle_ms / 1000)


async def goto_content_parsed(page: Page, url: str, timeout_ms: int) -> None:
    """Navigate and wait for `domcontentloaded` only.

    LinkedIn keeps long-polling connections open, so `networkidle` never
    fires. There is no retry here; a timeout surfaces as NavigationError.
    """
    try:
        await page.goto(url, timeout=timeout_ms, wait_until="domcontentloaded")
    except PlaywrightTimeoutError as e:
        raise NavigationError(f"Navigation timed out after {timeout_ms}ms", url=url) from e
    except PlaywrightError as e:
        raise NavigationError(f"Navigation failed: {str(e)[:200]}", url=url) from e


async def wait_for_selector(page: Page, selector: str, timeout_ms: int) -> bool:
    """Wait for `selector` to attach; False on timeout instead of raising.

    Whether absence means "no results" or "broken page" is left to the caller.
    """
    try:
        await page.wait_for_selector(selector, timeout=timeout_ms, state="attached")
        return True
    except PlaywrightTimeoutError:
        logger.info("Selector not found within %sms: %s", timeout_ms, selector)
        return False


async def type_like_human(page: Page, selector: str, text: str, delay_ms: int = 30) -> None:
    """Focus the element and type with a per-key delay."""
    await page.click(selector)
    await page.keyboard.type(text, delay=delay_ms)

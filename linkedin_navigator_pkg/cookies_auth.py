import logging
from typing import List, Tuple

from playwright.async_api import BrowserContext, Page

from .session import SessionCredentials

logger = logging.getLogger(__name__)

AUTHWALL_SELECTORS = [
    ".authwall-join-form",
    "form.authwall-join-form",
    "[data-test-id='join-form']",
    "[data-test-id='header-join']",
]
AUTHWALL_URL_MARKERS = ["signup", "login", "authwall", "checkpoint"]


async def apply_cookies(context: BrowserContext, credentials: SessionCredentials) -> bool:
    """Seed the session cookie pair into the context.

    Returns True when the cookies were accepted. The values are never logged.
    """
    try:
        await context.add_cookies(credentials.browser_cookies())
        return True
    except Exception as e:
        logger.warning("Cookie injection failed: %s", str(e)[:80])
        return False


async def check_login_status(page: Page) -> Tuple[bool, List[str]]:
    """Detect guest/authwall state using stable signals.

    Returns (is_guest, debug_tags). Dynamic class names are avoided in favour
    of test ids and the redirect URL.
    """
    debug: List[str] = []
    is_guest = False
    try:
        url = page.url
        if any(marker in url for marker in AUTHWALL_URL_MARKERS):
            is_guest = True
            debug.append(f"URL:{url.split('?')[0]}")

        for sel in AUTHWALL_SELECTORS:
            if await page.locator(sel).count() > 0:
                is_guest = True
                debug.append(f"Authwall:{sel}")
                break
    except Exception as e:
        debug.append(f"LoginCheckErr:{str(e)[:30]}")

    return is_guest, debug

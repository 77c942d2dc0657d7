from typing import Optional, Tuple

from playwright.async_api import Browser, BrowserContext, Playwright
from playwright.async_api import async_playwright

from .config import random_user_agent

VIEWPORT = {"width": 1920, "height": 1080}

LAUNCH_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-infobars",
    "--window-size=1920,1080",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--disable-gpu",
    "--hide-scrollbars",
    "--mute-audio",
    "--no-first-run",
    "--disable-extensions",
]

STEALTH_SCRIPT = """
Object.defineProperty(navigator, 'webdriver', { get: () => undefined });
Object.defineProperty(navigator, 'plugins', { get: () => [1, 2, 3, 4, 5] });
Object.defineProperty(navigator, 'languages', { get: () => ['en-US', 'en'] });
window.chrome = { runtime: {} };

const originalQuery = window.navigator.permissions.query;
window.navigator.permissions.query = (parameters) => (
  parameters.name === 'notifications'
    ? Promise.resolve({ state: Notification.permission })
    : originalQuery(parameters)
);
"""


async def launch_browser(headless: bool = True, slow_mo_ms: int = 0) -> Tuple[Playwright, Browser]:
    """Start Playwright and launch Chromium with automation signals disabled.

    The Playwright driver is returned alongside the browser; the caller owns
    both and must stop the driver after closing the browser.
    """
    playwright = await async_playwright().start()
    browser = await playwright.chromium.launch(
        headless=headless,
        slow_mo=slow_mo_ms if slow_mo_ms > 0 else None,
        args=LAUNCH_ARGS,
    )
    return playwright, browser


async def new_context(
    browser: Browser,
    locale: str = "en-US",
    timezone_id: str = "America/New_York",
    user_agent: Optional[str] = None,
) -> BrowserContext:
    """Create a desktop browser context with realistic headers and locale.

    `apply_stealth()` should be called on the result before opening pages.
    """
    context = await browser.new_context(
        user_agent=user_agent or random_user_agent(),
        viewport=VIEWPORT,
        locale=locale,
        timezone_id=timezone_id,
        has_touch=False,
        is_mobile=False,
        device_scale_factor=1,
        extra_http_headers={
            "Accept-Language": "en-US,en;q=0.9",
            "DNT": "1",
            "Upgrade-Insecure-Requests": "1",
        },
    )
    return context


async def apply_stealth(context: BrowserContext) -> None:
    """Patch the common automation fingerprints in every page of the context.

    Covers webdriver, plugins, languages, a minimal `window.chrome` and the
    notifications permission query.
    """
    await context.add_init_script(STEALTH_SCRIPT)

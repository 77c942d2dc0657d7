import os
import random
from typing import Optional

from pydantic import BaseModel, ValidationError, field_validator

from .exceptions import ConfigurationError


LI_AT_COOKIE = os.environ.get("LI_AT_COOKIE")
JSESSIONID = os.environ.get("JSESSIONID")
HEADLESS = os.environ.get("SCRAPER_HEADLESS", "true").lower() not in ["0", "false", "no"]
# Raw strings; numeric parsing happens in ClientConfig.from_env().
SLOW_MO_MS = os.environ.get("SCRAPER_SLOW_MO_MS", "0")
NAV_TIMEOUT_MS = os.environ.get("SCRAPER_NAV_TIMEOUT_MS", "45000")
SETTLE_MS = os.environ.get("SCRAPER_SETTLE_MS", "3000")
HTTP_TIMEOUT = os.environ.get("LINKEDIN_HTTP_TIMEOUT", "30")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

# ClientConfig field -> environment variable, for error messages.
ENV_NAMES = {
    "li_at": "LI_AT_COOKIE",
    "jsessionid": "JSESSIONID",
    "headless": "SCRAPER_HEADLESS",
    "slow_mo_ms": "SCRAPER_SLOW_MO_MS",
    "navigation_timeout_ms": "SCRAPER_NAV_TIMEOUT_MS",
    "settle_ms": "SCRAPER_SETTLE_MS",
    "http_timeout": "LINKEDIN_HTTP_TIMEOUT",
}

BASE_URL = "https://www.linkedin.com"
COOKIE_DOMAIN = ".linkedin.com"

# Sent on every Direct Transport request; the browser rotates its own.
API_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


def user_agents():
    """Return a curated pool of desktop Chrome user agents.

    Rotating across a small, realistic set of user agents reduces the chance
    of fingerprinting correlating every browser launch to a single static UA.
    """
    return [
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/130.0.0.0 Safari/537.36",
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
    ]


def random_user_agent():
    """Pick a random user agent from the pool."""
    return random.choice(user_agents())


class ClientConfig(BaseModel):
    """Everything the client needs, passed explicitly instead of read globally.

    `from_env()` is the only place that touches the process environment;
    the rest of the package receives an instance of this model.
    """
    li_at: str
    jsessionid: Optional[str] = None
    headless: bool = True
    slow_mo_ms: int = 0
    navigation_timeout_ms: int = 45000
    settle_ms: int = 3000
    http_timeout: float = 30.0

    @field_validator("li_at")
    @classmethod
    def _li_at_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("li_at must not be empty")
        return value

    @field_validator("jsessionid")
    @classmethod
    def _blank_token_is_missing(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value

    @classmethod
    def from_env(cls) -> "ClientConfig":
        if not LI_AT_COOKIE or not LI_AT_COOKIE.strip():
            raise ConfigurationError(
                "LI_AT_COOKIE environment variable is required.\n"
                "Set it to your LinkedIn li_at session cookie value.\n"
                "You can find it in your browser's developer tools under "
                "Application > Cookies > linkedin.com"
            )
        try:
            return cls(
                li_at=LI_AT_COOKIE,
                jsessionid=JSESSIONID,
                headless=HEADLESS,
                slow_mo_ms=SLOW_MO_MS,
                navigation_timeout_ms=NAV_TIMEOUT_MS,
                settle_ms=SETTLE_MS,
                http_timeout=HTTP_TIMEOUT,
            )
        except ValidationError as e:
            names = sorted({ENV_NAMES.get(str(err["loc"][0]), str(err["loc"][0])) for err in e.errors()})
            raise ConfigurationError(f"Invalid value for {', '.join(names)}: {e.errors()[0]['msg']}") from e

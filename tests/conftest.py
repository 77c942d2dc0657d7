"""Shared fixtures: credentials, a mock-backed transport and a fake browser engine."""
from contextlib import asynccontextmanager
from typing import Callable, List, Optional
from unittest.mock import MagicMock

import httpx
import pytest

from linkedin_navigator_pkg.config import ClientConfig
from linkedin_navigator_pkg.session import SessionCredentials
from linkedin_navigator_pkg.transport import DirectTransport

LI_AT = "AQEDAtestcookievalue"
JSESSIONID = '"ajax:abc123"'


class FakeEngine:
    """Stands in for BrowserEngine: serves one HTML snapshot for any URL."""

    def __init__(self, html: str = "", found: bool = True, navigate_error: Optional[Exception] = None) -> None:
        self.html = html
        self.found = found
        self.navigate_error = navigate_error
        self.visited: List[str] = []
        self.page = MagicMock()
        self.closed = False

    @asynccontextmanager
    async def session(self):
        yield self.page

    async def navigate(self, page, url, timeout_ms=None):
        self.visited.append(url)
        if self.navigate_error is not None:
            raise self.navigate_error

    async def navigate_and_extract(self, page, url, extract_fn, timeout_ms=None):
        await self.navigate(page, url, timeout_ms)
        return await extract_fn(page)

    async def wait_for_content(self, page, selector, timeout_ms=15000):
        return self.found

    async def settle(self):
        pass

    async def snapshot(self, page):
        return self.html

    async def close(self):
        self.closed = True


# =============================================================================
# FIXTURES
# =============================================================================
@pytest.fixture
def credentials() -> SessionCredentials:
    return SessionCredentials(li_at=LI_AT, jsessionid=JSESSIONID)


@pytest.fixture
def client_config() -> ClientConfig:
    return ClientConfig(li_at=LI_AT, jsessionid=JSESSIONID, settle_ms=0)


@pytest.fixture
def make_transport(credentials: SessionCredentials) -> Callable[[Callable], DirectTransport]:
    """Build a DirectTransport whose HTTP layer is answered by `handler`."""

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> DirectTransport:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return DirectTransport(credentials, client=client)

    return factory

"""Tests for session credentials and the headers derived from them."""
import re

import pytest
from pydantic import ValidationError

from linkedin_navigator_pkg.session import SessionCredentials, generate_csrf_token

from .conftest import LI_AT


class TestCsrfToken:
    def test_supplied_token_is_stripped_of_quotes(self) -> None:
        creds = SessionCredentials(li_at=LI_AT, jsessionid='"ajax:abc123"')

        headers = creds.headers()

        assert headers["csrf-token"] == "ajax:abc123"
        assert headers["Cookie"] == f'li_at={LI_AT}; JSESSIONID="ajax:abc123"'

    def test_generated_token_shape(self) -> None:
        assert re.fullmatch(r'"ajax:[a-z0-9]{16}"', generate_csrf_token())

    def test_missing_token_is_generated_once(self) -> None:
        creds = SessionCredentials(li_at=LI_AT)

        assert re.fullmatch(r'"ajax:[a-z0-9]{16}"', creds.jsessionid)
        headers = creds.headers()
        assert f"JSESSIONID={creds.jsessionid}" in headers["Cookie"]
        assert headers["csrf-token"] == creds.jsessionid.replace('"', "")
        # Same value on every call.
        assert creds.headers()["csrf-token"] == headers["csrf-token"]

    def test_credentials_are_immutable(self) -> None:
        creds = SessionCredentials(li_at=LI_AT)
        with pytest.raises(ValidationError):
            creds.li_at = "other"

    def test_repr_hides_cookie(self) -> None:
        assert LI_AT not in repr(SessionCredentials(li_at=LI_AT))


class TestHeaders:
    def test_fixed_header_set(self, credentials: SessionCredentials) -> None:
        headers = credentials.headers()

        assert headers["Accept"] == "application/vnd.linkedin.normalized+json+2.1"
        assert headers["x-restli-protocol-version"] == "2.0.0"
        assert headers["x-li-lang"] == "en_US"
        assert "clientVersion" in headers["x-li-track"]
        assert headers["User-Agent"].startswith("Mozilla/5.0")

    def test_browser_cookies_share_the_token(self, credentials: SessionCredentials) -> None:
        cookies = {c["name"]: c for c in credentials.browser_cookies()}

        assert cookies["li_at"]["value"] == LI_AT
        assert cookies["li_at"]["httpOnly"] is True
        assert cookies["JSESSIONID"]["value"] == credentials.jsessionid
        assert all(c["domain"] == ".linkedin.com" for c in cookies.values())

import json
import secrets
import string
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .config import API_USER_AGENT, COOKIE_DOMAIN

CSRF_ALPHABET = string.ascii_lowercase + string.digits
CSRF_TOKEN_LENGTH = 16

# Client metadata the web app attaches to every Voyager call.
LI_TRACK = json.dumps({
    "clientVersion": "1.13.8844",
    "mpVersion": "1.13.8844",
    "osName": "web",
    "timezoneOffset": -5,
    "timezone": "America/New_York",
    "deviceFormFactor": "DESKTOP",
    "mpName": "voyager-web",
})


def generate_csrf_token() -> str:
    """Return a JSESSIONID-shaped CSRF token: `"ajax:<16 chars>"` with quotes."""
    token = "".join(secrets.choice(CSRF_ALPHABET) for _ in range(CSRF_TOKEN_LENGTH))
    return f'"ajax:{token}"'


class SessionCredentials(BaseModel):
    """Authentication material shared by the API path and the browser path.

    LinkedIn uses the JSESSIONID cookie as the CSRF token. When the caller
    does not supply one, a token is generated once here; the platform accepts
    any value as long as the cookie and the `csrf-token` header agree.
    """

    model_config = ConfigDict(frozen=True)

    li_at: str = Field(repr=False)
    jsessionid: Optional[str] = Field(None, repr=False, validate_default=True)

    @field_validator("jsessionid", mode="after")
    @classmethod
    def _generate_when_missing(cls, value: Optional[str]) -> str:
        return value or generate_csrf_token()

    @property
    def csrf_token(self) -> str:
        return self.jsessionid.replace('"', "")

    def cookie_header(self) -> str:
        return f"li_at={self.li_at}; JSESSIONID={self.jsessionid}"

    def headers(self) -> Dict[str, str]:
        """Fixed header set for every Direct Transport request."""
        return {
            "User-Agent": API_USER_AGENT,
            "Accept": "application/vnd.linkedin.normalized+json+2.1",
            "Accept-Language": "en-US,en;q=0.9",
            "x-li-lang": "en_US",
            "x-li-track": LI_TRACK,
            "x-li-page-instance": "urn:li:page:d_flagship3_search_srp_people;",
            "x-restli-protocol-version": "2.0.0",
            "csrf-token": self.csrf_token,
            "Cookie": self.cookie_header(),
        }

    def browser_cookies(self) -> List[dict]:
        """Cookie pair injected into the browser context before any navigation."""
        return [
            {
                "name": "li_at",
                "value": self.li_at,
                "domain": COOKIE_DOMAIN,
                "path": "/",
                "httpOnly": True,
                "secure": True,
            },
            {
                "name": "JSESSIONID",
                "value": self.jsessionid,
                "domain": COOKIE_DOMAIN,
                "path": "/",
                "httpOnly": False,
                "secure": True,
            },
        ]

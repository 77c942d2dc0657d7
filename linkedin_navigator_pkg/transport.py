import json
import logging
from typing import Any, Dict, Optional

import httpx

from .config import BASE_URL
from .exceptions import ParseError, TransportError
from .models import RequestDescriptor, ResponseEnvelope
from .session import SessionCredentials

logger = logging.getLogger(__name__)

# Session headers a caller is never allowed to replace.
PROTECTED_HEADERS = {"cookie", "csrf-token"}
ERROR_BODY_LIMIT = 500


class DirectTransport:
    """Authenticated requests against LinkedIn's internal data API.

    One call per `issue()`: no retries, no caching. An `httpx.AsyncClient`
    can be injected (tests pass one backed by `httpx.MockTransport`);
    otherwise the transport owns its client and closes it in `aclose()`.
    """

    def __init__(
        self,
        credentials: SessionCredentials,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
        base_url: str = BASE_URL,
    ) -> None:
        self.credentials = credentials
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=False)

    def build_url(self, path: str) -> str:
        if path.startswith("http"):
            return path
        return f"{self.base_url}{path}"

    def build_headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = self.credentials.headers()
        for name, value in (extra or {}).items():
            if name.lower() in PROTECTED_HEADERS:
                continue
            headers[name] = value
        return headers

    async def issue(self, descriptor: RequestDescriptor) -> ResponseEnvelope:
        url = self.build_url(descriptor.path)
        headers = self.build_headers(descriptor.headers)
        logger.debug("%s %s", descriptor.method, url.split("?")[0])

        try:
            response = await self._client.request(
                descriptor.method,
                url,
                headers=headers,
                content=descriptor.body,
            )
        except httpx.HTTPError as e:
            raise TransportError(f"LinkedIn API request failed: {e}", url=url) from e

        text = response.text
        if not 200 <= response.status_code < 300:
            raise TransportError(
                f"LinkedIn API error {response.status_code}: {text[:ERROR_BODY_LIMIT]}",
                url=url,
                status_code=response.status_code,
            )

        if not text.strip():
            return ResponseEnvelope(status_code=response.status_code, data=None, text=text)
        try:
            data = json.loads(text)
        except ValueError as e:
            raise ParseError(f"LinkedIn API returned malformed JSON: {e}", url=url, body=text[:ERROR_BODY_LIMIT]) from e
        return ResponseEnvelope(status_code=response.status_code, data=data, text=text)

    async def get_json(self, path: str) -> Any:
        envelope = await self.issue(RequestDescriptor(path=path))
        return envelope.data

    async def post_json(self, path: str, payload: Dict[str, Any]) -> Any:
        envelope = await self.issue(
            RequestDescriptor(
                path=path,
                method="POST",
                headers={"Content-Type": "application/json"},
                body=json.dumps(payload),
            )
        )
        return envelope.data

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

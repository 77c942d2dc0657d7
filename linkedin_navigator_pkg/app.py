from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import Body, FastAPI, Request
from fastapi.responses import JSONResponse

from .client import LinkedInClient
from .config import ClientConfig
from .tools import TOOLS_BY_NAME, describe_tools, handle_tool_call


def create_app(config: Optional[ClientConfig] = None, client: Optional[LinkedInClient] = None) -> FastAPI:
    """HTTP host for the capability registry.

    Credentials are resolved when the app starts, not at import; the browser
    is closed when it stops.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.client = client or LinkedInClient(config or ClientConfig.from_env())
        try:
            yield
        finally:
            await app.state.client.aclose()

    app = FastAPI(title="LinkedIn Sales Navigator", lifespan=lifespan)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/tools")
    def list_tools():
        return describe_tools()

    @app.post("/tools/{name}")
    async def call_tool(name: str, request: Request, arguments: Optional[Dict[str, Any]] = Body(default=None)):
        payload = await handle_tool_call(request.app.state.client, name, arguments)
        status_code = 404 if name not in TOOLS_BY_NAME else 200
        return JSONResponse(payload, status_code=status_code)

    return app


app = create_app()

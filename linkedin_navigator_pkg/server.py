import logging

from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server

from .client import LinkedInClient
from .response import format_result
from .tools import create_tools, handle_tool_call

logger = logging.getLogger(__name__)

SERVER_NAME = "linkedin-sales-navigator"


class ToolCallFailed(Exception):
    """Raised inside the MCP handler so the result is sent with isError set."""


def create_server(client: LinkedInClient) -> Server:
    server = Server(SERVER_NAME)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return create_tools()

    @server.call_tool()
    async def call_tool(name: str, arguments: dict) -> list[types.TextContent]:
        payload = await handle_tool_call(client, name, arguments)
        if payload["error"]:
            # The server turns any exception into an error result carrying its text.
            raise ToolCallFailed(payload["message"])
        return [types.TextContent(type="text", text=format_result(payload["data"]))]

    return server


async def serve_stdio(client: LinkedInClient) -> None:
    """Serve MCP over stdin/stdout until the peer disconnects."""
    server = create_server(client)
    try:
        async with stdio_server() as (read_stream, write_stream):
            logger.info("LinkedIn Sales Navigator MCP server is running on stdio")
            await server.run(read_stream, write_stream, server.create_initialization_options())
    finally:
        await client.aclose()

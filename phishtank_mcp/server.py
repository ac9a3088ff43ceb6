"""MCP server exposing the PhishTank tools over stdio."""

import asyncio
import logging
import sys
from typing import Any

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError

from phishtank_mcp import __version__
from phishtank_mcp.api.tools import TOOL_DEFINITIONS, PhishTankTools
from phishtank_mcp.config import Settings, get_settings
from phishtank_mcp.exceptions import InvalidArgumentError, UnknownToolError

logger = logging.getLogger(__name__)

SERVER_NAME = "phishtank-server"


def list_tool_definitions() -> list[types.Tool]:
    """Tool metadata advertised to MCP clients."""
    return [
        types.Tool(
            name=definition["name"],
            description=definition["description"],
            inputSchema=definition["input_schema"],
        )
        for definition in TOOL_DEFINITIONS
    ]


async def dispatch_tool_call(
    tools: PhishTankTools, name: str, arguments: dict[str, Any] | None
) -> types.CallToolResult:
    """
    Run a tool and convert the outcome to an MCP result.

    Raises:
        McpError: INVALID_PARAMS for bad arguments, METHOD_NOT_FOUND for
            unknown tools
    """
    try:
        result = await tools.call_tool(name, arguments)
    except InvalidArgumentError as e:
        raise McpError(types.ErrorData(code=types.INVALID_PARAMS, message=e.message)) from e
    except UnknownToolError as e:
        raise McpError(types.ErrorData(code=types.METHOD_NOT_FOUND, message=e.message)) from e

    return types.CallToolResult(
        content=[types.TextContent(type="text", text=result.text)],
        isError=result.is_error,
    )


def create_server(tools: PhishTankTools) -> Server:
    """Create the MCP server with list_tools and call_tool handlers."""
    server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def handle_list_tools() -> list[types.Tool]:
        return list_tool_definitions()

    # Registered without the call_tool decorator: McpError must reach the
    # session as a JSON-RPC error, and clamped bounds must not be rejected
    # by the advertised input schema.
    async def handle_call_tool(request: types.CallToolRequest) -> types.ServerResult:
        result = await dispatch_tool_call(
            tools, request.params.name, request.params.arguments
        )
        return types.ServerResult(result)

    server.request_handlers[types.CallToolRequest] = handle_call_tool

    return server


async def serve(settings: Settings) -> None:
    """Serve MCP requests on stdin/stdout until the client disconnects."""
    tools = PhishTankTools(settings)
    server = create_server(tools)

    if not settings.has_api_key:
        logger.warning(
            "PHISHTANK_API_KEY not set: limited to "
            f"{settings.requests_per_minute} URL checks per minute"
        )

    try:
        async with stdio_server() as (read_stream, write_stream):
            logger.info("PhishTank MCP server running on stdio")
            await server.run(
                read_stream, write_stream, server.create_initialization_options()
            )
    finally:
        await tools.close()


def configure_logging(level: str) -> None:
    """Log to stderr; stdout carries the MCP stream."""
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


def main() -> None:
    """Console entry point."""
    settings = get_settings()
    configure_logging(settings.log_level)

    try:
        asyncio.run(serve(settings))
    except KeyboardInterrupt:
        logger.info("Shutting down PhishTank MCP server")


if __name__ == "__main__":
    main()

"""MCP tool surface: argument schemas and handlers."""

from phishtank_mcp.api.tools import TOOL_DEFINITIONS, PhishTankTools, ToolResult

__all__ = ["TOOL_DEFINITIONS", "PhishTankTools", "ToolResult"]

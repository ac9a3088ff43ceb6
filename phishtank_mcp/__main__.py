"""Run the PhishTank MCP server: python -m phishtank_mcp."""

from phishtank_mcp.server import main

main()

"""
PhishTank MCP - Model Context Protocol server for the PhishTank database.

Exposes PhishTank URL checks, bulk database search and phishing
statistics as tools for AI agents, backed by an in-memory TTL cache
and a request throttle that respects PhishTank's rate limits.
"""

__version__ = "1.0.0"

from phishtank_mcp.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]

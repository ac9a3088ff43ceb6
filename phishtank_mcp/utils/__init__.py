"""Utility functions and helpers."""

from phishtank_mcp.utils.cache import TTLCache
from phishtank_mcp.utils.clock import Clock, SystemClock
from phishtank_mcp.utils.throttle import RateThrottle
from phishtank_mcp.utils.url_validator import is_valid_url

__all__ = [
    "Clock",
    "RateThrottle",
    "SystemClock",
    "TTLCache",
    "is_valid_url",
]

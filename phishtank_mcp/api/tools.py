"""PhishTank tool definitions and handlers.

Each handler validates its arguments, runs the operation against the
shared cache, throttle and database, and returns a JSON-serializable
envelope with a human-readable `summary`.
"""

import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import httpx

from phishtank_mcp.api.schemas import (
    CheckMultipleUrlsArgs,
    CheckUrlArgs,
    DateSearchArgs,
    PhishDetailsArgs,
    PhishStatsArgs,
    RecentPhishArgs,
    TargetSearchArgs,
)
from phishtank_mcp.config import Settings
from phishtank_mcp.exceptions import UnknownToolError, UpstreamError
from phishtank_mcp.models import PhishEntry, UrlCheckOutcome
from phishtank_mcp.services import query_engine
from phishtank_mcp.services.database import PhishDatabase
from phishtank_mcp.services.phishtank_client import PhishTankClient
from phishtank_mcp.services.url_checker import (
    MAX_BATCH_DELAY_MS,
    MAX_BATCH_SIZE,
    MIN_BATCH_DELAY_MS,
    RESPONSE_FORMATS,
    UrlChecker,
    get_url_check_summary,
)
from phishtank_mcp.utils.cache import TTLCache
from phishtank_mcp.utils.clock import Clock, SystemClock, utc_now
from phishtank_mcp.utils.throttle import RateThrottle

logger = logging.getLogger(__name__)

DATE_SCHEMA_PATTERN = r"^\d{4}-\d{2}-\d{2}$"

TOOL_DEFINITIONS: list[dict[str, Any]] = [
    {
        "name": "check_url",
        "description": "Check if a URL is in PhishTank's phishing database",
        "input_schema": {
            "type": "object",
            "properties": {
                "url": {
                    "type": "string",
                    "description": "The URL to check for phishing (must be a complete URL with protocol)",
                },
                "format": {
                    "type": "string",
                    "description": "Response format: json, xml, or php (default: json)",
                    "enum": list(RESPONSE_FORMATS),
                },
            },
            "required": ["url"],
        },
    },
    {
        "name": "check_multiple_urls",
        "description": "Check multiple URLs for phishing with intelligent rate limiting",
        "input_schema": {
            "type": "object",
            "properties": {
                "urls": {
                    "type": "array",
                    "description": "Array of URLs to check",
                    "items": {"type": "string"},
                    "maxItems": MAX_BATCH_SIZE,
                },
                "delay": {
                    "type": "number",
                    "description": "Delay between requests in milliseconds (default: 1000)",
                    "minimum": MIN_BATCH_DELAY_MS,
                    "maximum": MAX_BATCH_DELAY_MS,
                },
            },
            "required": ["urls"],
        },
    },
    {
        "name": "get_recent_phish",
        "description": "Get recent verified phishing URLs from PhishTank database",
        "input_schema": {
            "type": "object",
            "properties": {
                "limit": {
                    "type": "number",
                    "description": "Number of entries to return (1-1000, default: 100)",
                    "minimum": 1,
                    "maximum": 1000,
                },
                "include_offline": {
                    "type": "boolean",
                    "description": "Include offline phishing URLs (default: false)",
                },
            },
        },
    },
    {
        "name": "search_phish_by_target",
        "description": "Search phishing URLs by target company/brand",
        "input_schema": {
            "type": "object",
            "properties": {
                "target": {
                    "type": "string",
                    "description": 'Target company or brand name to search for (e.g., "PayPal", "Apple")',
                },
                "limit": {
                    "type": "number",
                    "description": "Number of results to return (1-500, default: 50)",
                    "minimum": 1,
                    "maximum": 500,
                },
                "verified_only": {
                    "type": "boolean",
                    "description": "Only return verified phishing URLs (default: true)",
                },
            },
            "required": ["target"],
        },
    },
    {
        "name": "get_phish_details",
        "description": "Get detailed information about a specific phish by ID",
        "input_schema": {
            "type": "object",
            "properties": {
                "phish_id": {
                    "type": "number",
                    "description": "PhishTank phish ID number",
                },
            },
            "required": ["phish_id"],
        },
    },
    {
        "name": "get_phish_stats",
        "description": "Get statistics about phishing trends and top targets",
        "input_schema": {
            "type": "object",
            "properties": {
                "days": {
                    "type": "number",
                    "description": "Number of days to analyze (1-30, default: 7)",
                    "minimum": 1,
                    "maximum": 30,
                },
                "top_targets_limit": {
                    "type": "number",
                    "description": "Number of top targets to include (default: 10)",
                    "minimum": 1,
                    "maximum": 50,
                },
            },
        },
    },
    {
        "name": "search_phish_by_date",
        "description": "Search phishing URLs by submission date range",
        "input_schema": {
            "type": "object",
            "properties": {
                "start_date": {
                    "type": "string",
                    "description": "Start date in ISO format (YYYY-MM-DD)",
                    "pattern": DATE_SCHEMA_PATTERN,
                },
                "end_date": {
                    "type": "string",
                    "description": "End date in ISO format (YYYY-MM-DD)",
                    "pattern": DATE_SCHEMA_PATTERN,
                },
                "limit": {
                    "type": "number",
                    "description": "Number of results to return (1-500, default: 100)",
                    "minimum": 1,
                    "maximum": 500,
                },
            },
            "required": ["start_date", "end_date"],
        },
    },
]


@dataclass
class ToolResult:
    """Text content returned to the MCP host."""

    text: str
    is_error: bool = False

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ToolResult":
        return cls(text=json.dumps(payload, indent=2, ensure_ascii=False))


def _entries_payload(entries: list[PhishEntry]) -> list[dict[str, Any]]:
    return [entry.to_dict() for entry in entries]


def url_check_payload(outcome: UrlCheckOutcome) -> dict[str, Any]:
    """Envelope for a single URL check."""
    payload: dict[str, Any] = {"cached": outcome.cached, "result": outcome.result}
    if outcome.rate_limit_info is not None:
        payload["rate_limit_info"] = outcome.rate_limit_info.to_dict()
    payload["summary"] = get_url_check_summary(outcome.result)
    return payload


class PhishTankTools:
    """
    Per-process PhishTank service.

    Owns the cache, the throttle and the HTTP client shared by every tool
    call. Tool calls are expected one at a time.
    """

    def __init__(
        self,
        settings: Settings,
        cache: TTLCache | None = None,
        throttle: RateThrottle | None = None,
        clock: Clock | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the service.

        Args:
            settings: Server settings
            cache: Shared TTL cache (created from settings if None)
            throttle: URL check throttle (created from settings if None)
            clock: Time source for cache, throttle, pacing and statistics
            transport: Optional httpx transport used to stub PhishTank
        """
        self.settings = settings
        self.clock = clock or SystemClock()
        if cache is None:
            cache = TTLCache(default_ttl=settings.url_check_ttl, clock=self.clock)
        if throttle is None:
            throttle = RateThrottle(settings.requests_per_minute, clock=self.clock)

        self.cache = cache
        self.throttle = throttle
        self.client = PhishTankClient(settings, transport=transport)
        self.database = PhishDatabase(self.client, self.cache, settings, clock=self.clock)
        self.url_checker = UrlChecker(
            self.client, self.cache, self.throttle, settings, clock=self.clock
        )

        self._handlers: dict[str, Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]] = {
            "check_url": self.check_url,
            "check_multiple_urls": self.check_multiple_urls,
            "get_recent_phish": self.get_recent_phish,
            "search_phish_by_target": self.search_phish_by_target,
            "get_phish_details": self.get_phish_details,
            "get_phish_stats": self.get_phish_stats,
            "search_phish_by_date": self.search_phish_by_date,
        }

    @property
    def tool_names(self) -> list[str]:
        return list(self._handlers)

    async def close(self) -> None:
        await self.client.close()

    async def call_tool(self, name: str, arguments: dict[str, Any] | None) -> ToolResult:
        """
        Dispatch a tool call.

        Upstream failures become error results. Invalid arguments and
        unknown tools are raised for the transport to report as protocol
        errors.

        Raises:
            UnknownToolError: If no tool has this name
            InvalidArgumentError: If the arguments fail validation
        """
        handler = self._handlers.get(name)
        if handler is None:
            raise UnknownToolError(f"Unknown tool: {name}", context={"tool": name})

        logger.info(f"Tool call: {name}")
        try:
            payload = await handler(arguments or {})
        except UpstreamError as e:
            logger.error(f"Tool {name} failed: {e.describe()}")
            return ToolResult(text=e.describe(), is_error=True)

        return ToolResult.from_payload(payload)

    async def check_url(self, arguments: dict[str, Any]) -> dict[str, Any]:
        args = CheckUrlArgs.parse(arguments)
        outcome = await self.url_checker.check_url(args.url, args.format)
        return url_check_payload(outcome)

    async def check_multiple_urls(self, arguments: dict[str, Any]) -> dict[str, Any]:
        args = CheckMultipleUrlsArgs.parse(arguments)
        batch = await self.url_checker.check_multiple_urls(args.urls, args.delay)

        batch_results = []
        for item in batch.items:
            if item.outcome is not None:
                batch_results.append(
                    {"url": item.url, "success": True, "data": url_check_payload(item.outcome)}
                )
            else:
                batch_results.append({"url": item.url, "success": False, "error": item.error})

        return {
            "batch_results": batch_results,
            "summary": {
                "total": batch.total,
                "successful": batch.successful,
                "failed": batch.failed,
                "delay_used": batch.delay_ms,
            },
        }

    async def get_recent_phish(self, arguments: dict[str, Any]) -> dict[str, Any]:
        args = RecentPhishArgs.parse(arguments)
        snapshot = await self.database.get_database()

        entries = query_engine.recent_entries(
            snapshot.entries, args.limit, include_offline=args.include_offline
        )
        scope = " (including offline)" if args.include_offline else " (online only)"

        return {
            "total_entries": snapshot.total_entries,
            "filtered_entries": len(entries),
            "include_offline": args.include_offline,
            "entries": _entries_payload(entries),
            "summary": f"Retrieved {len(entries)} recent phishing URLs{scope}",
        }

    async def search_phish_by_target(self, arguments: dict[str, Any]) -> dict[str, Any]:
        args = TargetSearchArgs.parse(arguments)
        snapshot = await self.database.get_database()

        entries = query_engine.search_by_target(
            snapshot.entries, args.target, args.limit, verified_only=args.verified_only
        )
        scope = " (verified only)" if args.verified_only else ""

        return {
            "search_target": args.target,
            "verified_only": args.verified_only,
            "matches_found": len(entries),
            "entries": _entries_payload(entries),
            "summary": f'Found {len(entries)} phishing URLs targeting "{args.target}"{scope}',
        }

    async def get_phish_details(self, arguments: dict[str, Any]) -> dict[str, Any]:
        args = PhishDetailsArgs.parse(arguments)
        snapshot = await self.database.get_database()

        entry = query_engine.find_by_id(snapshot.entries, args.phish_id)
        if entry is None:
            return {
                "phish_id": args.phish_id,
                "found": False,
                "summary": f"Phish ID {args.phish_id} not found in database",
            }

        return {
            "phish_id": args.phish_id,
            "found": True,
            "details": entry.to_dict(),
            "summary": (
                f"Details for phish ID {args.phish_id}: {entry.url} "
                f"(Target: {entry.target or 'Unknown'})"
            ),
        }

    async def get_phish_stats(self, arguments: dict[str, Any]) -> dict[str, Any]:
        args = PhishStatsArgs.parse(arguments)
        snapshot = await self.database.get_database()

        stats = query_engine.compute_stats(
            snapshot.entries,
            days=args.days,
            top_targets_limit=args.top_targets_limit,
            now=utc_now(self.clock),
        )

        return {
            "statistics": stats.to_dict(),
            "analysis_period_days": args.days,
            "summary": (
                f"Analyzed {stats.total_phish} phishing submissions over {args.days} days. "
                f"{stats.total_verified} verified, {stats.total_online} currently online."
            ),
        }

    async def search_phish_by_date(self, arguments: dict[str, Any]) -> dict[str, Any]:
        args = DateSearchArgs.parse(arguments)
        snapshot = await self.database.get_database()

        entries = query_engine.search_by_date_range(
            snapshot.entries, args.start, args.end, args.limit
        )

        return {
            "date_range": {"start": args.start_date, "end": args.end_date},
            "matches_found": len(entries),
            "entries": _entries_payload(entries),
            "summary": (
                f"Found {len(entries)} phishing URLs submitted between "
                f"{args.start_date} and {args.end_date}"
            ),
        }

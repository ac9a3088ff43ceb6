"""PhishTank URL check API with caching and throttling."""

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from phishtank_mcp.config import Settings
from phishtank_mcp.exceptions import InvalidArgumentError, PhishTankError
from phishtank_mcp.models import RateLimitInfo, UrlCheckOutcome
from phishtank_mcp.services.phishtank_client import PhishTankClient
from phishtank_mcp.utils.cache import TTLCache
from phishtank_mcp.utils.clock import Clock, SystemClock
from phishtank_mcp.utils.throttle import RateThrottle
from phishtank_mcp.utils.url_validator import is_valid_url

logger = logging.getLogger(__name__)

URL_CHECK_CACHE_PREFIX = "url_check:"
RESPONSE_FORMATS = ("json", "xml", "php")

MAX_BATCH_SIZE = 50
DEFAULT_BATCH_DELAY_MS = 1000
MIN_BATCH_DELAY_MS = 500
MAX_BATCH_DELAY_MS = 10000


def url_check_cache_key(url: str) -> str:
    """Cache key for a URL check. The URL is used verbatim."""
    return f"{URL_CHECK_CACHE_PREFIX}{url}"


def validate_url(url: Any) -> str:
    """
    Validate a URL to check.

    Returns:
        The URL with surrounding whitespace removed

    Raises:
        InvalidArgumentError: If the URL is missing or malformed
    """
    url = str(url or "").strip()
    if not url:
        raise InvalidArgumentError("URL parameter is required")
    if not is_valid_url(url):
        raise InvalidArgumentError("Invalid URL format", context={"url": url})
    return url


def validate_format(response_format: Any) -> str:
    """
    Validate the PhishTank response format.

    Raises:
        InvalidArgumentError: If the format is not json, xml or php
    """
    response_format = str(response_format or "json").strip().lower()
    if response_format not in RESPONSE_FORMATS:
        raise InvalidArgumentError(
            f"Invalid format '{response_format}': must be one of {', '.join(RESPONSE_FORMATS)}"
        )
    return response_format


def clamp_delay(delay_ms: int | None) -> int:
    """Clamp the batch pacing delay to the allowed range."""
    if delay_ms is None:
        return DEFAULT_BATCH_DELAY_MS
    return min(max(int(delay_ms), MIN_BATCH_DELAY_MS), MAX_BATCH_DELAY_MS)


def get_url_check_summary(result: dict[str, Any]) -> str:
    """One-line classification of a URL check result."""
    results = result.get("results") if isinstance(result, dict) else None
    if not isinstance(results, dict):
        return "Invalid response from PhishTank"

    phish_id = results.get("phish_id")

    if not results.get("in_database"):
        return "URL not found in PhishTank database (likely safe)"

    if results.get("verified") and results.get("valid"):
        return f"⚠️ PHISHING DETECTED - Verified phishing URL (ID: {phish_id})"

    return f"URL found in database but not yet verified (ID: {phish_id})"


@dataclass
class BatchItem:
    """Outcome of one URL in a batch check."""

    url: str
    outcome: UrlCheckOutcome | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.outcome is not None


@dataclass
class BatchOutcome:
    """Ordered per-URL results of a batch check."""

    items: list[BatchItem] = field(default_factory=list)
    delay_ms: int = DEFAULT_BATCH_DELAY_MS

    @property
    def total(self) -> int:
        return len(self.items)

    @property
    def successful(self) -> int:
        return sum(1 for item in self.items if item.success)

    @property
    def failed(self) -> int:
        return self.total - self.successful


class UrlChecker:
    """
    Checks URLs against PhishTank.

    Results are cached per URL string. Only cache misses go through the
    throttle and reach the network.
    """

    def __init__(
        self,
        client: PhishTankClient,
        cache: TTLCache,
        throttle: RateThrottle,
        settings: Settings,
        clock: Clock | None = None,
    ):
        self.client = client
        self.cache = cache
        self.throttle = throttle
        self.settings = settings
        self.clock = clock or SystemClock()

    async def check_url(self, url: str, response_format: str = "json") -> UrlCheckOutcome:
        """
        Check whether a URL is in the PhishTank database.

        Args:
            url: Complete URL including scheme
            response_format: PhishTank response format (json, xml, php)

        Returns:
            UrlCheckOutcome, with cached=True when served from cache

        Raises:
            InvalidArgumentError: If the URL or format is invalid
            UpstreamError: If the PhishTank request fails
        """
        url = validate_url(url)
        response_format = validate_format(response_format)

        cache_key = url_check_cache_key(url)
        cached = self.cache.get(cache_key)
        if cached is not None:
            return UrlCheckOutcome(url=url, result=cached, cached=True)

        await self.throttle.acquire()

        form = {"url": url, "format": response_format}
        if self.settings.api_key:
            form["app_key"] = self.settings.api_key

        response = await self.client.post_form(self.settings.check_url_endpoint, form)
        result = self._parse_result(response.text, response_format)

        self.cache.set(cache_key, result, ttl=self.settings.url_check_ttl)

        return UrlCheckOutcome(
            url=url,
            result=result,
            cached=False,
            rate_limit_info=RateLimitInfo.from_headers(response.headers),
        )

    async def check_multiple_urls(
        self, urls: list[str], delay_ms: int | None = DEFAULT_BATCH_DELAY_MS
    ) -> BatchOutcome:
        """
        Check URLs one after another with a fixed pause between them.

        A failing URL is recorded in the outcome and does not stop the
        batch. The pause applies after every URL except the last, cache
        hits included.

        Raises:
            InvalidArgumentError: If the list is empty or longer than 50
        """
        if not urls:
            raise InvalidArgumentError("URLs array is required")
        if len(urls) > MAX_BATCH_SIZE:
            raise InvalidArgumentError(f"Maximum {MAX_BATCH_SIZE} URLs allowed per batch")

        delay_ms = clamp_delay(delay_ms)
        batch = BatchOutcome(delay_ms=delay_ms)

        for index, url in enumerate(urls):
            try:
                outcome = await self.check_url(url)
                batch.items.append(BatchItem(url=url, outcome=outcome))
            except PhishTankError as e:
                logger.warning(f"Batch check failed for {url}: {e}")
                batch.items.append(BatchItem(url=url, error=e.describe()))

            if index < len(urls) - 1:
                await self.clock.sleep(delay_ms / 1000)

        logger.info(
            f"Batch check completed: {batch.successful}/{batch.total} successful"
        )
        return batch

    @staticmethod
    def _parse_result(body: str, response_format: str) -> dict[str, Any]:
        """Decode a check response; non-JSON formats are kept as raw text."""
        if response_format == "json":
            try:
                decoded = json.loads(body)
            except json.JSONDecodeError:
                logger.warning("PhishTank check response is not valid JSON")
                return {"format": response_format, "raw": body}
            if isinstance(decoded, dict):
                return decoded
        return {"format": response_format, "raw": body}

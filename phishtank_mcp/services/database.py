"""Cached access to the downloadable PhishTank database."""

import json
import logging

from phishtank_mcp.config import Settings
from phishtank_mcp.models import DatabaseSnapshot
from phishtank_mcp.services.phishtank_client import PhishTankClient
from phishtank_mcp.utils.cache import TTLCache
from phishtank_mcp.utils.clock import Clock, SystemClock, utc_now

logger = logging.getLogger(__name__)

DATABASE_CACHE_KEY = "phishtank_database"


class PhishDatabase:
    """
    Lazily downloads the PhishTank database and keeps it in the cache.

    The snapshot is the single source of truth for recent, search, details
    and statistics queries. Downloads are not throttled: they are one bulk
    call per hour rather than per-URL traffic.
    """

    def __init__(
        self,
        client: PhishTankClient,
        cache: TTLCache,
        settings: Settings,
        clock: Clock | None = None,
    ):
        self.client = client
        self.cache = cache
        self.settings = settings
        self.clock = clock or SystemClock()

    async def get_database(self) -> DatabaseSnapshot:
        """
        Return the cached snapshot, downloading it on first use or expiry.

        Raises:
            UpstreamError: If the download fails. No stale fallback is used.
        """
        snapshot = self.cache.get(DATABASE_CACHE_KEY)
        if snapshot is not None:
            return snapshot

        snapshot = await self.download()
        self.cache.set(DATABASE_CACHE_KEY, snapshot, ttl=self.settings.database_ttl)
        return snapshot

    async def download(self) -> DatabaseSnapshot:
        """Fetch and parse the full database."""
        logger.info("Downloading PhishTank database")

        response = await self.client.get(self.settings.database_url)

        try:
            payload = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("PhishTank database response is not JSON, treating as empty")
            payload = None

        snapshot = DatabaseSnapshot.from_payload(payload, downloaded_at=utc_now(self.clock))
        logger.info(f"Loaded {snapshot.total_entries} entries from PhishTank database")
        return snapshot


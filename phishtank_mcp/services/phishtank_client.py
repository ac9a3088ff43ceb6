"""HTTP client for the PhishTank check and download endpoints."""

import logging
from typing import Any

import httpx

from phishtank_mcp.config import Settings
from phishtank_mcp.exceptions import (
    RATE_LIMIT_STATUS_CODE,
    UpstreamError,
    UpstreamRateLimitedError,
)

logger = logging.getLogger(__name__)

MAX_ERROR_BODY_LENGTH = 500


class PhishTankClient:
    """
    Thin async HTTP adapter for PhishTank.

    Every request carries the configured User-Agent and a fixed timeout.
    Transport failures and non-2xx responses are raised uniformly as
    UpstreamError (UpstreamRateLimitedError for HTTP 509).
    """

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            settings: Server settings (user agent, timeout, endpoints)
            transport: Optional httpx transport, used by tests to stub PhishTank
        """
        self.settings = settings
        self.timeout = settings.http_timeout
        self.headers = {"User-Agent": settings.user_agent}
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def get_client(self) -> httpx.AsyncClient:
        """
        Get or create the shared HTTP client.

        Returns:
            Shared async HTTP client.
        """
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                headers=self.headers,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the shared HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("PhishTank HTTP client closed")

    async def get(self, url: str) -> httpx.Response:
        """
        Issue a GET request.

        Raises:
            UpstreamError: On transport failure or non-success status.
        """
        return await self._request("GET", url)

    async def post_form(self, url: str, data: dict[str, str]) -> httpx.Response:
        """
        Issue a form-encoded POST request.

        Raises:
            UpstreamError: On transport failure or non-success status.
        """
        return await self._request("POST", url, data=data)

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        client = self.get_client()
        try:
            response = await client.request(method, url, **kwargs)
            response.raise_for_status()
            return response

        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            body = e.response.text[:MAX_ERROR_BODY_LENGTH]
            context = {"url": self._redact(url), "status_code": status_code}

            if status_code == RATE_LIMIT_STATUS_CODE:
                logger.warning(f"PhishTank rate limit exceeded for {method} {context['url']}")
                raise UpstreamRateLimitedError(
                    "PhishTank rate limit exceeded",
                    status_code=status_code,
                    body=body,
                    context=context,
                    original_error=e,
                ) from e

            logger.error(f"PhishTank HTTP error {status_code}: {body}")
            raise UpstreamError(
                f"PhishTank returned HTTP {status_code}",
                status_code=status_code,
                body=body,
                context=context,
                original_error=e,
            ) from e

        except httpx.TimeoutException as e:
            logger.error(f"PhishTank timeout for {method} {self._redact(url)}")
            raise UpstreamError(
                f"Request timed out after {self.timeout}s",
                context={"url": self._redact(url)},
                original_error=e,
            ) from e

        except httpx.HTTPError as e:
            logger.error(f"PhishTank request error: {type(e).__name__}: {e}")
            raise UpstreamError(
                str(e) or type(e).__name__,
                context={"url": self._redact(url)},
                original_error=e,
            ) from e

    def _redact(self, url: str) -> str:
        """Hide the app key embedded in download URLs."""
        api_key = self.settings.api_key
        if api_key and api_key in url:
            return url.replace(api_key, "***")
        return url

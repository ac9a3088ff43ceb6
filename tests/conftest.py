"""Pytest configuration and shared fixtures."""

from collections.abc import Callable
from datetime import UTC, datetime
from urllib.parse import parse_qs

import httpx
import pytest

from phishtank_mcp.api.tools import PhishTankTools
from phishtank_mcp.config import Settings

CHECK_ENDPOINT = "http://checkurl.phishtank.com/checkurl/"


class FakeClock:
    """Controllable clock: sleeping advances time instantly."""

    def __init__(self, start: float):
        self.now = start
        self.sleeps: list[float] = []

    def time(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        if seconds > 0:
            self.now += seconds

    def advance(self, seconds: float) -> None:
        self.now += seconds


def form_data(request: httpx.Request) -> dict[str, str]:
    """Decode a form-encoded request body."""
    parsed = parse_qs(request.content.decode())
    return {key: values[0] for key, values in parsed.items()}


def check_response(
    url: str,
    in_database: bool = False,
    verified: bool = False,
    valid: bool = False,
    phish_id: int | None = None,
) -> dict:
    """PhishTank check API JSON body."""
    results = {"url": url, "in_database": in_database}
    if in_database:
        results.update(
            {
                "phish_id": phish_id,
                "phish_detail_page": f"http://www.phishtank.com/phish_detail.php?phish_id={phish_id}",
                "verified": verified,
                "verified_at": "2024-06-01T10:00:00+00:00" if verified else None,
                "valid": valid,
                "submitted_at": "2024-06-01T09:00:00+00:00",
            }
        )
    return {
        "meta": {"timestamp": "2024-06-15T12:00:00+00:00", "serverid": "abc123"},
        "results": results,
    }


@pytest.fixture
def start_time() -> datetime:
    return datetime(2024, 6, 15, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def clock(start_time) -> FakeClock:
    return FakeClock(start_time.timestamp())


@pytest.fixture
def settings() -> Settings:
    """Settings without an app key and without reading .env."""
    return Settings(_env_file=None, api_key=None, user_agent="phishtank-mcp-tests/1.0")


@pytest.fixture
def keyed_settings() -> Settings:
    return Settings(_env_file=None, api_key="secret-key", user_agent="phishtank-mcp-tests/1.0")


@pytest.fixture
def sample_entries() -> list[dict]:
    """Database rows as returned by online-valid.json."""
    return [
        {
            "phish_id": 1001,
            "url": "http://paypal-login.example.net/verify",
            "phish_detail_url": "http://www.phishtank.com/phish_detail.php?phish_id=1001",
            "submission_time": "2024-06-14T08:30:00+00:00",
            "verified": "yes",
            "verification_time": "2024-06-14T09:00:00+00:00",
            "online": "yes",
            "target": "PayPal",
            "details": [
                {
                    "ip_address": "192.0.2.10",
                    "cidr_block": "192.0.2.0/24",
                    "announcing_network": "64500",
                    "rir": "arin",
                    "detail_time": "2024-06-14T08:31:00+00:00",
                }
            ],
        },
        {
            "phish_id": 1002,
            "url": "http://apple-id.example.org/signin",
            "phish_detail_url": "http://www.phishtank.com/phish_detail.php?phish_id=1002",
            "submission_time": "2024-06-13T23:59:59+00:00",
            "verified": "yes",
            "verification_time": "2024-06-14T01:00:00+00:00",
            "online": "no",
            "target": "Apple",
        },
        {
            "phish_id": 1003,
            "url": "http://secure-paypal.example.com/update",
            "phish_detail_url": "http://www.phishtank.com/phish_detail.php?phish_id=1003",
            "submission_time": "2024-06-15T06:00:00+00:00",
            "verified": "no",
            "verification_time": "",
            "online": "yes",
            "target": "PayPal Inc.",
        },
        {
            "phish_id": 1004,
            "url": "http://bank.example.com/login",
            "phish_detail_url": "http://www.phishtank.com/phish_detail.php?phish_id=1004",
            "submission_time": "2024-06-01T12:00:00+00:00",
            "verified": "yes",
            "verification_time": "2024-06-01T13:00:00+00:00",
            "online": "yes",
            "target": "Other",
        },
        {
            "phish_id": 1005,
            "url": "http://no-target.example.com/",
            "phish_detail_url": "http://www.phishtank.com/phish_detail.php?phish_id=1005",
            "submission_time": "2024-06-14T00:00:00+00:00",
            "verified": "yes",
            "verification_time": "2024-06-14T02:00:00+00:00",
            "online": "yes",
        },
    ]


@pytest.fixture
def make_tools(clock, settings) -> Callable[..., PhishTankTools]:
    """Build a PhishTankTools service talking to a stubbed PhishTank."""

    def factory(handler, settings_override: Settings | None = None) -> PhishTankTools:
        return PhishTankTools(
            settings_override or settings,
            clock=clock,
            transport=httpx.MockTransport(handler),
        )

    return factory

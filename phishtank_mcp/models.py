"""Data models for PhishTank entries, snapshots and lookup results."""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from functools import cached_property
from typing import Any

logger = logging.getLogger(__name__)


def parse_timestamp(value: str | None) -> datetime | None:
    """
    Parse a PhishTank ISO 8601 timestamp.

    Naive timestamps are treated as UTC.

    Returns:
        Aware datetime, or None if the value is missing or malformed
    """
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


@dataclass(frozen=True)
class PhishDetail:
    """Network details recorded for a phish."""

    ip_address: str = ""
    cidr_block: str = ""
    announcing_network: str = ""
    rir: str = ""
    detail_time: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PhishDetail":
        return cls(
            ip_address=str(data.get("ip_address") or ""),
            cidr_block=str(data.get("cidr_block") or ""),
            announcing_network=str(data.get("announcing_network") or ""),
            rir=str(data.get("rir") or ""),
            detail_time=str(data.get("detail_time") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "ip_address": self.ip_address,
            "cidr_block": self.cidr_block,
            "announcing_network": self.announcing_network,
            "rir": self.rir,
            "detail_time": self.detail_time,
        }


@dataclass(frozen=True)
class PhishEntry:
    """One phishing submission from the PhishTank database."""

    phish_id: int
    url: str
    phish_detail_url: str = ""
    submission_time: str = ""
    verified: str = "unknown"  # yes, no, unknown
    verification_time: str = ""
    online: str = "no"  # yes, no
    target: str | None = None
    details: tuple[PhishDetail, ...] | None = None
    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    @cached_property
    def submitted_at(self) -> datetime | None:
        """Submission time as an aware datetime, None if unparseable."""
        return parse_timestamp(self.submission_time)

    @property
    def is_verified(self) -> bool:
        return self.verified == "yes"

    @property
    def is_online(self) -> bool:
        return self.online == "yes"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PhishEntry":
        """
        Build an entry from one element of the downloaded JSON array.

        Raises:
            ValueError: If phish_id is missing or not an integer
        """
        known = {
            "phish_id",
            "url",
            "phish_detail_url",
            "submission_time",
            "verified",
            "verification_time",
            "online",
            "target",
            "details",
        }

        raw_details = data.get("details")
        details = None
        if isinstance(raw_details, list):
            details = tuple(
                PhishDetail.from_dict(item) for item in raw_details if isinstance(item, dict)
            )

        target = data.get("target")
        return cls(
            phish_id=int(data["phish_id"]),
            url=str(data.get("url") or ""),
            phish_detail_url=str(data.get("phish_detail_url") or ""),
            submission_time=str(data.get("submission_time") or ""),
            verified=str(data.get("verified") or "unknown"),
            verification_time=str(data.get("verification_time") or ""),
            online=str(data.get("online") or "no"),
            target=str(target) if target else None,
            details=details,
            extra={k: v for k, v in data.items() if k not in known},
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data: dict[str, Any] = {
            "phish_id": self.phish_id,
            "url": self.url,
            "phish_detail_url": self.phish_detail_url,
            "submission_time": self.submission_time,
            "verified": self.verified,
            "verification_time": self.verification_time,
            "online": self.online,
        }
        if self.target is not None:
            data["target"] = self.target
        if self.details is not None:
            data["details"] = [detail.to_dict() for detail in self.details]
        data.update(self.extra)
        return data


@dataclass(frozen=True)
class DatabaseSnapshot:
    """A full copy of the PhishTank database, replaced wholesale on refresh."""

    entries: tuple[PhishEntry, ...]
    downloaded_at: datetime | None = None

    @property
    def total_entries(self) -> int:
        return len(self.entries)

    @classmethod
    def from_payload(
        cls, payload: Any, downloaded_at: datetime | None = None
    ) -> "DatabaseSnapshot":
        """
        Build a snapshot from the decoded download body.

        Anything other than a JSON array yields an empty snapshot.
        Malformed elements are skipped.
        """
        if not isinstance(payload, list):
            logger.warning(
                f"Unexpected database payload type {type(payload).__name__}, "
                "treating as empty"
            )
            return cls(entries=(), downloaded_at=downloaded_at)

        entries: list[PhishEntry] = []
        skipped = 0
        for item in payload:
            if not isinstance(item, dict):
                skipped += 1
                continue
            try:
                entries.append(PhishEntry.from_dict(item))
            except (KeyError, TypeError, ValueError):
                skipped += 1

        if skipped:
            logger.warning(f"Skipped {skipped} malformed database entries")

        return cls(entries=tuple(entries), downloaded_at=downloaded_at)


@dataclass
class RateLimitInfo:
    """Request budget reported by PhishTank response headers."""

    interval: str
    limit: int
    count: int

    @property
    def remaining(self) -> int:
        return self.limit - self.count

    @classmethod
    def from_headers(cls, headers: Any) -> "RateLimitInfo | None":
        """
        Extract rate limit telemetry from response headers.

        Returns:
            RateLimitInfo, or None unless all three headers are present
            and the counters are integers
        """
        interval = headers.get("x-request-limit-interval")
        limit = headers.get("x-request-limit")
        count = headers.get("x-request-count")

        if not (interval and limit and count):
            return None

        try:
            return cls(interval=interval, limit=int(limit), count=int(count))
        except ValueError:
            logger.debug(f"Unparseable rate limit headers: limit={limit} count={count}")
            return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "interval": self.interval,
            "limit": self.limit,
            "count": self.count,
            "remaining": self.remaining,
        }


@dataclass
class UrlCheckOutcome:
    """Result of a single URL check, fresh or served from cache."""

    url: str
    result: dict[str, Any]
    cached: bool
    rate_limit_info: RateLimitInfo | None = None


@dataclass
class TargetCount:
    """Number of phishes targeting one brand."""

    target: str
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {"target": self.target, "count": self.count}


@dataclass
class PhishStats:
    """Aggregate statistics over a submission window."""

    total_phish: int
    total_verified: int
    total_online: int
    top_targets: list[TargetCount]
    date_from: str
    date_to: str

    @property
    def recent_submissions(self) -> int:
        return self.total_phish

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_phish": self.total_phish,
            "total_verified": self.total_verified,
            "total_online": self.total_online,
            "top_targets": [target.to_dict() for target in self.top_targets],
            "recent_submissions": self.recent_submissions,
            "date_range": {"from": self.date_from, "to": self.date_to},
        }

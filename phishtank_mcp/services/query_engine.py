"""Filtering, sorting and aggregation over the PhishTank database snapshot."""

from collections import Counter
from collections.abc import Iterable
from datetime import UTC, date, datetime, time, timedelta

from phishtank_mcp.models import PhishEntry, PhishStats, TargetCount

_OLDEST = datetime.min.replace(tzinfo=UTC)


def sort_by_submission(entries: Iterable[PhishEntry]) -> list[PhishEntry]:
    """
    Sort entries newest first.

    Entries whose submission time cannot be parsed go last, in their
    original order.
    """
    return sorted(
        entries,
        key=lambda entry: (
            entry.submitted_at is not None,
            entry.submitted_at or _OLDEST,
        ),
        reverse=True,
    )


def recent_entries(
    entries: Iterable[PhishEntry], limit: int, include_offline: bool = False
) -> list[PhishEntry]:
    """Most recent submissions, online ones only unless include_offline."""
    if not include_offline:
        entries = [entry for entry in entries if entry.is_online]
    return sort_by_submission(entries)[:limit]


def search_by_target(
    entries: Iterable[PhishEntry],
    target: str,
    limit: int,
    verified_only: bool = True,
) -> list[PhishEntry]:
    """
    Entries whose target brand contains the query, case-insensitively.

    Entries without a target never match.
    """
    needle = target.strip().lower()
    matches = [
        entry
        for entry in entries
        if entry.target
        and needle in entry.target.lower()
        and (not verified_only or entry.is_verified)
    ]
    return sort_by_submission(matches)[:limit]


def find_by_id(entries: Iterable[PhishEntry], phish_id: int) -> PhishEntry | None:
    """Exact lookup by phish ID."""
    return next((entry for entry in entries if entry.phish_id == phish_id), None)


def day_bounds(start_date: date, end_date: date) -> tuple[datetime, datetime]:
    """
    Inclusive UTC window covering whole days.

    The end bound is 23:59:59.999 on end_date.
    """
    start = datetime.combine(start_date, time.min, tzinfo=UTC)
    end = datetime.combine(end_date, time(23, 59, 59, 999000), tzinfo=UTC)
    return start, end


def search_by_date_range(
    entries: Iterable[PhishEntry],
    start_date: date,
    end_date: date,
    limit: int,
) -> list[PhishEntry]:
    """Entries submitted between start_date and end_date, both days included."""
    start, end = day_bounds(start_date, end_date)
    matches = [
        entry
        for entry in entries
        if entry.submitted_at is not None and start <= entry.submitted_at <= end
    ]
    return sort_by_submission(matches)[:limit]


def top_targets(entries: Iterable[PhishEntry], limit: int) -> list[TargetCount]:
    """Most targeted brands, highest count first. Ties keep first-seen order."""
    counts = Counter(entry.target for entry in entries if entry.target)
    return [
        TargetCount(target=target, count=count)
        for target, count in counts.most_common(limit)
    ]


def compute_stats(
    entries: Iterable[PhishEntry],
    days: int,
    top_targets_limit: int,
    now: datetime,
) -> PhishStats:
    """
    Statistics for submissions in the last `days` days.

    Args:
        entries: Database entries
        days: Size of the window ending at `now`
        top_targets_limit: Number of brands to rank
        now: Aware datetime marking the end of the window

    Returns:
        PhishStats with totals, top targets and the date range analyzed
    """
    cutoff = now - timedelta(days=days)
    window = [
        entry
        for entry in entries
        if entry.submitted_at is not None and entry.submitted_at >= cutoff
    ]

    return PhishStats(
        total_phish=len(window),
        total_verified=sum(1 for entry in window if entry.is_verified),
        total_online=sum(1 for entry in window if entry.is_online),
        top_targets=top_targets(window, top_targets_limit),
        date_from=cutoff.date().isoformat(),
        date_to=now.date().isoformat(),
    )

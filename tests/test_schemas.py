"""Tests for tool argument validation."""

from datetime import date

import pytest

from phishtank_mcp.api.schemas import (
    CheckMultipleUrlsArgs,
    CheckUrlArgs,
    DateSearchArgs,
    PhishDetailsArgs,
    PhishStatsArgs,
    RecentPhishArgs,
    TargetSearchArgs,
)
from phishtank_mcp.exceptions import InvalidArgumentError


class TestCheckUrlArgs:
    """Tests for check_url arguments."""

    def test_defaults(self):
        args = CheckUrlArgs.parse({"url": "https://example.com"})

        assert args.url == "https://example.com"
        assert args.format == "json"

    @pytest.mark.parametrize("arguments", [None, {}, {"url": ""}, {"url": None}])
    def test_url_required(self, arguments):
        with pytest.raises(InvalidArgumentError, match="URL parameter is required"):
            CheckUrlArgs.parse(arguments)

    def test_malformed_url(self):
        with pytest.raises(InvalidArgumentError, match="Invalid URL format"):
            CheckUrlArgs.parse({"url": "example.com"})

    def test_unknown_format(self):
        with pytest.raises(InvalidArgumentError, match="Invalid format"):
            CheckUrlArgs.parse({"url": "https://example.com", "format": "csv"})

    def test_extra_arguments_ignored(self):
        args = CheckUrlArgs.parse({"url": "https://example.com", "verbose": True})

        assert args.url == "https://example.com"


class TestCheckMultipleUrlsArgs:
    """Tests for check_multiple_urls arguments."""

    def test_empty_list(self):
        with pytest.raises(InvalidArgumentError, match="URLs array is required"):
            CheckMultipleUrlsArgs.parse({"urls": []})

    def test_missing_list(self):
        with pytest.raises(InvalidArgumentError, match="URLs array is required"):
            CheckMultipleUrlsArgs.parse({})

    def test_too_many(self):
        urls = [f"https://{i}.example.com" for i in range(51)]

        with pytest.raises(InvalidArgumentError, match="Maximum 50 URLs allowed per batch"):
            CheckMultipleUrlsArgs.parse({"urls": urls})

    def test_fifty_allowed(self):
        urls = [f"https://{i}.example.com" for i in range(50)]

        assert len(CheckMultipleUrlsArgs.parse({"urls": urls}).urls) == 50

    @pytest.mark.parametrize(("delay", "expected"), [(None, 1000), (0, 500), (3000, 3000), (20000, 10000)])
    def test_delay_clamped(self, delay, expected):
        args = CheckMultipleUrlsArgs.parse({"urls": ["https://a.com"], "delay": delay})

        assert args.delay == expected


class TestDatabaseQueryArgs:
    """Tests for clamping of database query bounds."""

    @pytest.mark.parametrize(("limit", "expected"), [(None, 100), (0, 1), (-5, 1), (250, 250), (5000, 1000)])
    def test_recent_limit(self, limit, expected):
        assert RecentPhishArgs.parse({"limit": limit}).limit == expected

    def test_recent_defaults(self):
        args = RecentPhishArgs.parse({})

        assert args.include_offline is False

    def test_target_normalized(self):
        args = TargetSearchArgs.parse({"target": "  PayPal "})

        assert args.target == "paypal"
        assert args.limit == 50
        assert args.verified_only is True

    @pytest.mark.parametrize("target", [None, "", "   "])
    def test_target_required(self, target):
        with pytest.raises(InvalidArgumentError, match="Target parameter is required"):
            TargetSearchArgs.parse({"target": target})

    def test_target_limit_clamped(self):
        assert TargetSearchArgs.parse({"target": "apple", "limit": 900}).limit == 500

    @pytest.mark.parametrize("phish_id", [None, 0, -1])
    def test_phish_id_required(self, phish_id):
        with pytest.raises(InvalidArgumentError, match="Valid phish_id is required"):
            PhishDetailsArgs.parse({"phish_id": phish_id})

    def test_phish_id_wrong_type(self):
        with pytest.raises(InvalidArgumentError, match="phish_id"):
            PhishDetailsArgs.parse({"phish_id": "abc"})

    def test_stats_clamped(self):
        args = PhishStatsArgs.parse({"days": 90, "top_targets_limit": 0})

        assert args.days == 30
        assert args.top_targets_limit == 1

    def test_stats_defaults(self):
        args = PhishStatsArgs.parse(None)

        assert (args.days, args.top_targets_limit) == (7, 10)


class TestDateSearchArgs:
    """Tests for date range arguments."""

    def test_valid_range(self):
        args = DateSearchArgs.parse({"start_date": "2024-01-01", "end_date": "2024-01-31"})

        assert args.start == date(2024, 1, 1)
        assert args.end == date(2024, 1, 31)
        assert args.limit == 100

    def test_same_day(self):
        args = DateSearchArgs.parse({"start_date": "2024-01-01", "end_date": "2024-01-01"})

        assert args.start == args.end

    @pytest.mark.parametrize(
        "arguments",
        [{}, {"start_date": "2024-01-01"}, {"end_date": "2024-01-01"}, {"start_date": "", "end_date": ""}],
    )
    def test_both_required(self, arguments):
        with pytest.raises(InvalidArgumentError, match="Both start_date and end_date are required"):
            DateSearchArgs.parse(arguments)

    @pytest.mark.parametrize("value", ["2024-1-1", "01/02/2024", "2024-01-01T00:00:00", "２０２４-01-01"])
    def test_bad_format(self, value):
        with pytest.raises(InvalidArgumentError, match="Dates must be in YYYY-MM-DD format"):
            DateSearchArgs.parse({"start_date": value, "end_date": "2024-12-31"})

    def test_impossible_date(self):
        with pytest.raises(InvalidArgumentError, match="Invalid date '2024-02-30'"):
            DateSearchArgs.parse({"start_date": "2024-02-30", "end_date": "2024-03-01"})

    def test_start_after_end(self):
        with pytest.raises(InvalidArgumentError, match="Start date must be before end date"):
            DateSearchArgs.parse({"start_date": "2024-02-01", "end_date": "2024-01-01"})

    def test_limit_clamped(self):
        args = DateSearchArgs.parse(
            {"start_date": "2024-01-01", "end_date": "2024-01-02", "limit": 0}
        )

        assert args.limit == 1

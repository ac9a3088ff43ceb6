"""Pydantic schemas for tool arguments.

Numeric bounds are clamped to their allowed range. Missing required
fields, wrong types and malformed URLs or dates are rejected with
InvalidArgumentError.
"""

import re
from datetime import date
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from phishtank_mcp.exceptions import InvalidArgumentError
from phishtank_mcp.services.url_checker import (
    DEFAULT_BATCH_DELAY_MS,
    MAX_BATCH_SIZE,
    clamp_delay,
    validate_format,
    validate_url,
)

DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)


def _clamp(value: int, minimum: int, maximum: int) -> int:
    return min(max(value, minimum), maximum)


class ToolArguments(BaseModel):
    """Base class for validated tool arguments."""

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def drop_null_values(cls, data: Any) -> Any:
        """Treat explicit nulls as omitted so defaults apply."""
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data

    @classmethod
    def parse(cls, arguments: dict[str, Any] | None) -> Self:
        """
        Validate raw tool arguments.

        Raises:
            InvalidArgumentError: With the first validation problem found
        """
        try:
            return cls.model_validate(arguments or {})
        except ValidationError as e:
            raise InvalidArgumentError(
                _describe_validation_error(e), context={"errors": e.errors()}
            ) from e


def _describe_validation_error(error: ValidationError) -> str:
    first = error.errors()[0]
    ctx_error = first.get("ctx", {}).get("error")
    if first["type"] == "value_error" and ctx_error is not None:
        return str(ctx_error)

    location = ".".join(str(part) for part in first["loc"])
    if location:
        return f"Invalid argument '{location}': {first['msg']}"
    return f"Invalid arguments: {first['msg']}"


class CheckUrlArgs(ToolArguments):
    """Arguments for check_url."""

    url: str = Field(default="", validate_default=True)
    format: str = Field(default="json")

    @field_validator("url")
    @classmethod
    def check_url_value(cls, v: str) -> str:
        try:
            return validate_url(v)
        except InvalidArgumentError as e:
            raise ValueError(e.message) from e

    @field_validator("format")
    @classmethod
    def check_format_value(cls, v: str) -> str:
        try:
            return validate_format(v)
        except InvalidArgumentError as e:
            raise ValueError(e.message) from e


class CheckMultipleUrlsArgs(ToolArguments):
    """Arguments for check_multiple_urls.

    Individual URLs are validated during the batch so that one bad URL
    becomes a failed item rather than failing the whole call.
    """

    urls: list[Any] = Field(default_factory=list, validate_default=True)
    delay: int = Field(default=DEFAULT_BATCH_DELAY_MS)

    @field_validator("urls")
    @classmethod
    def validate_urls(cls, v: list[Any]) -> list[Any]:
        if not v:
            raise ValueError("URLs array is required")
        if len(v) > MAX_BATCH_SIZE:
            raise ValueError(f"Maximum {MAX_BATCH_SIZE} URLs allowed per batch")
        return v

    @field_validator("delay")
    @classmethod
    def clamp_delay_value(cls, v: int) -> int:
        return clamp_delay(v)


class RecentPhishArgs(ToolArguments):
    """Arguments for get_recent_phish."""

    limit: int = 100
    include_offline: bool = False

    @field_validator("limit")
    @classmethod
    def clamp_limit(cls, v: int) -> int:
        return _clamp(v, 1, 1000)


class TargetSearchArgs(ToolArguments):
    """Arguments for search_phish_by_target."""

    target: str = Field(default="", validate_default=True)
    limit: int = 50
    verified_only: bool = True

    @field_validator("target")
    @classmethod
    def validate_target(cls, v: str) -> str:
        v = v.strip().lower()
        if not v:
            raise ValueError("Target parameter is required")
        return v

    @field_validator("limit")
    @classmethod
    def clamp_limit(cls, v: int) -> int:
        return _clamp(v, 1, 500)


class PhishDetailsArgs(ToolArguments):
    """Arguments for get_phish_details."""

    phish_id: int = Field(default=0, validate_default=True)

    @field_validator("phish_id")
    @classmethod
    def validate_phish_id(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Valid phish_id is required")
        return v


class PhishStatsArgs(ToolArguments):
    """Arguments for get_phish_stats."""

    days: int = 7
    top_targets_limit: int = 10

    @field_validator("days")
    @classmethod
    def clamp_days(cls, v: int) -> int:
        return _clamp(v, 1, 30)

    @field_validator("top_targets_limit")
    @classmethod
    def clamp_top_targets(cls, v: int) -> int:
        return _clamp(v, 1, 50)


class DateSearchArgs(ToolArguments):
    """Arguments for search_phish_by_date."""

    start_date: str = Field(default="", validate_default=True)
    end_date: str = Field(default="", validate_default=True)
    limit: int = 100

    @field_validator("start_date", "end_date")
    @classmethod
    def validate_date_format(cls, v: str) -> str:
        if not v:
            raise ValueError("Both start_date and end_date are required")
        if not DATE_PATTERN.fullmatch(v):
            raise ValueError("Dates must be in YYYY-MM-DD format")
        try:
            date.fromisoformat(v)
        except ValueError as e:
            raise ValueError(f"Invalid date '{v}': {e}") from e
        return v

    @field_validator("limit")
    @classmethod
    def clamp_limit(cls, v: int) -> int:
        return _clamp(v, 1, 500)

    @model_validator(mode="after")
    def check_order(self) -> Self:
        if self.start > self.end:
            raise ValueError("Start date must be before end date")
        return self

    @property
    def start(self) -> date:
        return date.fromisoformat(self.start_date)

    @property
    def end(self) -> date:
        return date.fromisoformat(self.end_date)

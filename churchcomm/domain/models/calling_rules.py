"""
Calling Rules Model
Organization-configurable calling window for automated outreach
"""
from pydantic import BaseModel, Field
from typing import Optional, Tuple
from datetime import datetime, time
import pytz


DEFAULT_TIMEZONE = "America/New_York"


def resolve_timezone(name: Optional[str], fallback: str = DEFAULT_TIMEZONE):
    """pytz timezone for name, falling back when absent or unknown."""
    try:
        return pytz.timezone(name or fallback)
    except pytz.exceptions.UnknownTimeZoneError:
        return pytz.timezone(fallback)


def to_local(check_time: datetime, tz) -> datetime:
    """Convert an instant to tz wall-clock time (naive input is taken as UTC)."""
    if check_time.tzinfo is None:
        check_time = pytz.UTC.localize(check_time)
    return check_time.astimezone(tz)


def parse_hhmm(value: str) -> time:
    """Parse "HH:MM" (seconds, if present, are ignored)."""
    parts = value.strip().split(":")
    if len(parts) < 2:
        raise ValueError(f"invalid time of day: {value!r}")
    return time(int(parts[0]), int(parts[1]))


class CallingWindow(BaseModel):
    """
    Local-time range in which an organization permits automated calls.

    Stored on the organizations table as calling_window_start,
    calling_window_end and timezone. Any of them may be missing.
    """

    time_window_start: Optional[str] = Field(
        default=None,
        description="Start time for calling (HH:MM, organization local time)"
    )
    time_window_end: Optional[str] = Field(
        default=None,
        description="End time for calling (HH:MM, exclusive)"
    )
    timezone: Optional[str] = Field(
        default=None,
        description="IANA timezone for the window (e.g. 'America/Chicago')"
    )

    @property
    def is_configured(self) -> bool:
        return bool(self.time_window_start and self.time_window_end and self.timezone)

    def is_within_time_window(self, check_time: Optional[datetime] = None) -> Tuple[bool, str]:
        """
        Check whether check_time falls inside [start, end) in local time.

        Missing configuration permits outreach. Malformed configuration
        (unknown timezone, unparsable times) blocks it.

        Args:
            check_time: Instant to check (default: now)

        Returns:
            (is_allowed, reason)
        """
        if not self.is_configured:
            return True, "missing_calling_window_config_default_allow"

        try:
            tz = pytz.timezone(self.timezone)
        except pytz.exceptions.UnknownTimeZoneError:
            return False, f"unknown_timezone_{self.timezone}"

        try:
            start_time = parse_hhmm(self.time_window_start)
            end_time = parse_hhmm(self.time_window_end)
        except ValueError:
            return False, "invalid_time_format"

        local = to_local(check_time or datetime.now(pytz.UTC), tz)
        now_minutes = local.hour * 60 + local.minute
        start_minutes = start_time.hour * 60 + start_time.minute
        end_minutes = end_time.hour * 60 + end_time.minute

        if start_minutes <= now_minutes < end_minutes:
            return True, "within_time_window"
        return False, f"outside_time_window_{self.time_window_start}_{self.time_window_end}"

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "CallingWindow":
        """Create from an organizations row."""
        data = data or {}
        return cls(
            time_window_start=data.get("calling_window_start"),
            time_window_end=data.get("calling_window_end"),
            timezone=data.get("timezone"),
        )

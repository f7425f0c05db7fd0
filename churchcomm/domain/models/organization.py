"""
Organization Model
Tenant boundary for all outreach scheduling and execution
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime

from churchcomm.domain.models.calling_rules import CallingWindow, resolve_timezone, to_local


class Organization(BaseModel):
    """A church. Every query made on its behalf is scoped by id."""

    id: str
    name: str = ""
    calling_window_start: Optional[str] = None
    calling_window_end: Optional[str] = None
    timezone: Optional[str] = None
    phone_number_type: Optional[str] = Field(
        default=None,
        description="'dedicated' to call from dedicated_phone_number, else the shared default"
    )
    dedicated_phone_number: Optional[str] = None

    model_config = {"extra": "ignore"}

    @field_validator("name", mode="before")
    @classmethod
    def _blank_name(cls, value):
        return value or ""

    @property
    def calling_window(self) -> CallingWindow:
        return CallingWindow(
            time_window_start=self.calling_window_start,
            time_window_end=self.calling_window_end,
            timezone=self.timezone,
        )

    @property
    def tz(self):
        """pytz timezone, defaulting when unset or unknown."""
        return resolve_timezone(self.timezone)

    def local_time(self, now: datetime) -> datetime:
        """now as wall-clock time in the organization's timezone."""
        return to_local(now, self.tz)

    def originating_number(self, default_phone_number_id: Optional[str]) -> Optional[str]:
        """Phone number id calls are placed from."""
        if self.phone_number_type == "dedicated" and self.dedicated_phone_number:
            return self.dedicated_phone_number
        return default_phone_number_id

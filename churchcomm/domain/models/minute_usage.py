"""
Minute Usage Model
Per-organization, per-billing-period outreach minute counter
"""
from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import datetime


class MinuteUsage(BaseModel):
    """Latest minute_usage row for an organization. Used only as a gate."""

    organization_id: Optional[str] = None
    billing_period_start: Optional[datetime] = None
    minutes_used: float = 0.0
    minutes_included: int = 0
    overage_approved: bool = False

    model_config = {"extra": "ignore"}

    @field_validator("minutes_used", mode="before")
    @classmethod
    def _coerce_used(cls, value):
        # numeric columns arrive as strings from PostgREST
        try:
            return float(value) if value is not None else 0.0
        except (TypeError, ValueError):
            return 0.0

    @field_validator("minutes_included", "overage_approved", mode="before")
    @classmethod
    def _null_to_zero(cls, value):
        return value or 0

    def is_exhausted(self) -> bool:
        """Included minutes used up and no overage approval."""
        return self.minutes_used >= self.minutes_included and not self.overage_approved

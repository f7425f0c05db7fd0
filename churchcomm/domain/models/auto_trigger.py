"""
Auto Trigger Model
Per-organization configuration of one life-event outreach rule
"""
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from enum import Enum


class TriggerKind(str, Enum):
    """Life-event category causing an outreach attempt"""
    FIRST_TIMER = "first_timer"
    BIRTHDAY = "birthday"
    ANNIVERSARY = "anniversary"


DEFAULT_DELAY_HOURS = 24
DEFAULT_ANNIVERSARY_MILESTONES = [1, 6, 12]


class AutoTrigger(BaseModel):
    """
    Row of the auto_triggers table. Read-only to the scheduler.

    delay_hours applies to first-timer follow-up; anniversary_milestones
    lists the month counts at which an anniversary call fires.
    """

    id: str
    organization_id: str
    trigger_type: TriggerKind
    enabled: bool = True
    script_id: Optional[str] = None
    delay_hours: int = Field(default=DEFAULT_DELAY_HOURS)
    anniversary_milestones: List[int] = Field(
        default_factory=lambda: list(DEFAULT_ANNIVERSARY_MILESTONES)
    )

    model_config = {"extra": "ignore"}

    @field_validator("delay_hours", mode="before")
    @classmethod
    def _default_delay(cls, value):
        return value or DEFAULT_DELAY_HOURS

    @field_validator("anniversary_milestones", mode="before")
    @classmethod
    def _default_milestones(cls, value):
        return value or list(DEFAULT_ANNIVERSARY_MILESTONES)

"""
Scheduler Result Models
Per-organization and per-tick summaries returned by the scheduler
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from enum import Enum


class SkipReason(str, Enum):
    """Why an organization was not processed this tick"""
    OUTSIDE_CALLING_WINDOW = "outside_calling_window"
    TRIGGER_FETCH_ERROR = "trigger_fetch_error"
    NO_ENABLED_TRIGGERS = "no_enabled_triggers"
    MINUTE_LIMIT_REACHED = "minute_limit_reached"
    PROCESSING_ERROR = "processing_error"


class OrganizationResult(BaseModel):
    organization_id: str
    triggered: int = 0
    retried: int = 0
    executed: int = 0
    skipped: Optional[SkipReason] = None
    detail: Optional[str] = None

    model_config = {"use_enum_values": True}


class TickSummary(BaseModel):
    message: str = "Auto call trigger evaluation complete"
    organizations_evaluated: int = 0
    total_triggered: int = 0
    total_executed: int = 0
    results: List[OrganizationResult] = Field(default_factory=list)

"""
Outreach Attempt Model
One intended or executed automated call (call_attempts table)
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum

from churchcomm.domain.models.auto_trigger import TriggerKind


class AttemptStatus(str, Enum):
    """Status of an outreach attempt"""
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


# Fixed failure reasons for data-integrity gaps (never retried)
NO_PHONE_NUMBER_ERROR = "No phone number"
SCRIPT_NOT_FOUND_ERROR = "Script not found"

PROVIDER_NAME = "vapi"


class OutreachIntent(BaseModel):
    """A candidate call emitted by a trigger evaluator, not yet persisted."""

    organization_id: str
    person_id: str
    phone_number: str
    script_id: str
    trigger_type: TriggerKind
    first_name: Optional[str] = None

    model_config = {"use_enum_values": True}


class OutreachAttempt(BaseModel):
    """
    Scheduler's central mutable entity.

    Lifecycle: scheduled -> in_progress -> completed | failed, with failed
    attempts re-queued to scheduled by the retry manager while
    retry_count stays under the bound.
    """

    id: str
    organization_id: str
    person_id: Optional[str] = None
    script_id: Optional[str] = None
    trigger_type: Optional[TriggerKind] = None  # None for manually launched calls
    phone_number: Optional[str] = None
    status: AttemptStatus = AttemptStatus.SCHEDULED
    provider: str = PROVIDER_NAME
    recurrence_bucket: Optional[str] = None

    scheduled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    dispatch_claimed_at: Optional[datetime] = None
    started_at: Optional[datetime] = None

    vapi_call_id: Optional[str] = None
    retry_count: int = Field(default=0, ge=0)
    error_message: Optional[str] = None

    model_config = {"use_enum_values": True, "extra": "ignore"}

    @classmethod
    def new_row(cls, intent: OutreachIntent, recurrence_bucket: str, now: datetime) -> dict:
        """Insert payload for a freshly scheduled attempt."""
        return {
            "organization_id": intent.organization_id,
            "person_id": intent.person_id,
            "phone_number": intent.phone_number,
            "script_id": intent.script_id,
            "provider": PROVIDER_NAME,
            "status": AttemptStatus.SCHEDULED.value,
            "trigger_type": intent.trigger_type,
            "recurrence_bucket": recurrence_bucket,
            "scheduled_at": now.isoformat(),
        }

    def __repr__(self) -> str:
        return (
            f"OutreachAttempt(id={self.id[:8]}..., "
            f"person={self.person_id}, "
            f"trigger={self.trigger_type}, "
            f"status={self.status}, "
            f"retries={self.retry_count})"
        )

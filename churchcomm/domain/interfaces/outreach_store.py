"""
Outreach Store Interface
Narrow, organization-scoped access to the relational store
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from churchcomm.domain.models.auto_trigger import AutoTrigger
from churchcomm.domain.models.call_script import CallScript
from churchcomm.domain.models.minute_usage import MinuteUsage
from churchcomm.domain.models.organization import Organization
from churchcomm.domain.models.outreach_attempt import OutreachAttempt
from churchcomm.domain.models.person import Person


@dataclass
class PeopleQuery:
    """
    Directory filter pushed down to the store.

    Callable-only filtering (phone present, not do-not-call) is always
    applied by the store; the fields below narrow it further.
    """
    statuses: Optional[List[str]] = None
    created_from: Optional[datetime] = None     # inclusive
    created_before: Optional[datetime] = None   # exclusive
    require_birthday: bool = False


class OutreachStore(ABC):
    """Every method that touches tenant data takes the organization id."""

    # --- read-only collaborators ---

    @abstractmethod
    async def list_organizations(self) -> List[Organization]:
        pass

    @abstractmethod
    async def list_enabled_triggers(self, organization_id: str) -> List[AutoTrigger]:
        pass

    @abstractmethod
    async def get_latest_minute_usage(self, organization_id: str) -> Optional[MinuteUsage]:
        pass

    @abstractmethod
    async def list_people(self, organization_id: str, query: PeopleQuery) -> List[Person]:
        pass

    @abstractmethod
    async def get_person(self, organization_id: str, person_id: str) -> Optional[Person]:
        pass

    @abstractmethod
    async def get_script(self, organization_id: str, script_id: str) -> Optional[CallScript]:
        pass

    # --- call_attempts ---

    @abstractmethod
    async def find_attempt(
        self,
        organization_id: str,
        person_id: str,
        trigger_type: str,
        since: Optional[datetime] = None
    ) -> Optional[OutreachAttempt]:
        """Any attempt for (person, trigger) scheduled at or after since (ever when None)"""
        pass

    @abstractmethod
    async def insert_attempt(self, row: dict) -> Optional[OutreachAttempt]:
        """Insert a scheduled attempt; None when the recurrence bucket is already taken"""
        pass

    @abstractmethod
    async def list_schedulable_attempts(
        self,
        organization_id: str,
        limit: int
    ) -> List[OutreachAttempt]:
        """Scheduled attempts that no dispatcher has claimed yet"""
        pass

    @abstractmethod
    async def list_retryable_attempts(
        self,
        organization_id: str,
        max_retries: int,
        created_since: datetime
    ) -> List[OutreachAttempt]:
        pass

    @abstractmethod
    async def requeue_attempt(self, organization_id: str, attempt_id: str, now: datetime) -> None:
        """failed -> scheduled with a fresh scheduled_at and no dispatch claim"""
        pass

    @abstractmethod
    async def claim_attempt(self, organization_id: str, attempt_id: str, now: datetime) -> bool:
        """
        Record that dispatch is about to happen.

        Conditional on the attempt still being scheduled and unclaimed;
        returns False when another dispatcher got there first.
        """
        pass

    @abstractmethod
    async def mark_in_progress(
        self,
        organization_id: str,
        attempt_id: str,
        call_id: str,
        now: datetime
    ) -> None:
        pass

    @abstractmethod
    async def mark_failed(
        self,
        organization_id: str,
        attempt_id: str,
        error: str,
        retry_count: int
    ) -> None:
        pass

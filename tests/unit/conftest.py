"""
Shared fixtures for outreach scheduler tests
In-memory store and fake providers mirroring the Supabase/Vapi/OpenAI contracts
"""
import uuid
from datetime import datetime
from typing import Dict, List, Optional

import pytest
import pytz

from churchcomm.domain.interfaces.embedding_provider import EmbeddingProvider
from churchcomm.domain.interfaces.outreach_store import OutreachStore, PeopleQuery
from churchcomm.domain.interfaces.voice_provider import (
    OutboundCallRequest,
    VoiceProvider,
    VoiceProviderError,
)
from churchcomm.domain.models.auto_trigger import AutoTrigger
from churchcomm.domain.models.call_script import CallScript
from churchcomm.domain.models.minute_usage import MinuteUsage
from churchcomm.domain.models.organization import Organization
from churchcomm.domain.models.outreach_attempt import AttemptStatus, OutreachAttempt
from churchcomm.domain.models.person import Person


def _aware(value: datetime) -> datetime:
    return pytz.UTC.localize(value) if value.tzinfo is None else value


class InMemoryOutreachStore(OutreachStore):
    """Applies the same filters as SupabaseOutreachRepository over Python lists."""

    def __init__(self):
        self.organizations: List[Organization] = []
        self.triggers: List[AutoTrigger] = []
        self.usage: Dict[str, MinuteUsage] = {}
        self.people: List[Person] = []
        self.scripts: List[CallScript] = []
        self.attempts: Dict[str, OutreachAttempt] = {}

    # --- read-only collaborators ---

    async def list_organizations(self) -> List[Organization]:
        return list(self.organizations)

    async def list_enabled_triggers(self, organization_id: str) -> List[AutoTrigger]:
        return [t for t in self.triggers if t.organization_id == organization_id and t.enabled]

    async def get_latest_minute_usage(self, organization_id: str) -> Optional[MinuteUsage]:
        return self.usage.get(organization_id)

    async def list_people(self, organization_id: str, query: PeopleQuery) -> List[Person]:
        result = []
        for person in self.people:
            if person.organization_id != organization_id:
                continue
            if person.do_not_call or person.phone_number is None:
                continue
            if query.statuses and person.member_status not in query.statuses:
                continue
            created = _aware(person.created_at)
            if query.created_from is not None and created < query.created_from:
                continue
            if query.created_before is not None and created >= query.created_before:
                continue
            if query.require_birthday and person.birthday is None:
                continue
            result.append(person)
        return result

    async def get_person(self, organization_id: str, person_id: str) -> Optional[Person]:
        for person in self.people:
            if person.organization_id == organization_id and person.id == person_id:
                return person
        return None

    async def get_script(self, organization_id: str, script_id: str) -> Optional[CallScript]:
        for script in self.scripts:
            if script.organization_id == organization_id and script.id == script_id:
                return script
        return None

    # --- call_attempts ---

    async def find_attempt(
        self,
        organization_id: str,
        person_id: str,
        trigger_type: str,
        since: Optional[datetime] = None
    ) -> Optional[OutreachAttempt]:
        for attempt in self.attempts.values():
            if (attempt.organization_id, attempt.person_id, attempt.trigger_type) != (
                organization_id, person_id, trigger_type
            ):
                continue
            if since is not None and attempt.scheduled_at < since:
                continue
            return attempt
        return None

    async def insert_attempt(self, row: dict) -> Optional[OutreachAttempt]:
        key = (row["person_id"], row["trigger_type"], row["recurrence_bucket"])
        for attempt in self.attempts.values():
            if (attempt.person_id, attempt.trigger_type, attempt.recurrence_bucket) == key:
                return None

        attempt_id = str(uuid.uuid4())
        attempt = OutreachAttempt(id=attempt_id, created_at=row["scheduled_at"], **row)
        self.attempts[attempt_id] = attempt
        return attempt

    async def list_schedulable_attempts(self, organization_id: str, limit: int) -> List[OutreachAttempt]:
        schedulable = [
            a for a in self.attempts.values()
            if a.organization_id == organization_id
            and a.status == AttemptStatus.SCHEDULED.value
            and a.dispatch_claimed_at is None
        ]
        schedulable.sort(key=lambda a: a.scheduled_at)
        return schedulable[:limit]

    async def list_retryable_attempts(
        self,
        organization_id: str,
        max_retries: int,
        created_since: datetime
    ) -> List[OutreachAttempt]:
        return [
            a for a in self.attempts.values()
            if a.organization_id == organization_id
            and a.status == AttemptStatus.FAILED.value
            and a.retry_count < max_retries
            and a.created_at >= created_since
        ]

    def _update(self, attempt_id: str, **values) -> None:
        self.attempts[attempt_id] = self.attempts[attempt_id].model_copy(update=values)

    async def requeue_attempt(self, organization_id: str, attempt_id: str, now: datetime) -> None:
        if self.attempts[attempt_id].status == AttemptStatus.FAILED.value:
            self._update(
                attempt_id,
                status=AttemptStatus.SCHEDULED.value,
                scheduled_at=now,
                dispatch_claimed_at=None,
            )

    async def claim_attempt(self, organization_id: str, attempt_id: str, now: datetime) -> bool:
        attempt = self.attempts[attempt_id]
        if attempt.status != AttemptStatus.SCHEDULED.value or attempt.dispatch_claimed_at is not None:
            return False
        self._update(attempt_id, dispatch_claimed_at=now)
        return True

    async def mark_in_progress(
        self,
        organization_id: str,
        attempt_id: str,
        call_id: str,
        now: datetime
    ) -> None:
        self._update(
            attempt_id,
            status=AttemptStatus.IN_PROGRESS.value,
            vapi_call_id=call_id,
            started_at=now,
        )

    async def mark_failed(
        self,
        organization_id: str,
        attempt_id: str,
        error: str,
        retry_count: int
    ) -> None:
        self._update(
            attempt_id,
            status=AttemptStatus.FAILED.value,
            error_message=error,
            retry_count=retry_count,
        )

    # --- helpers ---

    def attempts_for(self, person_id: str) -> List[OutreachAttempt]:
        return [a for a in self.attempts.values() if a.person_id == person_id]


class FakeVoiceProvider(VoiceProvider):
    """Records call requests; fails when error is set."""

    def __init__(self, configured: bool = True, error: Optional[Exception] = None):
        self.configured = configured
        self.error = error
        self.requests: List[OutboundCallRequest] = []

    def is_configured(self) -> bool:
        return self.configured

    async def place_call(self, request: OutboundCallRequest) -> str:
        self.requests.append(request)
        if self.error:
            raise self.error
        return f"vapi-call-{len(self.requests)}"

    async def cleanup(self) -> None:
        pass

    @property
    def name(self) -> str:
        return "fake"


class FakeEmbeddingProvider(EmbeddingProvider):
    """Constant vectors of the requested width."""

    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.calls: List[int] = []

    async def embed(self, text: str, dimensions: int) -> List[float]:
        self.calls.append(dimensions)
        if self.error:
            raise self.error
        return [0.1] * dimensions


# Saturday 2024-06-15 12:00 in Chicago (CDT, UTC-5)
NOW = datetime(2024, 6, 15, 17, 0, tzinfo=pytz.UTC)
ORG_ID = "org-grace"


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def org() -> Organization:
    return Organization(
        id=ORG_ID,
        name="Grace Community Church",
        calling_window_start="09:00",
        calling_window_end="20:00",
        timezone="America/Chicago",
    )


@pytest.fixture
def store(org) -> InMemoryOutreachStore:
    store = InMemoryOutreachStore()
    store.organizations.append(org)
    store.scripts.append(CallScript(
        id="script-welcome",
        organization_id=ORG_ID,
        name="Welcome",
        content="Hi {first_name}, thanks for visiting {church_name} this {day_of_week}!",
    ))
    return store


@pytest.fixture
def voice_provider() -> FakeVoiceProvider:
    return FakeVoiceProvider()


@pytest.fixture
def embeddings() -> FakeEmbeddingProvider:
    return FakeEmbeddingProvider()


def make_person(person_id: str, **overrides) -> Person:
    values = {
        "id": person_id,
        "organization_id": ORG_ID,
        "first_name": "Sarah",
        "last_name": "Miller",
        "phone_number": "+15551234567",
        "member_status": "first_time_visitor",
        "created_at": NOW,
    }
    values.update(overrides)
    return Person(**values)


def make_trigger(trigger_type: str, **overrides) -> AutoTrigger:
    values = {
        "id": f"trigger-{trigger_type}",
        "organization_id": ORG_ID,
        "trigger_type": trigger_type,
        "enabled": True,
        "script_id": "script-welcome",
    }
    values.update(overrides)
    return AutoTrigger(**values)

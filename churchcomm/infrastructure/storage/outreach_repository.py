"""
Supabase Outreach Repository
OutreachStore backed by PostgREST queries
"""
import logging
from datetime import datetime
from typing import List, Optional

from postgrest.exceptions import APIError
from pydantic import ValidationError
from supabase import Client

from churchcomm.domain.interfaces.outreach_store import OutreachStore, PeopleQuery
from churchcomm.domain.models.auto_trigger import AutoTrigger
from churchcomm.domain.models.call_script import CallScript
from churchcomm.domain.models.minute_usage import MinuteUsage
from churchcomm.domain.models.organization import Organization
from churchcomm.domain.models.outreach_attempt import AttemptStatus, OutreachAttempt
from churchcomm.domain.models.person import Person
from churchcomm.utils.tenant_filter import apply_tenant_filter

logger = logging.getLogger(__name__)


UNIQUE_VIOLATION = "23505"

ORGANIZATION_COLUMNS = (
    "id, name, calling_window_start, calling_window_end, timezone, "
    "phone_number_type, dedicated_phone_number"
)
TRIGGER_COLUMNS = (
    "id, organization_id, trigger_type, enabled, script_id, delay_hours, anniversary_milestones"
)
PERSON_COLUMNS = (
    "id, organization_id, first_name, last_name, phone_number, member_status, "
    "do_not_call, birthday, created_at"
)
ATTEMPT_COLUMNS = (
    "id, organization_id, person_id, script_id, trigger_type, phone_number, status, "
    "recurrence_bucket, scheduled_at, created_at, dispatch_claimed_at, retry_count"
)


class SupabaseOutreachRepository(OutreachStore):
    """
    Tables: organizations, auto_triggers, minute_usage, people,
    call_scripts, call_attempts.

    Calls into the synchronous Supabase client; each method is a single
    round trip so the scheduler never holds a transaction open.
    """

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _table(self, name: str, columns: str = "*"):
        return self.supabase.table(name).select(columns)

    # --- read-only collaborators ---

    async def list_organizations(self) -> List[Organization]:
        response = self._table("organizations", ORGANIZATION_COLUMNS).execute()
        organizations = []
        for row in response.data or []:
            try:
                organizations.append(Organization(**row))
            except ValidationError as e:
                logger.warning(f"Skipping organization {row.get('id')}: invalid row: {e}")
        return organizations

    async def list_enabled_triggers(self, organization_id: str) -> List[AutoTrigger]:
        query = apply_tenant_filter(self._table("auto_triggers", TRIGGER_COLUMNS), organization_id)
        response = query.eq("enabled", True).execute()
        triggers = []
        for row in response.data or []:
            try:
                triggers.append(AutoTrigger(**row))
            except ValidationError as e:
                # Unknown trigger kinds are ignored; the other triggers still run
                logger.warning(
                    f"Org {organization_id}: skipping trigger {row.get('id')} "
                    f"({row.get('trigger_type')}): {e}"
                )
        return triggers

    async def get_latest_minute_usage(self, organization_id: str) -> Optional[MinuteUsage]:
        query = apply_tenant_filter(
            self._table("minute_usage", "organization_id, billing_period_start, minutes_used, "
                                        "minutes_included, overage_approved"),
            organization_id
        )
        response = query.order("billing_period_start", desc=True).limit(1).execute()
        rows = response.data or []
        return MinuteUsage(**rows[0]) if rows else None

    async def list_people(self, organization_id: str, query: PeopleQuery) -> List[Person]:
        builder = apply_tenant_filter(self._table("people", PERSON_COLUMNS), organization_id)
        builder = builder.eq("do_not_call", False).not_.is_("phone_number", "null")

        if query.statuses:
            builder = builder.in_("member_status", list(query.statuses))
        if query.created_from is not None:
            builder = builder.gte("created_at", query.created_from.isoformat())
        if query.created_before is not None:
            builder = builder.lt("created_at", query.created_before.isoformat())
        if query.require_birthday:
            builder = builder.not_.is_("birthday", "null")

        response = builder.execute()
        return [Person(**row) for row in response.data or []]

    async def get_person(self, organization_id: str, person_id: str) -> Optional[Person]:
        query = apply_tenant_filter(self._table("people", PERSON_COLUMNS), organization_id)
        response = query.eq("id", person_id).limit(1).execute()
        rows = response.data or []
        return Person(**rows[0]) if rows else None

    async def get_script(self, organization_id: str, script_id: str) -> Optional[CallScript]:
        query = apply_tenant_filter(
            self._table("call_scripts", "id, organization_id, name, content, voice_id"),
            organization_id
        )
        response = query.eq("id", script_id).limit(1).execute()
        rows = response.data or []
        return CallScript(**rows[0]) if rows else None

    # --- call_attempts ---

    async def find_attempt(
        self,
        organization_id: str,
        person_id: str,
        trigger_type: str,
        since: Optional[datetime] = None
    ) -> Optional[OutreachAttempt]:
        query = apply_tenant_filter(self._table("call_attempts", ATTEMPT_COLUMNS), organization_id)
        query = query.eq("person_id", person_id).eq("trigger_type", trigger_type)
        if since is not None:
            query = query.gte("scheduled_at", since.isoformat())

        response = query.limit(1).execute()
        rows = response.data or []
        return OutreachAttempt(**rows[0]) if rows else None

    async def insert_attempt(self, row: dict) -> Optional[OutreachAttempt]:
        try:
            response = self.supabase.table("call_attempts").insert(row).execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                logger.info(
                    f"Org {row.get('organization_id')}: {row.get('trigger_type')} attempt for "
                    f"person {row.get('person_id')} already exists in bucket {row.get('recurrence_bucket')}"
                )
                return None
            raise

        rows = response.data or []
        return OutreachAttempt(**rows[0]) if rows else None

    async def list_schedulable_attempts(self, organization_id: str, limit: int) -> List[OutreachAttempt]:
        query = apply_tenant_filter(self._table("call_attempts", ATTEMPT_COLUMNS), organization_id)
        response = (
            query.eq("status", AttemptStatus.SCHEDULED.value)
            .is_("dispatch_claimed_at", "null")
            .order("scheduled_at")
            .limit(limit)
            .execute()
        )
        return [OutreachAttempt(**row) for row in response.data or []]

    async def list_retryable_attempts(
        self,
        organization_id: str,
        max_retries: int,
        created_since: datetime
    ) -> List[OutreachAttempt]:
        query = apply_tenant_filter(self._table("call_attempts", ATTEMPT_COLUMNS), organization_id)
        response = (
            query.eq("status", AttemptStatus.FAILED.value)
            .lt("retry_count", max_retries)
            .gte("created_at", created_since.isoformat())
            .execute()
        )
        return [OutreachAttempt(**row) for row in response.data or []]

    def _update(self, organization_id: str, attempt_id: str, values: dict):
        query = self.supabase.table("call_attempts").update(values)
        return apply_tenant_filter(query, organization_id).eq("id", attempt_id)

    async def requeue_attempt(self, organization_id: str, attempt_id: str, now: datetime) -> None:
        self._update(organization_id, attempt_id, {
            "status": AttemptStatus.SCHEDULED.value,
            "scheduled_at": now.isoformat(),
            "dispatch_claimed_at": None,
        }).eq("status", AttemptStatus.FAILED.value).execute()

    async def claim_attempt(self, organization_id: str, attempt_id: str, now: datetime) -> bool:
        response = (
            self._update(organization_id, attempt_id, {"dispatch_claimed_at": now.isoformat()})
            .eq("status", AttemptStatus.SCHEDULED.value)
            .is_("dispatch_claimed_at", "null")
            .execute()
        )
        return bool(response.data)

    async def mark_in_progress(
        self,
        organization_id: str,
        attempt_id: str,
        call_id: str,
        now: datetime
    ) -> None:
        if not call_id:
            raise ValueError("in_progress requires a provider call id")

        self._update(organization_id, attempt_id, {
            "status": AttemptStatus.IN_PROGRESS.value,
            "vapi_call_id": call_id,
            "started_at": now.isoformat(),
        }).execute()

    async def mark_failed(
        self,
        organization_id: str,
        attempt_id: str,
        error: str,
        retry_count: int
    ) -> None:
        self._update(organization_id, attempt_id, {
            "status": AttemptStatus.FAILED.value,
            "error_message": error,
            "retry_count": retry_count,
        }).execute()

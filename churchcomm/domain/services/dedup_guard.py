"""
Dedup & Scheduling Guard
Persists outreach intents at most once per recurrence bucket
"""
import logging
from datetime import datetime
from typing import List, Optional, Tuple

from churchcomm.domain.interfaces.outreach_store import OutreachStore
from churchcomm.domain.models.auto_trigger import TriggerKind
from churchcomm.domain.models.organization import Organization
from churchcomm.domain.models.outreach_attempt import OutreachAttempt, OutreachIntent

logger = logging.getLogger(__name__)


EVER_BUCKET = "ever"


def recurrence_bucket(kind: TriggerKind, org: Organization, now: datetime) -> Tuple[str, Optional[datetime]]:
    """
    Bucket key and its start instant for a trigger kind.

    first_timer: one bucket for all time (start None).
    birthday: the organization-local calendar day.
    anniversary: the organization-local calendar month.
    """
    kind = TriggerKind(kind)
    if kind == TriggerKind.FIRST_TIMER:
        return EVER_BUCKET, None

    local = org.local_time(now)
    if kind == TriggerKind.BIRTHDAY:
        start = org.tz.localize(datetime(local.year, local.month, local.day))
        return start.strftime("%Y-%m-%d"), start

    start = org.tz.localize(datetime(local.year, local.month, 1))
    return start.strftime("%Y-%m"), start


class SchedulingGuard:
    """
    Check-then-insert over call_attempts.

    The store enforces a unique (person_id, trigger_type, recurrence_bucket)
    index, so a concurrent insert that slips past the lookup is rejected
    there and reported as a duplicate instead of creating a second row.
    """

    def __init__(self, store: OutreachStore):
        self.store = store

    async def schedule(self, org: Organization, intent: OutreachIntent, now: datetime) -> Optional[OutreachAttempt]:
        """Persist intent unless its bucket already holds an attempt."""
        bucket, since = recurrence_bucket(intent.trigger_type, org, now)

        existing = await self.store.find_attempt(
            organization_id=org.id,
            person_id=intent.person_id,
            trigger_type=intent.trigger_type,
            since=since,
        )
        if existing:
            logger.debug(
                f"Org {org.id}: {intent.trigger_type} attempt already exists for "
                f"person {intent.person_id} ({existing.status})"
            )
            return None

        attempt = await self.store.insert_attempt(OutreachAttempt.new_row(intent, bucket, now))
        if attempt:
            logger.info(
                f"Org {org.id}: Scheduled {intent.trigger_type} call for "
                f"{intent.first_name or intent.person_id}"
            )
        return attempt

    async def schedule_intents(self, org: Organization, intents: List[OutreachIntent], now: datetime) -> int:
        """Schedule each intent; returns how many new attempts were created."""
        scheduled = 0
        for intent in intents:
            try:
                if await self.schedule(org, intent, now):
                    scheduled += 1
            except Exception as e:
                logger.error(
                    f"Org {org.id}: Failed to schedule {intent.trigger_type} call for "
                    f"person {intent.person_id}: {e}"
                )
        return scheduled

"""
Trigger Evaluators
Life-event rules that turn directory entries into outreach intents
"""
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Dict, List, Type

import pytz

from churchcomm.domain.interfaces.outreach_store import PeopleQuery
from churchcomm.domain.models.auto_trigger import AutoTrigger, TriggerKind
from churchcomm.domain.models.organization import Organization
from churchcomm.domain.models.outreach_attempt import OutreachIntent
from churchcomm.domain.models.person import MEMBERSHIP_STATUSES, MemberStatus, Person

logger = logging.getLogger(__name__)


def _aware(value: datetime) -> datetime:
    return pytz.UTC.localize(value) if value.tzinfo is None else value


def months_between(start: datetime, end: datetime) -> int:
    """Calendar-month difference, ignoring the day of month."""
    return (end.year - start.year) * 12 + (end.month - start.month)


class TriggerEvaluator(ABC):
    """
    Pure rule over (organization, trigger, now, people).

    people_query narrows what the store returns; evaluate re-checks
    everything so it is correct over an unfiltered directory too. Neither
    looks at existing attempts; deduplication happens downstream.
    """

    kind: TriggerKind

    @abstractmethod
    def people_query(self, org: Organization, trigger: AutoTrigger, now: datetime) -> PeopleQuery:
        pass

    @abstractmethod
    def matches(self, person: Person, org: Organization, trigger: AutoTrigger, now: datetime) -> bool:
        pass

    def evaluate(
        self,
        org: Organization,
        trigger: AutoTrigger,
        now: datetime,
        people: List[Person]
    ) -> List[OutreachIntent]:
        if not trigger.script_id:
            return []

        intents = []
        for person in people:
            if person.organization_id != org.id or not person.is_callable:
                continue
            if not self.matches(person, org, trigger, now):
                continue
            intents.append(OutreachIntent(
                organization_id=org.id,
                person_id=person.id,
                phone_number=person.phone_number,
                script_id=trigger.script_id,
                trigger_type=self.kind,
                first_name=person.first_name,
            ))
        return intents


class FirstTimerEvaluator(TriggerEvaluator):
    """
    Follow-up with first-time visitors delay_hours after their visit.

    Only visitors created inside the one-hour slot ending delay_hours ago
    match, so each visitor is picked up by roughly one hourly tick.
    """

    kind = TriggerKind.FIRST_TIMER
    SLOT = timedelta(hours=1)

    def slot(self, trigger: AutoTrigger, now: datetime):
        slot_end = _aware(now) - timedelta(hours=trigger.delay_hours)
        return slot_end - self.SLOT, slot_end

    def people_query(self, org: Organization, trigger: AutoTrigger, now: datetime) -> PeopleQuery:
        slot_start, slot_end = self.slot(trigger, now)
        logger.info(
            f"Org {org.id}: first_timer - window: {slot_start.isoformat()} to {slot_end.isoformat()}"
        )
        return PeopleQuery(
            statuses=[MemberStatus.FIRST_TIME_VISITOR.value],
            created_from=slot_start,
            created_before=slot_end,
        )

    def matches(self, person: Person, org: Organization, trigger: AutoTrigger, now: datetime) -> bool:
        if person.member_status != MemberStatus.FIRST_TIME_VISITOR.value:
            return False
        slot_start, slot_end = self.slot(trigger, now)
        return slot_start <= _aware(person.created_at) < slot_end


class BirthdayEvaluator(TriggerEvaluator):
    """
    Birthday greeting when month/day match the organization's local date.

    Feb 29 birthdays only match in leap years.
    """

    kind = TriggerKind.BIRTHDAY

    def people_query(self, org: Organization, trigger: AutoTrigger, now: datetime) -> PeopleQuery:
        # month/day can't be filtered portably through PostgREST; done in matches
        return PeopleQuery(require_birthday=True)

    def matches(self, person: Person, org: Organization, trigger: AutoTrigger, now: datetime) -> bool:
        if person.birthday is None:
            return False
        today = org.local_time(now)
        return person.birthday.month == today.month and person.birthday.day == today.day


class AnniversaryEvaluator(TriggerEvaluator):
    """
    Membership anniversary at configured month milestones.

    Fires on the join day-of-month (organization local calendar) when the
    calendar months since joining is a positive configured milestone. A
    join on the 31st never matches a shorter month.
    """

    kind = TriggerKind.ANNIVERSARY

    def people_query(self, org: Organization, trigger: AutoTrigger, now: datetime) -> PeopleQuery:
        logger.info(
            f"Org {org.id}: anniversary - milestones: "
            f"{','.join(str(m) for m in trigger.anniversary_milestones)}"
        )
        return PeopleQuery(statuses=list(MEMBERSHIP_STATUSES))

    def matches(self, person: Person, org: Organization, trigger: AutoTrigger, now: datetime) -> bool:
        if person.member_status not in MEMBERSHIP_STATUSES:
            return False

        today = org.local_time(now)
        joined = org.local_time(_aware(person.created_at))
        if joined.day != today.day:
            return False

        months = months_between(joined, today)
        return months > 0 and months in trigger.anniversary_milestones


EVALUATORS: Dict[TriggerKind, Type[TriggerEvaluator]] = {
    TriggerKind.FIRST_TIMER: FirstTimerEvaluator,
    TriggerKind.BIRTHDAY: BirthdayEvaluator,
    TriggerKind.ANNIVERSARY: AnniversaryEvaluator,
}


def get_evaluator(kind: TriggerKind) -> TriggerEvaluator:
    """Evaluator instance for a trigger kind"""
    try:
        return EVALUATORS[TriggerKind(kind)]()
    except (ValueError, KeyError):
        raise ValueError(f"Unknown trigger type: {kind}")

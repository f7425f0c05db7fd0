"""
Outreach Scheduler
One tick of the automated outreach job across all organizations
"""
import asyncio
import logging
from datetime import datetime
from typing import Optional

import pytz

from churchcomm.domain.interfaces.outreach_store import OutreachStore
from churchcomm.domain.models.organization import Organization
from churchcomm.domain.models.scheduler_result import OrganizationResult, SkipReason, TickSummary
from churchcomm.domain.services.call_executor import CallExecutor
from churchcomm.domain.services.dedup_guard import SchedulingGuard
from churchcomm.domain.services.retry_manager import RetryManager
from churchcomm.domain.services.scheduling_rules import SchedulingRuleEngine
from churchcomm.domain.services.triggers import get_evaluator

logger = logging.getLogger(__name__)


class OutreachScheduler:
    """
    Entry point invoked periodically (cron, HTTP trigger or worker loop).

    Per organization, in order:
    1. Calling window
    2. Enabled triggers (skip when none or when they cannot be fetched)
    3. Minute quota
    4. Trigger evaluation + dedup guard
    5. Retry requeue
    6. Call execution

    Organizations are isolated from each other: one failing organization is
    recorded as processing_error and the tick continues. Up to
    max_concurrent_organizations organizations are in flight at once, but
    they only overlap while awaiting the embedding and voice HTTP calls:
    store methods wrap the synchronous Supabase client and block the event
    loop for each round trip. Work inside one organization is sequential.
    """

    def __init__(
        self,
        store: OutreachStore,
        executor: CallExecutor,
        rules_engine: Optional[SchedulingRuleEngine] = None,
        guard: Optional[SchedulingGuard] = None,
        retry_manager: Optional[RetryManager] = None,
        max_concurrent_organizations: int = 1
    ):
        self.store = store
        self.executor = executor
        self.rules_engine = rules_engine or SchedulingRuleEngine()
        self.guard = guard or SchedulingGuard(store)
        self.retry_manager = retry_manager or RetryManager(store)
        self.max_concurrent_organizations = max(1, max_concurrent_organizations)

    async def run_tick(self, now: Optional[datetime] = None) -> TickSummary:
        """
        Evaluate every organization once.

        Raises:
            Exception: only if the organization list itself cannot be read
        """
        now = now or datetime.now(pytz.UTC)
        logger.info(f"=== Auto Call Trigger: Starting evaluation at {now.isoformat()} ===")

        organizations = await self.store.list_organizations()
        if not organizations:
            return TickSummary(message="No organizations found")

        logger.info(f"Found {len(organizations)} organization(s) to evaluate")

        semaphore = asyncio.Semaphore(self.max_concurrent_organizations)

        async def bounded(org: Organization) -> OrganizationResult:
            async with semaphore:
                return await self.process_organization_safely(org, now)

        results = await asyncio.gather(*(bounded(org) for org in organizations))

        summary = TickSummary(
            organizations_evaluated=len(organizations),
            total_triggered=sum(r.triggered for r in results),
            total_executed=sum(r.executed for r in results),
            results=list(results),
        )
        logger.info(
            f"=== Auto Call Trigger complete. Triggered: {summary.total_triggered}, "
            f"Executed: {summary.total_executed} ==="
        )
        return summary

    async def process_organization_safely(self, org: Organization, now: datetime) -> OrganizationResult:
        try:
            return await self.process_organization(org, now)
        except Exception as e:
            logger.error(f"Org {org.id}: processing failed: {e}", exc_info=True)
            return OrganizationResult(
                organization_id=org.id,
                skipped=SkipReason.PROCESSING_ERROR,
                detail=str(e),
            )

    async def process_organization(self, org: Organization, now: datetime) -> OrganizationResult:
        in_window, _ = self.rules_engine.check_calling_window(org, now)
        if not in_window:
            return OrganizationResult(organization_id=org.id, skipped=SkipReason.OUTSIDE_CALLING_WINDOW)

        try:
            triggers = await self.store.list_enabled_triggers(org.id)
        except Exception as e:
            logger.error(f"Org {org.id}: Error fetching triggers: {e}")
            return OrganizationResult(
                organization_id=org.id,
                skipped=SkipReason.TRIGGER_FETCH_ERROR,
                detail=str(e),
            )

        if not triggers:
            return OrganizationResult(organization_id=org.id, skipped=SkipReason.NO_ENABLED_TRIGGERS)

        usage = await self.store.get_latest_minute_usage(org.id)
        has_minutes, _ = self.rules_engine.check_quota(org, usage)
        if not has_minutes:
            return OrganizationResult(organization_id=org.id, skipped=SkipReason.MINUTE_LIMIT_REACHED)

        triggered = 0
        for trigger in triggers:
            if not trigger.enabled or not trigger.script_id:
                continue
            try:
                evaluator = get_evaluator(trigger.trigger_type)
                people = await self.store.list_people(org.id, evaluator.people_query(org, trigger, now))
                intents = evaluator.evaluate(org, trigger, now, people)
                if intents:
                    logger.info(f"Org {org.id}: {trigger.trigger_type} matched {len(intents)} person(s)")
                triggered += await self.guard.schedule_intents(org, intents, now)
            except Exception as e:
                logger.error(f"Org {org.id}: {trigger.trigger_type} trigger failed: {e}")

        retried = await self.retry_manager.requeue_failed(org, now)
        executed = await self.executor.execute_scheduled(org, now)

        return OrganizationResult(
            organization_id=org.id,
            triggered=triggered,
            retried=retried,
            executed=executed,
        )

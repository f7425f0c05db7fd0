"""
Retry Manager
Re-queues recently failed attempts under a bounded retry policy
"""
import logging
from datetime import datetime, timedelta

from churchcomm.domain.interfaces.outreach_store import OutreachStore
from churchcomm.domain.models.organization import Organization

logger = logging.getLogger(__name__)


MAX_RETRIES = 2
RETRY_WINDOW = timedelta(hours=24)


class RetryManager:
    """
    failed -> scheduled for attempts with retry_count below the bound that
    were created inside the rolling window. retry_count is left alone; the
    call executor increments it on the next failure. Anything outside
    the window or at the bound stays failed for good.
    """

    def __init__(
        self,
        store: OutreachStore,
        max_retries: int = MAX_RETRIES,
        retry_window: timedelta = RETRY_WINDOW
    ):
        self.store = store
        self.max_retries = max_retries
        self.retry_window = retry_window

    async def requeue_failed(self, org: Organization, now: datetime) -> int:
        failed_attempts = await self.store.list_retryable_attempts(
            organization_id=org.id,
            max_retries=self.max_retries,
            created_since=now - self.retry_window,
        )

        retried = 0
        for attempt in failed_attempts:
            # the store filters too; re-checked so the bound holds for any store
            if attempt.retry_count >= self.max_retries:
                continue
            await self.store.requeue_attempt(org.id, attempt.id, now)
            retried += 1

        if retried > 0:
            logger.info(f"Org {org.id}: Rescheduled {retried} failed call(s) for retry")
        return retried

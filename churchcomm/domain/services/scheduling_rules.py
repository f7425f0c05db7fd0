"""
Scheduling Rules Engine
Decides whether an organization may be processed this tick
"""
import logging
from typing import Optional, Tuple
from datetime import datetime

from churchcomm.domain.models.minute_usage import MinuteUsage
from churchcomm.domain.models.organization import Organization

logger = logging.getLogger(__name__)


class SchedulingRuleEngine:
    """
    Evaluates per-organization gates.

    Rules checked:
    1. Calling window (organization-local hours)
    2. Minute quota for the current billing period

    Both are evaluated once per tick, before any scheduling work.
    """

    def check_calling_window(self, org: Organization, now: datetime) -> Tuple[bool, str]:
        """
        Check if org-local time is inside the calling window.

        Returns:
            (can_call, reason)
        """
        window = org.calling_window
        in_window, reason = window.is_within_time_window(now)

        if not window.is_configured:
            logger.info(f"Org {org.id}: Missing calling window config, defaulting to allow")
        else:
            local = org.local_time(now)
            logger.info(
                f"Org {org.id}: Time={local.hour}:{local.minute:02d} "
                f"Window={window.time_window_start}-{window.time_window_end} Within={in_window}"
            )
        return in_window, reason

    def check_quota(self, org: Organization, usage: Optional[MinuteUsage]) -> Tuple[bool, str]:
        """
        Check the organization's latest minute usage.

        No usage row means no quota has been provisioned yet, which is
        treated as allowed.

        Returns:
            (can_call, reason)
        """
        if usage is None:
            return True, "no_usage_record"

        if usage.is_exhausted():
            logger.info(
                f"Org {org.id}: Minute limit reached "
                f"({usage.minutes_used}/{usage.minutes_included}), skipping"
            )
            return False, "minute_limit_reached"

        return True, "within_minute_allotment"

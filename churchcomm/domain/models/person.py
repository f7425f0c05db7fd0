"""
Person Model
Directory entry belonging to one organization
"""
from pydantic import BaseModel
from typing import Optional
from datetime import date, datetime
from enum import Enum


class MemberStatus(str, Enum):
    """Membership status of a directory entry"""
    FIRST_TIME_VISITOR = "first_time_visitor"
    REGULAR_VISITOR = "regular_visitor"
    MEMBER = "member"
    LEADER = "leader"
    INACTIVE = "inactive"


# Statuses that count as membership for anniversary outreach
MEMBERSHIP_STATUSES = (
    MemberStatus.MEMBER.value,
    MemberStatus.LEADER.value,
    MemberStatus.REGULAR_VISITOR.value,
)


class Person(BaseModel):
    """A person in an organization's directory."""

    id: str
    organization_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None
    member_status: Optional[str] = None
    do_not_call: bool = False
    birthday: Optional[date] = None
    created_at: datetime

    model_config = {"extra": "ignore"}

    @property
    def is_callable(self) -> bool:
        """A person without a phone or flagged do-not-call is never eligible."""
        return bool(self.phone_number) and not self.do_not_call

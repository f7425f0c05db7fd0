"""Domain models"""

from .calling_rules import (
    CallingWindow,
)

from .organization import (
    Organization,
)

from .person import (
    MemberStatus,
    Person,
)

from .auto_trigger import (
    TriggerKind,
    AutoTrigger,
)

from .call_script import (
    CallScript,
)

from .minute_usage import (
    MinuteUsage,
)

from .outreach_attempt import (
    AttemptStatus,
    OutreachIntent,
    OutreachAttempt,
)

from .memory import (
    MemoryType,
    MemberMemory,
    ChurchMemory,
    InjectedContext,
)

from .scheduler_result import (
    SkipReason,
    OrganizationResult,
    TickSummary,
)

__all__ = [
    "CallingWindow",
    "Organization",
    "MemberStatus",
    "Person",
    "TriggerKind",
    "AutoTrigger",
    "CallScript",
    "MinuteUsage",
    "AttemptStatus",
    "OutreachIntent",
    "OutreachAttempt",
    "MemoryType",
    "MemberMemory",
    "ChurchMemory",
    "InjectedContext",
    "SkipReason",
    "OrganizationResult",
    "TickSummary",
]

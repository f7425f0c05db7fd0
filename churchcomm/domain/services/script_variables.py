"""
Script Variable Substitution
Fills {placeholders} in call-script templates
"""
import re
from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel


DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


class SubstitutionContext(BaseModel):
    """Values available to script templates. Missing values render as ""."""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    church_name: Optional[str] = None
    pastor_name: Optional[str] = None  # reserved, no source yet
    event_name: Optional[str] = None
    event_date: Optional[str] = None
    day_of_week: Optional[str] = None
    membership_duration: Optional[str] = None

    def variables(self) -> Dict[str, str]:
        return {key: value or "" for key, value in self.model_dump().items()}


def substitute_variables(template: str, context: SubstitutionContext) -> str:
    """Replace every {name} (case-insensitive) with its context value."""
    result = template
    for key, value in context.variables().items():
        pattern = re.compile(r"\{" + re.escape(key) + r"\}", re.IGNORECASE)
        result = pattern.sub(lambda _match: value, result)
    return result


def day_of_week(local_now: datetime) -> str:
    return DAY_NAMES[local_now.weekday()]


def calculate_membership_duration(created_at: datetime, now: datetime) -> str:
    """Human-readable whole-month duration since created_at."""
    months = (now.year - created_at.year) * 12 + (now.month - created_at.month)

    if months < 1:
        return "less than a month"
    if months == 1:
        return "1 month"
    if months < 12:
        return f"{months} months"

    years, remaining_months = divmod(months, 12)
    year_part = "1 year" if years == 1 else f"{years} years"
    if remaining_months == 0:
        return year_part
    month_part = "1 month" if remaining_months == 1 else f"{remaining_months} months"
    return f"{year_part} and {month_part}"

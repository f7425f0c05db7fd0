"""
Call Script Model
Reusable conversation template owned by an organization
"""
from pydantic import BaseModel
from typing import Optional


class CallScript(BaseModel):
    """Template text with {placeholders} plus an optional voice id."""

    id: str
    organization_id: Optional[str] = None
    name: Optional[str] = None
    content: str = ""
    voice_id: Optional[str] = None

    model_config = {"extra": "ignore"}

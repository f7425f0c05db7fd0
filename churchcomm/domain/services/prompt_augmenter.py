"""
Prompt Augmenter
Appends retrieved memory context and steering guidance to a call prompt
"""
import logging

from churchcomm.domain.models.memory import InjectedContext
from churchcomm.domain.services.context_retriever import ContextRetriever

logger = logging.getLogger(__name__)


MAX_PROMPT_LENGTH = 8000
TRUNCATION_MARKER = "..."

CONTEXT_USAGE_GUIDELINES = """## Context Usage Guidelines:
- Reference previous conversations naturally when relevant
- If there's an upcoming church event, consider mentioning it
- Remember any prayer requests they've shared
- Do not explicitly say "I see from our records..." - weave context naturally like a caring friend would"""


def augment_prompt(
    base_prompt: str,
    context: InjectedContext,
    max_length: int = MAX_PROMPT_LENGTH
) -> str:
    """Append non-empty context sections, guidance, then truncate to max_length."""
    prompt = base_prompt

    if context.member_context:
        prompt += f"\n\n## Previous Conversations with This Person:\n{context.member_context}"

    if context.church_context:
        prompt += f"\n\n## Current Church Context:\n{context.church_context}"

    if context.preferences:
        prompt += f"\n\n## Known Preferences:\n{context.preferences}"

    if context.has_conversation_context:
        prompt += f"\n\n{CONTEXT_USAGE_GUIDELINES}"

    return truncate_prompt(prompt, max_length)


def truncate_prompt(prompt: str, max_length: int = MAX_PROMPT_LENGTH) -> str:
    """Cut to at most max_length characters, marker included."""
    if len(prompt) <= max_length:
        return prompt
    return prompt[:max_length - len(TRUNCATION_MARKER)] + TRUNCATION_MARKER


class PromptAugmenter:
    """Enriches a substituted script with the caller's memory context."""

    def __init__(self, retriever: ContextRetriever, max_length: int = MAX_PROMPT_LENGTH):
        self.retriever = retriever
        self.max_length = max_length

    async def build_enhanced_prompt(self, base_prompt: str, person_id: str, organization_id: str) -> str:
        context = await self.retriever.get_call_context(person_id, organization_id)
        prompt = augment_prompt(base_prompt, context, self.max_length)
        logger.debug(
            f"Org {organization_id}: prompt for person {person_id} is {len(prompt)} chars "
            f"(member={bool(context.member_context)}, church={bool(context.church_context)})"
        )
        return prompt

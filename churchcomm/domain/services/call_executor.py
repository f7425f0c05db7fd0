"""
Call Executor
Dispatches scheduled outreach attempts to the voice-calling provider
"""
import logging
from datetime import datetime
from typing import Optional

from churchcomm.domain.interfaces.outreach_store import OutreachStore
from churchcomm.domain.interfaces.voice_provider import OutboundCallRequest, VoiceProvider
from churchcomm.domain.models.auto_trigger import TriggerKind
from churchcomm.domain.models.organization import Organization
from churchcomm.domain.models.outreach_attempt import (
    NO_PHONE_NUMBER_ERROR,
    SCRIPT_NOT_FOUND_ERROR,
    OutreachAttempt,
)
from churchcomm.domain.models.person import Person
from churchcomm.domain.services.prompt_augmenter import PromptAugmenter
from churchcomm.domain.services.retry_manager import MAX_RETRIES
from churchcomm.domain.services.script_variables import (
    SubstitutionContext,
    calculate_membership_duration,
    day_of_week,
    substitute_variables,
)

logger = logging.getLogger(__name__)


EXECUTION_BATCH_SIZE = 10
DEFAULT_VOICE_ID = "paula"


class CallExecutor:
    """
    Runs up to batch_size scheduled attempts for one organization, one at
    a time.

    Steps per attempt:
    1. Fail terminally when there is no phone number or no script
    2. Substitute script variables and augment with memory context
       (augmentation failure falls back to the substituted text)
    3. Claim the attempt so a crashed or concurrent run never dials twice
    4. Place the call; record the provider call id, or the error and one
       more retry
    """

    def __init__(
        self,
        store: OutreachStore,
        voice_provider: VoiceProvider,
        augmenter: Optional[PromptAugmenter],
        default_phone_number_id: Optional[str],
        batch_size: int = EXECUTION_BATCH_SIZE,
        max_retries: int = MAX_RETRIES,
        default_voice_id: str = DEFAULT_VOICE_ID
    ):
        self.store = store
        self.voice_provider = voice_provider
        self.augmenter = augmenter
        self.default_phone_number_id = default_phone_number_id
        self.batch_size = batch_size
        self.max_retries = max_retries
        self.default_voice_id = default_voice_id

    async def execute_scheduled(self, org: Organization, now: datetime) -> int:
        """Dispatch the organization's schedulable attempts; returns calls started."""
        attempts = await self.store.list_schedulable_attempts(org.id, self.batch_size)
        if not attempts:
            return 0

        logger.info(f"Org {org.id}: Executing {len(attempts)} scheduled call(s)")

        if not self.voice_provider.is_configured():
            logger.error(f"{self.voice_provider.name} API key not configured, skipping call execution")
            return 0

        phone_number_id = org.originating_number(self.default_phone_number_id)
        if not phone_number_id:
            logger.error(f"Org {org.id}: No phone number configured for calls")
            return 0

        executed = 0
        for attempt in attempts:
            try:
                if await self.execute_attempt(org, attempt, phone_number_id, now):
                    executed += 1
            except Exception as e:
                logger.error(f"Org {org.id}: Unexpected error executing call {attempt.id}: {e}", exc_info=True)

        return executed

    async def execute_attempt(
        self,
        org: Organization,
        attempt: OutreachAttempt,
        phone_number_id: str,
        now: datetime
    ) -> bool:
        if not attempt.phone_number:
            logger.info(f"Org {org.id}: Call {attempt.id} has no phone number, marking failed")
            await self._fail_permanently(org, attempt, NO_PHONE_NUMBER_ERROR)
            return False

        person = await self.store.get_person(org.id, attempt.person_id) if attempt.person_id else None
        script = await self.store.get_script(org.id, attempt.script_id) if attempt.script_id else None

        if not script:
            logger.info(f"Org {org.id}: No script found for call {attempt.id}")
            await self._fail_permanently(org, attempt, SCRIPT_NOT_FOUND_ERROR)
            return False

        base_prompt = substitute_variables(script.content, self._substitution_context(org, person, attempt, now))
        prompt = await self._augment(base_prompt, org, attempt)

        if not await self.store.claim_attempt(org.id, attempt.id, now):
            logger.info(f"Org {org.id}: Call {attempt.id} already claimed by another dispatcher")
            return False

        request = OutboundCallRequest(
            phone_number_id=phone_number_id,
            customer_number=attempt.phone_number,
            first_message=self._first_message(org, person),
            system_prompt=prompt,
            voice_id=script.voice_id or self.default_voice_id,
            metadata={
                "organization_id": org.id,
                "person_id": attempt.person_id,
                "call_attempt_id": attempt.id,
            },
        )

        try:
            call_id = await self.voice_provider.place_call(request)
        except Exception as e:
            logger.error(f"Org {org.id}: Failed to execute call {attempt.id}: {e}")
            await self.store.mark_failed(org.id, attempt.id, str(e), attempt.retry_count + 1)
            return False

        await self.store.mark_in_progress(org.id, attempt.id, call_id, now)
        logger.info(f"Org {org.id}: Started call for person {attempt.person_id}, VAPI ID: {call_id}")
        return True

    async def _augment(self, base_prompt: str, org: Organization, attempt: OutreachAttempt) -> str:
        if not self.augmenter or not attempt.person_id:
            return base_prompt
        try:
            prompt = await self.augmenter.build_enhanced_prompt(base_prompt, attempt.person_id, org.id)
            logger.info(f"Org {org.id}: Enhanced prompt generated for person {attempt.person_id}")
            return prompt
        except Exception as e:
            logger.error(f"Org {org.id}: Failed to build enhanced prompt, falling back to base: {e}")
            return base_prompt

    async def _fail_permanently(self, org: Organization, attempt: OutreachAttempt, reason: str) -> None:
        """Data-integrity failures are not retryable; pin retry_count at the bound."""
        await self.store.mark_failed(org.id, attempt.id, reason, max(attempt.retry_count, self.max_retries))

    def _substitution_context(
        self,
        org: Organization,
        person: Optional[Person],
        attempt: OutreachAttempt,
        now: datetime
    ) -> SubstitutionContext:
        membership_duration = None
        if person and attempt.trigger_type == TriggerKind.ANNIVERSARY.value:
            membership_duration = calculate_membership_duration(
                org.local_time(person.created_at), org.local_time(now)
            )

        return SubstitutionContext(
            first_name=person.first_name if person else None,
            last_name=person.last_name if person else None,
            church_name=org.name,
            pastor_name="",
            day_of_week=day_of_week(org.local_time(now)),
            membership_duration=membership_duration,
        )

    def _first_message(self, org: Organization, person: Optional[Person]) -> str:
        first_name = (person.first_name if person else None) or "there"
        return f"Hi {first_name}, this is a call from {org.name or 'your church'}."

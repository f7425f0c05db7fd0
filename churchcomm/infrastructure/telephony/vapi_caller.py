"""
Vapi Call Origination Service
Handles outbound assistant calls via the Vapi REST API
"""
import logging
from typing import Optional

import httpx

from churchcomm.domain.interfaces.voice_provider import (
    OutboundCallRequest,
    VoiceProvider,
    VoiceProviderError,
    VoiceProviderNotConfiguredError,
)

logger = logging.getLogger(__name__)


class VapiCaller(VoiceProvider):
    """
    Vapi client for outbound call origination.

    Each call carries a transient assistant (first message, system prompt,
    model and voice), so no assistant has to be provisioned up front.

    Requirements:
    - VAPI_API_KEY environment variable
    - a Vapi phone number id (VAPI_PHONE_NUMBER_ID or an org dedicated number)
    """

    DEFAULT_BASE_URL = "https://api.vapi.ai"

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_BASE_URL,
        model_provider: str = "openai",
        model: str = "gpt-4o-mini",
        voice_provider: str = "11labs",
        timeout_seconds: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._model_provider = model_provider
        self._model = model
        self._voice_provider = voice_provider
        self._timeout = timeout_seconds
        self._transport = transport

    @classmethod
    def from_config(cls, api_key: Optional[str], config: dict) -> "VapiCaller":
        """Build from the providers.voice.vapi config section."""
        return cls(
            api_key=api_key,
            base_url=config.get("base_url", cls.DEFAULT_BASE_URL),
            model_provider=config.get("model_provider", "openai"),
            model=config.get("model", "gpt-4o-mini"),
            voice_provider=config.get("voice_provider", "11labs"),
            timeout_seconds=float(config.get("timeout_seconds", 30)),
        )

    @property
    def name(self) -> str:
        return "vapi"

    def is_configured(self) -> bool:
        return bool(self._api_key)

    def build_payload(self, request: OutboundCallRequest) -> dict:
        """Request body for POST /call/phone."""
        return {
            "phoneNumberId": request.phone_number_id,
            "customer": {"number": self._normalize_number(request.customer_number)},
            "assistant": {
                "firstMessage": request.first_message,
                "model": {
                    "provider": self._model_provider,
                    "model": self._model,
                    "messages": [{"role": "system", "content": request.system_prompt}],
                },
                "voice": {
                    "provider": self._voice_provider,
                    "voiceId": request.voice_id,
                },
                "metadata": request.metadata,
            },
        }

    async def place_call(self, request: OutboundCallRequest) -> str:
        """
        Initiate an outbound call.

        Returns:
            Vapi call id

        Raises:
            VoiceProviderNotConfiguredError: If no API key is set
            VoiceProviderError: On non-2xx responses, transport errors or a
                response without a call id
        """
        if not self.is_configured():
            raise VoiceProviderNotConfiguredError()

        logger.info(f"Initiating call: {request.phone_number_id} -> {request.customer_number[:6]}...")

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            try:
                response = await client.post(
                    f"{self._base_url}/call/phone",
                    json=self.build_payload(request),
                    headers={
                        "Authorization": f"Bearer {self._api_key}",
                        "Content-Type": "application/json",
                    }
                )
            except httpx.HTTPError as e:
                raise VoiceProviderError(f"VAPI request failed: {e}") from e

        if not response.is_success:
            raise VoiceProviderError(
                f"VAPI API error: {response.status_code} - {response.text}",
                status_code=response.status_code
            )

        try:
            call_id = response.json().get("id")
        except ValueError as e:
            raise VoiceProviderError(f"VAPI returned invalid JSON: {e}") from e

        if not call_id:
            raise VoiceProviderError("No call id returned from VAPI")

        logger.info(f"Call initiated: id={call_id}")
        return call_id

    def _normalize_number(self, number: str) -> str:
        """
        Normalize phone number to E.164 format.

        Args:
            number: Phone number in various formats

        Returns:
            Normalized number
        """
        number = number.replace(" ", "").replace("-", "").replace("(", "").replace(")", "").replace(".", "")

        # Add country code if missing (assuming US/Canada)
        if not number.startswith("+"):
            if len(number) == 10:
                number = "+1" + number
            elif len(number) == 11 and number.startswith("1"):
                number = "+" + number
            else:
                number = "+" + number

        return number

    async def cleanup(self) -> None:
        """Nothing is held between calls."""
        return None

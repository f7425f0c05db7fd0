"""
Voice Provider Interface
Abstract base class for AI voice-calling providers
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class VoiceProviderError(Exception):
    """Raised when the provider rejects a call or cannot be reached."""
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class VoiceProviderNotConfiguredError(VoiceProviderError):
    """Raised when provider credentials are missing."""
    def __init__(self, message: str = "Voice provider not configured. Set VAPI_API_KEY."):
        super().__init__(message)


class OutboundCallRequest(BaseModel):
    """Everything the provider needs to place one assistant-driven call"""
    phone_number_id: str = Field(..., description="Originating phone number id")
    customer_number: str = Field(..., description="Number to dial")
    first_message: str = Field(..., description="Opening spoken line")
    system_prompt: str = Field(..., description="Conversation instructions for the model")
    voice_id: str = Field(..., description="Provider voice identifier")
    metadata: Dict[str, Any] = Field(default_factory=dict)


class VoiceProvider(ABC):
    """Abstract base class for voice-calling providers"""

    @abstractmethod
    def is_configured(self) -> bool:
        """Whether credentials are present"""
        pass

    @abstractmethod
    async def place_call(self, request: OutboundCallRequest) -> str:
        """
        Initiate an outbound call

        Returns:
            call_id: Provider call identifier

        Raises:
            VoiceProviderError: On non-2xx responses or transport failures
        """
        pass

    @abstractmethod
    async def cleanup(self) -> None:
        """Release resources"""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name"""
        pass

"""Voice-calling provider implementations"""
from churchcomm.infrastructure.telephony.vapi_caller import VapiCaller

__all__ = ["VapiCaller"]

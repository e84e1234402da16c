"""Public interface for the Twilio delivery adapter."""

from __future__ import annotations

from .gateway import TwilioAPIError, TwilioGateway, to_e164

__all__ = ["TwilioAPIError", "TwilioGateway", "to_e164"]

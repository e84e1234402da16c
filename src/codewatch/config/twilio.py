"""Configuration for the Twilio SMS gateway."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from .env import require_env_vars

TWILIO_BASE_URL: Final[str] = "https://api.twilio.com"


@dataclass(frozen=True, slots=True)
class TwilioConfig:
    account_sid: str
    auth_token: str
    from_number: str
    base_url: str = TWILIO_BASE_URL

    @classmethod
    def from_environment(cls) -> TwilioConfig:
        values = require_env_vars(
            ("TWILIO_ACCOUNT_SID", "TWILIO_AUTH_TOKEN", "TWILIO_PHONE_NUMBER")
        )
        return cls(
            account_sid=values["TWILIO_ACCOUNT_SID"],
            auth_token=values["TWILIO_AUTH_TOKEN"],
            from_number=values["TWILIO_PHONE_NUMBER"],
        )


def get_twilio_config() -> TwilioConfig:
    return TwilioConfig.from_environment()

"""SMS delivery through the Twilio Messages API."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from codewatch.adapters.http_resilience import ResilientClient
from codewatch.config.http_resilience import ResilienceConfig
from codewatch.config.twilio import TwilioConfig
from codewatch.domain.model import DeliveryOutcome

if TYPE_CHECKING:
    from collections.abc import Callable

    from codewatch.domain.model import NotificationRequest

log = getLogger(__name__)

_DEFAULT_TIMEOUT_SECONDS = 15.0


class TwilioAPIError(RuntimeError):
    """Raised when Twilio rejects a message."""

    def __init__(self, message: str, *, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code


class MessageResponse(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    sid: str
    status: str | None = None


class ErrorResponse(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    code: int | None = None
    message: str = "unknown error"


def to_e164(phone: str) -> str:
    """Normalise a phone number: ten digits are treated as US numbers."""

    digits = "".join(ch for ch in phone if ch.isdigit())
    if len(digits) == 10:
        return f"+1{digits}"
    return f"+{digits}"


def _resilience_for(config: TwilioConfig) -> ResilienceConfig:
    return ResilienceConfig(
        name="twilio",
        base_url=config.base_url,
        timeout_seconds=_DEFAULT_TIMEOUT_SECONDS,
        cache=None,
    )


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class TwilioGateway:
    config: TwilioConfig = field(default_factory=TwilioConfig.from_environment)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    async def send(self, request: NotificationRequest) -> DeliveryOutcome:
        try:
            message_sid = await self._post_message(request)
        except TwilioAPIError as exc:
            log.warning(f"Twilio rejected message: {exc} (code={exc.code})")
            return DeliveryOutcome.failed(str(exc))
        except httpx.HTTPError as exc:
            log.warning(f"Twilio request failed: {exc!r}")
            return DeliveryOutcome.failed(f"transport error: {exc}")
        log.info(f"Twilio accepted message {message_sid}")
        return DeliveryOutcome.sent(message_sid)

    async def _post_message(self, request: NotificationRequest) -> str:
        path = f"/2010-04-01/Accounts/{self.config.account_sid}/Messages.json"
        form = {
            "To": to_e164(request.contact),
            "From": self.config.from_number,
            "Body": request.body,
        }
        async with self.client_factory(_resilience_for(self.config)) as client:
            response = await client.post(
                path,
                data=form,
                auth=(self.config.account_sid, self.config.auth_token),
            )

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.is_error:
            try:
                error = ErrorResponse.model_validate(payload)
            except ValidationError:
                error = ErrorResponse(message=f"HTTP {response.status_code}")
            raise TwilioAPIError(error.message, code=error.code)

        try:
            return MessageResponse.model_validate(payload).sid
        except ValidationError as exc:
            raise TwilioAPIError("Unexpected Twilio response payload") from exc

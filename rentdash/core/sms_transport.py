"""
Twilio SMS transport.
Sends through a Messaging Service, optionally from an alphanumeric sender name. When a carrier rejects
the alphanumeric sender, the same message is retried once with the Messaging Service's default sender.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Protocol

from twilio.base.exceptions import TwilioException, TwilioRestException
from twilio.rest import Client

from rentdash.core.config import Settings
from rentdash.core.exceptions import TransportError

logger = logging.getLogger(__name__)

# Twilio errors returned when a destination/carrier does not accept alphanumeric sender IDs
ALPHA_SENDER_REJECTION_CODES = frozenset({21211, 21606, 21408})


@dataclass(frozen=True)
class TransportResult:
    sid: str
    status: str


class MessageTransport(Protocol):
    async def send(self, to: str, body: str) -> TransportResult: ...


class TwilioSmsTransport:
    def __init__(
        self,
        client: Client | None,
        messaging_service_sid: str,
        *,
        alpha_sender_name: str | None = None,
        use_alphanumeric_sender: bool = False,
        status_callback: str | None = None,
    ):
        self._client = client
        self._messaging_service_sid = messaging_service_sid
        self._alpha_sender_name = (alpha_sender_name or "").strip() or None
        self._use_alphanumeric_sender = use_alphanumeric_sender
        self._status_callback = status_callback or None

    @property
    def uses_alphanumeric_sender(self) -> bool:
        return self._use_alphanumeric_sender and self._alpha_sender_name is not None

    async def send(self, to: str, body: str) -> TransportResult:
        """
        Send one SMS. Returns the Twilio message SID and status.
        Raises TransportError (with Twilio's error code) if the send, or its single fallback, fails.
        """
        if self._client is None or not self._messaging_service_sid:
            raise TransportError("Twilio is not configured (TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN, TWILIO_MSG_SERVICE_SID)")

        params: dict[str, Any] = {
            "to": to,
            "body": body,
            "messaging_service_sid": self._messaging_service_sid,
        }
        if self._status_callback:
            params["status_callback"] = self._status_callback

        if not self.uses_alphanumeric_sender:
            return await self._create(params)

        logger.debug("Attempting SMS with alphanumeric sender: %s", self._alpha_sender_name)
        try:
            return await self._create({**params, "from_": self._alpha_sender_name})
        except TransportError as e:
            if e.code not in ALPHA_SENDER_REJECTION_CODES:
                raise
            logger.warning(
                "Alphanumeric sender rejected (code %s) for %s; retrying with Messaging Service default sender",
                e.code, to,
            )
        # Exactly one fallback attempt; its failure propagates as-is.
        result = await self._create(params)
        logger.info("SMS sent via fallback sender: sid=%s", result.sid)
        return result

    async def _create(self, params: dict[str, Any]) -> TransportResult:
        try:
            message = await asyncio.to_thread(self._client.messages.create, **params)
        except TwilioRestException as e:
            raise TransportError(e.msg or str(e), code=e.code) from e
        except TwilioException as e:
            raise TransportError(str(e)) from e
        logger.debug("SMS accepted by Twilio: sid=%s status=%s", message.sid, message.status)
        return TransportResult(sid=message.sid, status=str(message.status))


def build_sms_transport(settings: Settings) -> TwilioSmsTransport:
    """Transport from settings. Without credentials every send fails with TransportError (and is logged as failed)."""
    client = None
    if settings.TWILIO_ACCOUNT_SID and settings.TWILIO_AUTH_TOKEN:
        client = Client(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)
    else:
        logger.warning("Twilio credentials not configured; SMS sends will fail")
    return TwilioSmsTransport(
        client,
        settings.TWILIO_MSG_SERVICE_SID,
        alpha_sender_name=settings.ALPHA_SENDER_NAME,
        use_alphanumeric_sender=settings.USE_ALPHANUMERIC_SENDER,
        status_callback=settings.TWILIO_STATUS_CALLBACK_URL,
    )

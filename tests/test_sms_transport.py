from __future__ import annotations

import asyncio
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from twilio.base.exceptions import TwilioRestException

from rentdash.core.config import Settings
from rentdash.core.exceptions import TransportError
from rentdash.core.sms_transport import TwilioSmsTransport, build_sms_transport


def _twilio_error(code: int, msg: str = "rejected") -> TwilioRestException:
    return TwilioRestException(400, "https://api.twilio.com/2010-04-01/Accounts/AC1/Messages.json", msg=msg, code=code)


def _message(sid: str = "SM123", status: str = "queued") -> SimpleNamespace:
    return SimpleNamespace(sid=sid, status=status)


def _transport(client: MagicMock, *, alpha: bool = True, status_callback: str | None = None) -> TwilioSmsTransport:
    return TwilioSmsTransport(
        client,
        "MG000",
        alpha_sender_name="Sukaj SHPK",
        use_alphanumeric_sender=alpha,
        status_callback=status_callback,
    )


def test_send_without_alphanumeric_sender_uses_messaging_service() -> None:
    client = MagicMock()
    client.messages.create.return_value = _message()

    result = asyncio.run(_transport(client, alpha=False).send("+3551", "hello"))

    assert result.sid == "SM123"
    assert result.status == "queued"
    client.messages.create.assert_called_once_with(to="+3551", body="hello", messaging_service_sid="MG000")


def test_send_with_alphanumeric_sender_and_status_callback() -> None:
    client = MagicMock()
    client.messages.create.return_value = _message()

    asyncio.run(_transport(client, status_callback="https://example.com/sms-status").send("+3551", "hello"))

    client.messages.create.assert_called_once_with(
        to="+3551",
        body="hello",
        messaging_service_sid="MG000",
        status_callback="https://example.com/sms-status",
        from_="Sukaj SHPK",
    )


@pytest.mark.parametrize("code", [21211, 21606, 21408])
def test_rejected_alphanumeric_sender_falls_back_once(code: int) -> None:
    client = MagicMock()
    client.messages.create.side_effect = [_twilio_error(code), _message("SM-fallback")]

    result = asyncio.run(_transport(client).send("+3551", "hello"))

    assert result.sid == "SM-fallback"
    assert client.messages.create.call_count == 2
    first, second = client.messages.create.call_args_list
    assert first.kwargs["from_"] == "Sukaj SHPK"
    assert "from_" not in second.kwargs
    assert second.kwargs["body"] == "hello"
    assert second.kwargs["to"] == "+3551"


def test_failing_fallback_raises_its_own_error_without_further_retries() -> None:
    client = MagicMock()
    client.messages.create.side_effect = [_twilio_error(21606), _twilio_error(30003, "Unreachable handset")]

    with pytest.raises(TransportError) as exc_info:
        asyncio.run(_transport(client).send("+3551", "hello"))

    assert exc_info.value.code == 30003
    assert exc_info.value.message == "Unreachable handset"
    assert client.messages.create.call_count == 2


def test_other_errors_propagate_without_fallback() -> None:
    client = MagicMock()
    client.messages.create.side_effect = _twilio_error(21610, "Unsubscribed recipient")

    with pytest.raises(TransportError) as exc_info:
        asyncio.run(_transport(client).send("+3551", "hello"))

    assert exc_info.value.code == 21610
    client.messages.create.assert_called_once()


def test_no_fallback_when_alphanumeric_sender_disabled() -> None:
    client = MagicMock()
    client.messages.create.side_effect = _twilio_error(21606)

    with pytest.raises(TransportError) as exc_info:
        asyncio.run(_transport(client, alpha=False).send("+3551", "hello"))

    assert exc_info.value.code == 21606
    client.messages.create.assert_called_once()


def test_unconfigured_transport_fails_every_send() -> None:
    settings = Settings(DATABASE_URL="postgresql+asyncpg://x/y", TWILIO_ACCOUNT_SID="", TWILIO_AUTH_TOKEN="")

    transport = build_sms_transport(settings)

    with pytest.raises(TransportError, match="not configured"):
        asyncio.run(transport.send("+3551", "hello"))

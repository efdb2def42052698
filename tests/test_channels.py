from datetime import datetime, timezone

import pytest
import requests

from leadscout.core.config import Settings
from leadscout.models import Business
from leadscout.outreach import channels
from leadscout.outreach.notifications import build_interest_message, send_interest_notification


class DummyResponse:
    def __init__(self, payload=None, status_code=200):
        self._payload = payload if payload is not None else {}
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._payload


class DummySession:
    def __init__(self, response=None, error=None):
        self.response = response or DummyResponse()
        self.error = error
        self.calls = []

    def _respond(self):
        if self.error:
            raise self.error
        return self.response

    def get(self, url, params=None, timeout=None):
        self.calls.append(("GET", url, params, None))
        return self._respond()

    def post(self, url, json=None, headers=None, timeout=None):
        self.calls.append(("POST", url, json, headers))
        return self._respond()


def make_business(**overrides):
    fields = {
        "id": 7,
        "external_id": "place-7",
        "name": "Joe's Cafe",
        "address": "1 Main St",
        "created_at": datetime(2024, 5, 1, tzinfo=timezone.utc),
        "phone": "0772 123456",
        "email": "joe@example.com",
    }
    fields.update(overrides)
    return Business(**fields)


def test_format_phone_for_sms():
    assert channels.format_phone_for_sms("0772 123456") == "+256772123456"
    assert channels.format_phone_for_sms("256772123456") == "+256772123456"
    assert channels.format_phone_for_sms("+1 305 555 0100") == "+13055550100"
    assert channels.format_phone_for_sms("772123456") == "+256772123456"
    assert channels.format_phone_for_sms("3055550100") == "3055550100"


def test_format_phone_for_whatsapp():
    assert channels.format_phone_for_whatsapp("+256 772 123456") == "256772123456"


def test_sms_success():
    session = DummySession(DummyResponse({"success": True, "textId": "1"}))

    outcome = channels.SmsChannel("textbelt", session=session).send(make_business(), "Hi", "Body")

    assert outcome.success
    assert outcome.channel == "sms"
    _, url, payload, _ = session.calls[0]
    assert url == channels.TEXTBELT_URL
    assert payload["phone"] == "+256772123456"
    assert payload["key"] == "textbelt"


def test_sms_truncates_message():
    session = DummySession(DummyResponse({"success": True}))

    channels.SmsChannel(session=session).send(make_business(), "Subject", "x" * 500)

    assert len(session.calls[0][2]["message"]) == channels.SMS_MAX_LENGTH


def test_sms_rejected_is_failure():
    session = DummySession(DummyResponse({"success": False, "error": "Out of quota"}))

    outcome = channels.SmsChannel(session=session).send(make_business(), "Hi", "Body")

    assert not outcome.success
    assert "Out of quota" in outcome.detail


def test_sms_transport_error_is_failure():
    session = DummySession(error=requests.ConnectionError("reset"))

    outcome = channels.SmsChannel(session=session).send(make_business(), "Hi", "Body")

    assert not outcome.success
    assert "reset" in outcome.detail


def test_phone_channels_need_a_phone():
    business = make_business(phone=None)

    assert not channels.SmsChannel().available_for(business)
    assert not channels.WhatsAppChannel("key").available_for(business)


def test_whatsapp_sends_via_callmebot():
    session = DummySession()

    outcome = channels.WhatsAppChannel("apikey", session=session).send(make_business(phone="+256 772 123456"), "Hi", "Body")

    assert outcome.success
    method, url, params, _ = session.calls[0]
    assert (method, url) == ("GET", channels.CALLMEBOT_URL)
    assert params["phone"] == "256772123456"
    assert params["text"] == "Hi\n\nBody"


def test_email_without_provider_is_logged_success():
    session = DummySession()

    outcome = channels.EmailChannel(session=session).send(make_business(), "Hi", "Body")

    assert outcome.success
    assert outcome.detail == "Email prepared for joe@example.com (no email provider configured)"
    assert session.calls == []


def test_email_via_sendgrid():
    session = DummySession(DummyResponse(status_code=202))
    channel = channels.EmailChannel("sg-key", session=session).with_sender("me@agency.com", "Ann")

    outcome = channel.send(make_business(), "Hi", "Line1\nLine2")

    assert outcome.success
    _, url, payload, headers = session.calls[0]
    assert url == channels.SENDGRID_URL
    assert headers["Authorization"] == "Bearer sg-key"
    assert payload["from"] == {"email": "me@agency.com", "name": "Ann"}
    assert payload["personalizations"][0]["to"] == [{"email": "joe@example.com"}]
    assert payload["content"][1]["value"] == "Line1<br>Line2"


def test_email_provider_error_is_failure():
    session = DummySession(DummyResponse(status_code=401))

    outcome = channels.EmailChannel("bad-key", session=session).send(make_business(), "Hi", "Body")

    assert not outcome.success


def test_webhook_without_url_is_logged_success():
    outcome = channels.WebhookChannel(session=DummySession()).send(make_business(email=None, phone=None), "Hi", "Body")

    assert outcome.success
    assert outcome.detail == "Business data logged for manual follow-up"
    assert channels.WebhookChannel().available_for(make_business(email=None, phone=None))


def test_webhook_posts_payload():
    session = DummySession()

    outcome = channels.WebhookChannel("https://hooks.example/lead", session=session).send(make_business(), "Hi", "Body")

    assert outcome.success
    _, url, payload, _ = session.calls[0]
    assert url == "https://hooks.example/lead"
    assert payload["business"]["name"] == "Joe's Cafe"
    assert payload["outreach"] == {"subject": "Hi", "message": "Body", "priority": "high"}


def test_webhook_failure():
    session = DummySession(DummyResponse(status_code=500))

    outcome = channels.WebhookChannel("https://hooks.example/lead", session=session).send(make_business(), "Hi", "Body")

    assert not outcome.success
    assert outcome.to_dict()["channel"] == "webhook"


def test_interest_notification_requires_provider():
    outcome = send_interest_notification(Settings(), make_business(), "owner@agency.com")

    assert not outcome.success


def test_interest_notification_sends_email(monkeypatch):
    sent = {}

    def fake_send_to(self, to, subject, body):
        sent.update(to=to, subject=subject, body=body, key=self.api_key)
        return self._ok(f"Email sent to {to} via SendGrid")

    monkeypatch.setattr(channels.EmailChannel, "send_to", fake_send_to)

    outcome = send_interest_notification(Settings(sendgrid_api_key="sg"), make_business(), "owner@agency.com")

    assert outcome.success
    assert sent["to"] == "owner@agency.com"
    assert sent["subject"] == "Business Interest Alert: Joe's Cafe"
    assert sent["key"] == "sg"


@pytest.mark.parametrize("phone, expected", [("0772 123456", "0772 123456"), (None, "1 Main St")])
def test_interest_message_contact(phone, expected):
    assert f"- Contact: {expected}" in build_interest_message(make_business(phone=phone))

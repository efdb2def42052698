"""Outreach delivery channels.

Each channel exposes ``send(business, subject, body) -> ChannelOutcome`` and
never raises: transport errors are folded into a failed outcome so the
dispatcher can move on to the next channel.
"""

from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import requests

from leadscout.models import Business

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10
SMS_MAX_LENGTH = 160
DEFAULT_COUNTRY_CODE = "256"
CALLMEBOT_URL = "https://api.callmebot.com/whatsapp.php"
TEXTBELT_URL = "https://textbelt.com/text"
SENDGRID_URL = "https://api.sendgrid.com/v3/mail/send"


@dataclass(frozen=True)
class ChannelOutcome:
    channel: str
    success: bool
    detail: str

    def to_dict(self) -> Dict[str, Any]:
        return {"channel": self.channel, "success": self.success, "detail": self.detail}


def format_phone_for_whatsapp(phone: str) -> str:
    return re.sub(r"[+\s]", "", phone)


def format_phone_for_sms(phone: str, country_code: str = DEFAULT_COUNTRY_CODE) -> str:
    """Best-effort international format; local numbers get ``country_code``."""
    cleaned = re.sub(r"\s", "", phone)
    if cleaned.startswith("+"):
        return cleaned
    if cleaned.startswith(country_code):
        return f"+{cleaned}"
    if cleaned.startswith("0"):
        return f"+{country_code}{cleaned[1:]}"
    if re.match(r"^[789]", cleaned):
        return f"+{country_code}{cleaned}"
    return cleaned


class Channel(ABC):
    name = "channel"

    def available_for(self, business: Business) -> bool:
        return True

    @abstractmethod
    def send(self, business: Business, subject: str, body: str) -> ChannelOutcome:
        ...

    def _ok(self, detail: str) -> ChannelOutcome:
        return ChannelOutcome(self.name, True, detail)

    def _failed(self, detail: str) -> ChannelOutcome:
        return ChannelOutcome(self.name, False, detail)


class WhatsAppChannel(Channel):
    """WhatsApp through the CallMeBot HTTP API."""

    name = "whatsapp"

    def __init__(self, api_key: str, session: Optional[requests.Session] = None) -> None:
        self.api_key = api_key
        self.session = session or requests.Session()

    def available_for(self, business: Business) -> bool:
        return bool(business.phone)

    def send(self, business: Business, subject: str, body: str) -> ChannelOutcome:
        phone = business.phone or ""
        params = {"phone": format_phone_for_whatsapp(phone), "text": f"{subject}\n\n{body}", "apikey": self.api_key}
        try:
            response = self.session.get(CALLMEBOT_URL, params=params, timeout=REQUEST_TIMEOUT)
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("WhatsApp delivery to %s failed: %s", phone, exc)
            return self._failed(f"Failed to send WhatsApp to {phone}: {exc}")
        return self._ok(f"WhatsApp message sent to {phone} via CallMeBot")


class SmsChannel(Channel):
    """SMS through TextBelt (the ``textbelt`` key allows one free message per day)."""

    name = "sms"

    def __init__(self, key: str = "textbelt", session: Optional[requests.Session] = None) -> None:
        self.key = key
        self.session = session or requests.Session()

    def available_for(self, business: Business) -> bool:
        return bool(business.phone)

    def send(self, business: Business, subject: str, body: str) -> ChannelOutcome:
        phone = business.phone or ""
        payload = {
            "phone": format_phone_for_sms(phone),
            "message": f"{subject}\n\n{body}"[:SMS_MAX_LENGTH],
            "key": self.key,
        }
        try:
            response = self.session.post(TEXTBELT_URL, json=payload, timeout=REQUEST_TIMEOUT)
            response.raise_for_status()
            result = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.warning("SMS delivery to %s failed: %s", phone, exc)
            return self._failed(f"Failed to send SMS to {phone}: {exc}")

        if not result.get("success"):
            error = result.get("error") or "TextBelt rejected the message"
            logger.warning("TextBelt refused SMS to %s: %s", phone, error)
            return self._failed(f"SMS to {phone} not sent: {error}")
        return self._ok(f"SMS delivered to {phone} via TextBelt")


class EmailChannel(Channel):
    """Email through SendGrid; without an API key the message is only logged."""

    name = "email"

    def __init__(
        self,
        api_key: str = "",
        from_email: str = "",
        from_name: str = "",
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.from_email = from_email
        self.from_name = from_name
        self.session = session or requests.Session()

    def available_for(self, business: Business) -> bool:
        return bool(business.email)

    def with_sender(self, from_email: str, from_name: str) -> "EmailChannel":
        return EmailChannel(self.api_key, from_email, from_name, session=self.session)

    def send(self, business: Business, subject: str, body: str) -> ChannelOutcome:
        return self.send_to(business.email or "", subject, body)

    def send_to(self, to: str, subject: str, body: str) -> ChannelOutcome:
        if not self.api_key:
            logger.info("Email (not sent, no provider configured) to=%s subject=%s\n%s", to, subject, body)
            return self._ok(f"Email prepared for {to} (no email provider configured)")

        sender = {"email": self.from_email or to}
        if self.from_name:
            sender["name"] = self.from_name
        payload = {
            "personalizations": [{"to": [{"email": to}]}],
            "from": sender,
            "subject": subject,
            "content": [
                {"type": "text/plain", "value": body},
                {"type": "text/html", "value": body.replace("\n", "<br>")},
            ],
        }
        try:
            response = self.session.post(
                SENDGRID_URL,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=REQUEST_TIMEOUT,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("SendGrid delivery to %s failed: %s", to, exc)
            return self._failed(f"Failed to send email to {to}: {exc}")
        return self._ok(f"Email sent to {to} via SendGrid")


class WebhookChannel(Channel):
    """Hands the prospect to an automation webhook for manual follow-up."""

    name = "webhook"

    def __init__(self, url: str = "", session: Optional[requests.Session] = None) -> None:
        self.url = url
        self.session = session or requests.Session()

    def build_payload(self, business: Business, subject: str, body: str) -> Dict[str, Any]:
        return {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "business": {
                "id": business.id,
                "name": business.name,
                "phone": business.phone,
                "email": business.email,
                "address": business.address,
                "category": business.category,
            },
            "outreach": {"subject": subject, "message": body, "priority": "high"},
            "actions_suggested": [
                "Call business owner",
                "Send WhatsApp message",
                "Visit location",
                "Follow up via social media",
            ],
        }

    def send(self, business: Business, subject: str, body: str) -> ChannelOutcome:
        payload = self.build_payload(business, subject, body)
        if not self.url:
            logger.info("Webhook notification (no URL configured): %s", json.dumps(payload))
            return self._ok("Business data logged for manual follow-up")

        try:
            response = self.session.post(self.url, json=payload, timeout=REQUEST_TIMEOUT)
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("Webhook delivery for business %s failed: %s", business.id, exc)
            return self._failed(f"Failed to send webhook notification: {exc}")
        return self._ok("Business data sent to automation webhook for manual follow-up")

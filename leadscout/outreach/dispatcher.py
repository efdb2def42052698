"""Sequential multi-channel outreach over stored prospects."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from leadscout.core.config import Settings
from leadscout.core.store import ProspectStore
from leadscout.models import Business, ContactStatus
from leadscout.outreach.channels import (
    Channel,
    ChannelOutcome,
    EmailChannel,
    SmsChannel,
    WebhookChannel,
    WhatsAppChannel,
)
from leadscout.outreach.templates import render_message

logger = logging.getLogger(__name__)

PHONE_CHANNELS = ("whatsapp", "sms")


@dataclass
class DispatchReport:
    results: List[Dict[str, Any]] = field(default_factory=list)
    counts: Dict[str, int] = field(default_factory=dict)

    @property
    def total_processed(self) -> int:
        return len(self.results)

    def record(self, business: Business, outcome: ChannelOutcome) -> None:
        self.results.append(
            {
                "businessId": business.id,
                "business": business.name,
                "channel": outcome.channel,
                "method": outcome.channel if outcome.success else "failed",
                "success": outcome.success,
                "outcome": "delivered" if outcome.success else "failed",
                "details": outcome.detail,
            }
        )
        key = outcome.channel if outcome.success else "failed"
        self.counts[key] = self.counts.get(key, 0) + 1

    def to_dict(self) -> Dict[str, Any]:
        email = self.counts.get("email", 0)
        phone = sum(self.counts.get(channel, 0) for channel in PHONE_CHANNELS)
        webhook = self.counts.get("webhook", 0)
        failed = self.counts.get("failed", 0)
        return {
            "emailSuccessCount": email,
            "smsSuccessCount": phone,
            "webhookSuccessCount": webhook,
            "failureCount": failed,
            "totalProcessed": self.total_processed,
            "counts": dict(self.counts),
            "results": self.results,
            "message": (
                f"Contacted {email + phone + webhook} businesses successfully "
                f"({email} emails, {phone} SMS/WhatsApp, {webhook} webhook). {failed} failed."
            ),
        }


class OutreachDispatcher:
    """Contacts businesses one at a time through a prioritized channel chain.

    The first channel that reports success wins and nothing is retried. The
    business is marked ``contacted`` with the outcome detail in ``notes``
    whether or not any channel succeeded.
    """

    def __init__(
        self,
        store: ProspectStore,
        channels: Sequence[Channel],
        delay_seconds: float = 0.5,
    ) -> None:
        if not channels:
            raise ValueError("at least one outreach channel is required")
        self.store = store
        self.channels = list(channels)
        self.delay_seconds = delay_seconds

    def channels_for_sender(self, sender_email: str, sender_name: str) -> List[Channel]:
        if not sender_email:
            return self.channels
        return [
            channel.with_sender(sender_email, sender_name) if isinstance(channel, EmailChannel) else channel
            for channel in self.channels
        ]

    def deliver(
        self,
        business: Business,
        subject: str,
        body: str,
        channels: Optional[Sequence[Channel]] = None,
    ) -> ChannelOutcome:
        outcome: Optional[ChannelOutcome] = None
        for channel in channels or self.channels:
            if not channel.available_for(business):
                continue
            try:
                outcome = channel.send(business, subject, body)
            except Exception as exc:  # noqa: BLE001
                logger.exception("Channel %s raised for business %s", channel.name, business.id)
                outcome = ChannelOutcome(channel.name, False, f"{channel.name} error: {exc}")
            if outcome.success:
                return outcome
            logger.info("Channel %s failed for business %s: %s", channel.name, business.id, outcome.detail)

        if outcome is None:
            return ChannelOutcome("none", False, "No contact methods available")
        return outcome

    def dispatch(
        self,
        business_ids: Sequence[int],
        template_key: str,
        *,
        sender_name: str = "",
        sender_email: str = "",
        subject: Optional[str] = None,
        message: Optional[str] = None,
    ) -> DispatchReport:
        report = DispatchReport()
        channels = self.channels_for_sender(sender_email, sender_name)
        businesses = [b for b in (self.store.get(business_id) for business_id in business_ids) if b is not None]
        logger.info("Dispatching template=%s to %d businesses", template_key, len(businesses))

        for index, business in enumerate(businesses):
            if index and self.delay_seconds > 0:
                time.sleep(self.delay_seconds)

            rendered_subject, body = render_message(
                template_key,
                business,
                sender_name=sender_name,
                sender_email=sender_email,
                subject=subject,
                message=message,
            )
            outcome = self.deliver(business, rendered_subject, body, channels)
            self.store.update(
                business.id,
                {
                    "contact_status": ContactStatus.CONTACTED,
                    "notes": f"{outcome.detail} (Template: {template_key})",
                },
            )
            report.record(business, outcome)
        return report


def build_channels(settings: Settings) -> List[Channel]:
    """WhatsApp (when configured), SMS, email, then the always-available webhook."""
    channels: List[Channel] = []
    if settings.callmebot_api_key:
        channels.append(WhatsAppChannel(settings.callmebot_api_key))
    channels.append(SmsChannel(settings.textbelt_key))
    channels.append(EmailChannel(settings.sendgrid_api_key))
    channels.append(WebhookChannel(settings.outreach_webhook_url))
    return channels


def build_dispatcher(settings: Settings, store: ProspectStore) -> OutreachDispatcher:
    return OutreachDispatcher(store, build_channels(settings), delay_seconds=settings.outreach_delay_seconds)

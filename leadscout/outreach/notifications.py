"""Operator notifications raised by contact-status changes."""

import logging

from leadscout.core.config import Settings
from leadscout.models import Business
from leadscout.outreach.channels import ChannelOutcome, EmailChannel

logger = logging.getLogger(__name__)


def build_interest_message(business: Business) -> str:
    contact = business.phone or business.address
    return (
        "Good news! A business has expressed interest in your website services.\n\n"
        "Business Details:\n"
        f"- Name: {business.name}\n"
        f"- Contact: {contact}\n\n"
        "You can now reach out to them directly to discuss their website needs.\n\n"
        "This is an automated notification from LeadScout."
    )


def send_interest_notification(settings: Settings, business: Business, notification_email: str) -> ChannelOutcome:
    """Email the operator that ``business`` became interested; requires a SendGrid key."""
    if not settings.sendgrid_api_key:
        logger.info("SENDGRID_API_KEY missing; skipping interest notification for %s", business.id)
        return ChannelOutcome("email", False, "Email provider not configured")

    channel = EmailChannel(settings.sendgrid_api_key, from_email=notification_email)
    outcome = channel.send_to(
        notification_email,
        f"Business Interest Alert: {business.name}",
        build_interest_message(business),
    )
    if not outcome.success:
        logger.error("Failed to send interest notification for %s: %s", business.id, outcome.detail)
    return outcome

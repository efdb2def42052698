"""Outreach message templates and placeholder substitution."""

from typing import Dict, Optional, Tuple

from leadscout.models import Business

CUSTOM_TEMPLATE = "custom"

TEMPLATES: Dict[str, Dict[str, str]] = {
    "website_offer": {
        "subject": "Website Opportunity - [Business Name]",
        "body": (
            "Hello [Business Name]!\n\n"
            "I help local businesses get professional websites that bring in more customers.\n\n"
            "Your business would benefit from:\n"
            "- A professional, mobile-friendly website\n"
            "- Visibility on Google searches\n"
            "- More trust from new customers\n\n"
            "Interested? Let's discuss how a website can grow your business.\n\n"
            "[Your Name]\n[Your Email]"
        ),
    },
    "quick_offer": {
        "subject": "Quick Website Setup - [Business Name]",
        "body": (
            "Hi [Business Name]!\n\n"
            "Get your business online in 7 days:\n"
            "- Professional website\n"
            "- Mobile-friendly\n"
            "- Found on Google\n\n"
            "Reply to this message to get started.\n\n[Your Name]"
        ),
    },
    "digital_presence": {
        "subject": "[Business Name] deserves a stronger online presence",
        "body": (
            "Hello [Business Name]! Your business deserves a strong online presence. "
            "I help local businesses get found on Google with professional websites. "
            "Interested? Reply to this message.\n\n[Your Name]"
        ),
    },
    "follow_up": {
        "subject": "Quick Follow-up: Website Consultation for [Business Name]",
        "body": (
            "Hi [Business Name],\n\n"
            "I reached out recently about creating a professional website for your business. "
            "I'm still offering a free 15-minute consultation covering how a website could help you, "
            "simple options that fit your budget and honest advice about your online presence.\n\n"
            "Would a quick call this week work for you?\n\n[Your Name]"
        ),
    },
    "social_media_offer": {
        "subject": "[Business Name] - Missing Customers on Social Media?",
        "body": (
            "Hello [Business Name],\n\n"
            "I noticed [Business Name] doesn't have much of a social media presence. "
            "I help local businesses set up professional profiles, plan content and manage reviews "
            "so that nearby customers can find them.\n\n"
            "Would you be interested in a free strategy session this week?\n\n[Your Name]"
        ),
    },
    "google_my_business": {
        "subject": "Is [Business Name] Missing from Google Searches?",
        "body": (
            "Hi [Business Name] Team,\n\n"
            "While researching local businesses I noticed [Business Name] might not be fully optimized on Google. "
            "A complete business profile with photos, accurate details and review responses gets far more clicks.\n\n"
            "I can provide a free analysis of how [Business Name] appears in local searches.\n\n[Your Name]"
        ),
    },
}

DEFAULT_TEMPLATE = {
    "subject": "Business Opportunity - [Business Name]",
    "body": (
        "Hello [Business Name]! I have a business opportunity that could help grow your company. "
        "Please contact me to learn more."
    ),
}


def template_keys() -> Tuple[str, ...]:
    return tuple(TEMPLATES) + (CUSTOM_TEMPLATE,)


def personalize(text: str, business_name: str, sender_name: str = "", sender_email: str = "") -> str:
    text = text.replace("[Business Name]", business_name)
    if sender_name:
        text = text.replace("[Your Name]", sender_name)
    if sender_email:
        text = text.replace("[Your Email]", sender_email)
    return text


def render_message(
    template_key: str,
    business: Business,
    *,
    sender_name: str = "",
    sender_email: str = "",
    subject: Optional[str] = None,
    message: Optional[str] = None,
) -> Tuple[str, str]:
    """Return ``(subject, body)`` for ``business``; ``custom`` uses the caller's text."""
    if template_key == CUSTOM_TEMPLATE and subject and message:
        template = {"subject": subject, "body": message}
    else:
        template = TEMPLATES.get(template_key, DEFAULT_TEMPLATE)
    return (
        personalize(template["subject"], business.name, sender_name, sender_email),
        personalize(template["body"], business.name, sender_name, sender_email),
    )

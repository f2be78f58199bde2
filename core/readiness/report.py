from __future__ import annotations

from html import escape
from typing import Dict

from pydantic import BaseModel

from core.readiness.models import Tier
from core.readiness.scoring import tier_for


class TierCopy(BaseModel):
    title: str
    message: str


_FOUNDATIONS = (
    "Your assessment is complete! Check your email for your Strategic AI Report "
    "focused on building foundations."
)
_SCALING = (
    "Your custom Strategic AI Report is in your inbox! "
    "You have a strong base for AI scaling."
)

TIER_COPY: Dict[Tier, TierCopy] = {
    Tier.EARLY: TierCopy(title="Early Stage Readiness", message=_FOUNDATIONS),
    Tier.STRATEGIC: TierCopy(title="Strategic Builder", message=_SCALING),
    Tier.LEADER: TierCopy(title="AI Market Leader", message=_SCALING),
}


def copy_for(tier: Tier) -> TierCopy:
    return TIER_COPY[tier]


def report_subject(readiness_score: int) -> str:
    return f"Your AI Readiness Score: {readiness_score}%"


def format_report_html(*, full_name: str, readiness_score: int, sender_name: str) -> str:
    """Body of the email that carries the PDF report to the lead."""
    title = copy_for(tier_for(readiness_score)).title
    return f"""
<div style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
    <h2>Hi {escape(full_name)},</h2>
    <p>Thank you for completing the <strong>Strategic AI Readiness Assessment</strong>.</p>
    <p>Your current readiness score is: <span style="font-size: 24px; color: #C9A44A; font-weight: bold;">{readiness_score}%</span> ({escape(title)})</p>
    <p>I have attached your <strong>Strategic AI Clarity Report</strong>. This document outlines the roadmap needed to navigate your AI transformation.</p>
    <br>
    <p>Best regards,<br><strong>{escape(sender_name)}</strong></p>
</div>
""".strip()


def admin_subject(*, full_name: str, readiness_score: int) -> str:
    return f"New Lead: {full_name} ({readiness_score}%)"


def format_admin_html(*, full_name: str, email: str, readiness_score: int) -> str:
    tier = tier_for(readiness_score)
    return (
        f"<p>New assessment completed by <strong>{escape(full_name)}</strong> "
        f"({escape(email)}). Score: <strong>{readiness_score}%</strong> "
        f"({tier.value}).</p>"
    )


NEWSLETTER_SUBJECT = "Welcome to AI Maverick Insights"
NEWSLETTER_HTML = "<p>You've successfully subscribed to AI strategy insights.</p>"

# notifications.py
"""
Outbound email over the Resend HTTP API.

Every sender returns True/False instead of raising; callers decide whether a
failed send is fatal for the request.
"""

from __future__ import annotations

import base64
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests

import config
from core.readiness import report

logger = logging.getLogger("readiness.notifications")

RESEND_API_URL = "https://api.resend.com/emails"


def _from_header() -> str:
    s = config.settings
    return f"{s.EMAIL_FROM_NAME} <{s.EMAIL_FROM}>"


def load_report_attachment() -> Optional[Dict[str, str]]:
    """
    Resend attachment payload for the report PDF, or None when no PDF is configured.

    Raises FileNotFoundError when a PDF is configured but missing.
    """
    s = config.settings
    if not s.REPORT_PDF_PATH:
        return None
    data = Path(s.REPORT_PDF_PATH).read_bytes()
    return {
        "filename": s.REPORT_PDF_FILENAME,
        "content": base64.b64encode(data).decode("ascii"),
    }


def resend_send_email(
    *,
    to_email: str,
    subject: str,
    html: str,
    attachments: Optional[List[Dict[str, str]]] = None,
) -> bool:
    s = config.settings
    if not s.email_enabled:
        logger.info("Email not configured; skipping send to %s", to_email)
        return False

    headers = {"Authorization": f"Bearer {s.RESEND_API_KEY}", "Content-Type": "application/json"}
    data: Dict[str, Any] = {
        "from": _from_header(),
        "to": [to_email],
        "subject": subject,
        "html": html,
    }
    if attachments:
        data["attachments"] = attachments
    try:
        r = requests.post(RESEND_API_URL, headers=headers, json=data, timeout=s.RESEND_TIMEOUT)
        r.raise_for_status()
        return True
    except Exception:
        logger.exception("Resend send failed (subject=%s)", subject)
        return False


def send_lead_report(*, full_name: str, email: str, readiness_score: int) -> bool:
    try:
        attachment = load_report_attachment()
    except OSError:
        logger.exception("Report PDF unavailable at %s", config.settings.REPORT_PDF_PATH)
        return False

    return resend_send_email(
        to_email=email,
        subject=report.report_subject(readiness_score),
        html=report.format_report_html(
            full_name=full_name,
            readiness_score=readiness_score,
            sender_name=config.settings.EMAIL_FROM_NAME,
        ),
        attachments=[attachment] if attachment else None,
    )


def send_admin_notification(*, full_name: str, email: str, readiness_score: int) -> bool:
    admin = config.settings.admin_email
    if not admin:
        return False
    return resend_send_email(
        to_email=admin,
        subject=report.admin_subject(full_name=full_name, readiness_score=readiness_score),
        html=report.format_admin_html(full_name=full_name, email=email, readiness_score=readiness_score),
    )


def send_newsletter_welcome(*, email: str) -> bool:
    return resend_send_email(
        to_email=email,
        subject=report.NEWSLETTER_SUBJECT,
        html=report.NEWSLETTER_HTML,
    )

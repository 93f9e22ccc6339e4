"""
Outgoing email over SMTP: invitations and plan-change notifications.
Sending is best effort; callers schedule it as a FastAPI background task.
"""

import logging
import smtplib
from datetime import datetime
from email.message import EmailMessage
from typing import Optional

from clubflow.config import settings

logger = logging.getLogger(__name__)

ROLE_TRANSLATIONS = {
    "member": "Mitglied",
    "trainer": "Trainer",
    "club-administrator": "Vereinsadministrator",
    "obmann": "Obmann",
}


def send_email(to: str, subject: str, text: str, html: Optional[str] = None) -> bool:
    """Send one message. Returns False when SMTP is not configured or delivery fails."""
    if not settings.smtp_configured:
        logger.warning(f"SMTP not configured, email to {to} not sent: {subject}")
        return False

    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = settings.mail_from
    msg["To"] = to
    msg.set_content(text)
    if html:
        msg.add_alternative(html, subtype="html")

    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=10) as smtp:
            if settings.smtp_use_tls:
                smtp.starttls()
            if settings.smtp_user:
                smtp.login(settings.smtp_user, settings.smtp_password or "")
            smtp.send_message(msg)
        logger.info(f"Email sent to {to}: {subject}")
        return True
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Failed to send email to {to}: {e}")
        return False


def build_invitation_url(token: str) -> str:
    return f"{settings.app_base_url.rstrip('/')}/register?token={token}"


def render_invitation_email(
    club_name: str,
    inviter_name: str,
    role_name: str,
    invitation_url: str,
    expires_at: datetime,
    personal_message: Optional[str] = None,
) -> dict:
    role = ROLE_TRANSLATIONS.get(role_name, role_name)
    subject = f"Einladung zu {club_name} - ClubFlow"
    message_line = f"\nPersönliche Nachricht: {personal_message}\n" if personal_message else ""
    text = (
        f"Einladung zu {club_name} - ClubFlow\n\n"
        f"Hallo!\n\n"
        f"{inviter_name} hat Sie eingeladen, als {role} dem Verein {club_name} beizutreten.\n"
        f"{message_line}\n"
        f"Registrieren Sie sich unter: {invitation_url}\n\n"
        f"Diese Einladung läuft am {expires_at.strftime('%d.%m.%Y')} ab.\n\n"
        f"Falls Sie diese E-Mail irrtümlich erhalten haben, können Sie sie einfach ignorieren.\n"
    )
    personal_html = f"<blockquote>{personal_message}</blockquote>" if personal_message else ""
    html = (
        f"<h2>Einladung zu {club_name}</h2>"
        f"<p>{inviter_name} hat Sie eingeladen, als <strong>{role}</strong> "
        f"dem Verein {club_name} beizutreten.</p>"
        f"{personal_html}"
        f'<p><a href="{invitation_url}">Einladung annehmen</a></p>'
        f"<p>Diese Einladung läuft am {expires_at.strftime('%d.%m.%Y')} ab.</p>"
    )
    return {"subject": subject, "text": text, "html": html}


def send_invitation_email(
    to: str,
    club_name: str,
    inviter_name: str,
    role_name: str,
    token: str,
    expires_at: datetime,
    personal_message: Optional[str] = None,
) -> bool:
    content = render_invitation_email(
        club_name, inviter_name, role_name, build_invitation_url(token), expires_at, personal_message
    )
    return send_email(to, content["subject"], content["text"], content["html"])


def send_plan_change_notification(
    club_name: str,
    old_plan: str,
    new_plan: str,
    billing_interval: str,
    changed_by: Optional[str] = None,
) -> bool:
    """Notify the platform admin about a club's plan change."""
    if not settings.admin_email:
        logger.debug("admin_email not set, skipping plan change notification")
        return False
    subject = f"Planänderung: {club_name} ({old_plan} -> {new_plan})"
    text = (
        f"Der Verein {club_name} hat den Plan geändert.\n\n"
        f"Alter Plan: {old_plan}\n"
        f"Neuer Plan: {new_plan}\n"
        f"Abrechnung: {billing_interval}\n"
        f"Geändert von: {changed_by or 'unbekannt'}\n"
    )
    return send_email(settings.admin_email, subject, text)

"""
Notification events service.
This module composes the transactional emails sent on moderation and account events.
Every function here is safe to run as a background task: failures are logged, never raised.
"""
from datetime import datetime
import logging

from jinja2 import Template

from app.core.config import settings
from app.modules.notifications.services.mailer import SmtpMailer

# Set up logger
logger = logging.getLogger(__name__)

_LAYOUT = Template("""
<div style="font-family: sans-serif; padding: 20px; border: 1px solid #eaeaea; border-radius: 10px; max-width: 600px; margin: 0 auto;">
    <h2 style="color: {{ accent }};">{{ heading }}</h2>
    {{ body }}
    <br/>
    <p style="color: #6b7280; font-size: 14px;">Thank you,<br/>The {{ site }} team</p>
</div>
""")

def _render(heading: str, body: str, accent: str = "#4f46e5") -> str:
    return _LAYOUT.render(heading=heading, body=body, accent=accent, site=settings.PROJECT_NAME)

def send_suspension_notice(mailer: SmtpMailer, to: str, days: int, until: datetime) -> bool:
    """
    Tell a user their account has been suspended.

    Args:
        mailer: Mailer used for delivery
        to: Recipient email
        days: Length of the suspension in days
        until: When the suspension ends

    Returns:
        True if the message was handed to the SMTP server, False otherwise
    """
    try:
        body = Template("""
            <p>Your account has been suspended for <strong>{{ days }} day(s)</strong> for violating the terms of service.</p>
            <div style="background-color: #f9fafb; padding: 15px; border-radius: 8px; margin: 20px 0;">
                <p style="margin: 0;"><strong>Suspension ends:</strong> {{ until }}</p>
            </div>
            <p>Until then you cannot write posts or comments.</p>
        """).render(days=days, until=until.strftime("%Y-%m-%d"))
        return mailer.send(to, f"[{settings.PROJECT_NAME}] Account suspension notice",
                           _render("Account suspended", body, accent="#ef4444"))
    except Exception as e:
        logger.error(f"Error sending suspension notice to {to}: {e}")
        return False

def send_unsuspension_notice(mailer: SmtpMailer, to: str) -> bool:
    """Tell a user their suspension was lifted early."""
    try:
        body = "<p>Your account suspension has been lifted. You can write posts and comments again.</p>"
        return mailer.send(to, f"[{settings.PROJECT_NAME}] Account suspension lifted",
                           _render("Suspension lifted", body, accent="#10b981"))
    except Exception as e:
        logger.error(f"Error sending unsuspension notice to {to}: {e}")
        return False

def send_find_id_link(mailer: SmtpMailer, to: str, token: str) -> bool:
    try:
        link = f"{settings.FRONTEND_URL}/find-id/result?token={token}"
        body = Template("""
            <p>Follow the link below to see the username registered with this email.</p>
            <p><a href="{{ link }}">{{ link }}</a></p>
        """).render(link=link)
        return mailer.send(to, f"[{settings.PROJECT_NAME}] Find your username", _render("Find your username", body))
    except Exception as e:
        logger.error(f"Error sending find-id link to {to}: {e}")
        return False

def send_password_reset_link(mailer: SmtpMailer, to: str, token: str) -> bool:
    try:
        link = f"{settings.FRONTEND_URL}/update-password?token={token}"
        body = Template("""
            <p>Someone asked to reset the password for this account. If it was you, follow the link below.</p>
            <p><a href="{{ link }}">{{ link }}</a></p>
        """).render(link=link)
        return mailer.send(to, f"[{settings.PROJECT_NAME}] Reset your password", _render("Reset your password", body))
    except Exception as e:
        logger.error(f"Error sending password reset link to {to}: {e}")
        return False

def send_email_change_confirmation(mailer: SmtpMailer, to: str, token: str) -> bool:
    """Sent to the new address; the change applies only after the link is followed."""
    try:
        link = f"{settings.FRONTEND_URL}/confirm-email?token={token}"
        body = Template("""
            <p>Confirm this address as the new email for your account.</p>
            <p><a href="{{ link }}">{{ link }}</a></p>
        """).render(link=link)
        return mailer.send(to, f"[{settings.PROJECT_NAME}] Confirm your new email", _render("Confirm your email", body))
    except Exception as e:
        logger.error(f"Error sending email change confirmation to {to}: {e}")
        return False

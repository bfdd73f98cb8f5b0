"""
SMTP mailer used for transactional email.

Sending is best-effort: when SMTP credentials are missing the message is
skipped with a warning, and delivery errors are logged and swallowed.
"""
import smtplib
import logging
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart

from app.core.config import settings

logger = logging.getLogger(__name__)


class SmtpMailer:
    def __init__(self, host: str = None, port: int = None, user: str = None,
                 password: str = None, sender: str = None, use_tls: bool = None):
        self.host = host or settings.SMTP_HOST
        self.port = port or settings.SMTP_PORT
        self.user = user if user is not None else settings.SMTP_USER
        self.password = password if password is not None else settings.SMTP_PASS
        self.sender = sender or settings.SMTP_FROM or self.user
        self.use_tls = settings.SMTP_USE_TLS if use_tls is None else use_tls

    @property
    def configured(self) -> bool:
        return bool(self.user and self.password)

    def send(self, to: str, subject: str, html: str) -> bool:
        """Send one HTML message. Returns True when the server accepted it."""
        if not self.configured:
            logger.warning("SMTP credentials not configured. Skipping email sending.")
            return False

        msg = MIMEMultipart()
        msg['From'] = self.sender
        msg['To'] = to
        msg['Subject'] = subject
        msg.attach(MIMEText(html, 'html'))

        try:
            with smtplib.SMTP(self.host, self.port) as server:
                if self.use_tls:
                    server.starttls()
                server.login(self.user, self.password)
                server.send_message(msg)
            logger.info(f"Email '{subject}' sent to {to}")
            return True
        except Exception as e:
            logger.error(f"Error sending email '{subject}' to {to}: {e}")
            return False

"""Outbound mail over SMTP."""

import logging
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import formataddr

from tms_backend.core.config import settings
from tms_backend.core.exceptions import MailError

logger = logging.getLogger("tms")


class MailService:
    """Sends plain-text mails through the configured SMTP server."""

    def _build_message(self, to_email: str, subject: str, body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = formataddr((settings.SMTP_FROM_NAME, str(settings.SMTP_FROM_EMAIL)))
        msg["To"] = to_email
        msg["Subject"] = subject
        msg.set_content(body)
        return msg

    def send(self, to_email: str, subject: str, body: str) -> None:
        msg = self._build_message(to_email, subject, body)
        try:
            with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30) as server:
                if settings.SMTP_USE_TLS:
                    server.starttls(context=ssl.create_default_context())
                if settings.SMTP_USER:
                    server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send mail to %s: %s", to_email, e)
            raise MailError(f"Failed to send email: {e}")
        logger.info("Mail '%s' sent to %s", subject, to_email)

    def send_reset_password(self, to_email: str, full_name: str, token: str) -> None:
        link = f"{settings.FRONTEND_URL.rstrip('/')}/reset-password?token={token}"
        body = (
            f"Hello {full_name},\n\n"
            "We received a request to reset your password. Open the link below "
            f"within {settings.RESET_PASSWORD_EXPIRE_MINUTES} minutes to choose a new one:\n\n"
            f"{link}\n\n"
            "If you did not ask for this, you can ignore this email.\n"
        )
        self.send(to_email, f"{settings.APP_NAME}: reset your password", body)


mail_service = MailService()

import asyncio
import logging
import smtplib
from datetime import date, time
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from clinic.config.settings import Settings, settings as default_settings
from clinic.core.errors import EmailDeliveryError

logger = logging.getLogger(__name__)


class SmtpEmailSender:
    """
    Delivers the three transactional emails the services need.

    smtplib is blocking, so every send runs in a worker thread. When no
    SMTP host is configured the message is logged instead of sent.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings

    async def send_verification_email(self, to: str, code: str) -> None:
        await self._send(
            to,
            "Verify your account",
            f"Your verification code is {code}.\n\n"
            "Enter this code in the app to activate your account.",
        )

    async def send_forgot_password_email(self, to: str, code: str) -> None:
        await self._send(
            to,
            "Reset your password",
            f"Your password reset code is {code}.\n\n"
            "If you did not request a password reset you can ignore this email.",
        )

    async def send_appointment_approval_email(
        self, to: str, name: str, appointment_date: date, appointment_time: time
    ) -> None:
        await self._send(
            to,
            "Your appointment has been updated",
            f"Dear {name},\n\n"
            f"Your appointment on {appointment_date.isoformat()} at "
            f"{appointment_time.strftime('%H:%M')} has been updated.\n"
            "Please contact the clinic if you need to make further changes.",
        )

    async def _send(self, to: str, subject: str, body: str) -> None:
        if not self.settings.smtp_host:
            logger.warning(f"SMTP not configured; email to {to} not sent. Subject: {subject}")
            logger.debug(f"Email body for {to}:\n{body}")
            return

        msg = MIMEMultipart()
        msg["From"] = self.settings.mail_from
        msg["To"] = to
        msg["Subject"] = subject
        msg.attach(MIMEText(body, "plain"))

        try:
            await asyncio.to_thread(self._deliver, msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email '{subject}' to {to}: {e}", exc_info=True)
            raise EmailDeliveryError(f"Could not deliver email to {to}: {e}") from e

        logger.info(f"Sent email '{subject}' to {to}")

    def _deliver(self, msg: MIMEMultipart) -> None:
        with smtplib.SMTP(self.settings.smtp_host, self.settings.smtp_port) as server:
            if self.settings.smtp_use_tls:
                server.starttls()
            if self.settings.smtp_username:
                server.login(self.settings.smtp_username, self.settings.smtp_password or "")
            server.send_message(msg)

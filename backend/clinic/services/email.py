import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from clinic.core.auth import get_password_hash
from clinic.core.errors import (
    ClinicError,
    InvalidArgumentError,
    InvalidVerificationCodeError,
    NotFoundError,
    ServiceError,
)
from clinic.core.mailer import SmtpEmailSender
from clinic.core.verification import VerificationCodeStore, get_verification_store
from clinic.db.crud.user import get_user_by_email, update_user
from clinic.db.session import transaction

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


class EmailService:
    """
    Account verification and password reset by emailed six-digit code.

    Codes live in a `VerificationCodeStore` keyed by email: requesting a new
    code replaces the pending one, and a code is removed once it has been
    used successfully. Expected failures (unknown user, wrong code) surface
    as their own error kind; anything else is wrapped in `ServiceError`.
    """

    def __init__(
        self,
        db: AsyncSession,
        email_sender: Optional[SmtpEmailSender] = None,
        code_store: Optional[VerificationCodeStore] = None,
    ):
        self.db = db
        self.email_sender = email_sender or SmtpEmailSender()
        self.codes = code_store or get_verification_store()

    async def send_verification_email(self, email: str) -> bool:
        try:
            user = await get_user_by_email(self.db, email, unverified_only=True)
            if user is None:
                raise NotFoundError(
                    "Failed to send verification email: user not found or already verified"
                )
            await self._issue_and_send(email, self.email_sender.send_verification_email)
            return True
        except ClinicError:
            raise
        except Exception as e:
            logger.error(f"Failed to send verification email to {email}: {e}", exc_info=True)
            raise ServiceError(f"Failed to send verification email: {e}") from e

    async def verify_user(self, email: str, code: str) -> bool:
        if not self.codes.matches(email, code):
            logger.warning(f"Rejected verification code for {email}")
            raise InvalidVerificationCodeError("Failed to verify user: invalid verification code")

        try:
            async with transaction(self.db):
                user = await get_user_by_email(self.db, email)
                if user is None:
                    raise NotFoundError("Failed to verify user: user not found")
                user.is_verified = True
                await update_user(self.db, user)
        except ClinicError:
            raise
        except Exception as e:
            raise ServiceError(f"Failed to verify user: {e}") from e

        self.codes.remove(email)
        logger.info(f"User {email} verified")
        return True

    async def send_forgot_password_email(self, email: str) -> bool:
        try:
            user = await get_user_by_email(self.db, email)
            if user is None:
                raise NotFoundError("Failed to send forgot password email: user not found")
            await self._issue_and_send(email, self.email_sender.send_forgot_password_email)
            return True
        except ClinicError:
            raise
        except Exception as e:
            logger.error(f"Failed to send forgot password email to {email}: {e}", exc_info=True)
            raise ServiceError(f"Failed to send forgot password email: {e}") from e

    async def change_password(self, email: str, code: str, new_password: str) -> bool:
        if not new_password or len(new_password) < MIN_PASSWORD_LENGTH:
            raise InvalidArgumentError(
                f"Failed to change password: new password must be at least "
                f"{MIN_PASSWORD_LENGTH} characters"
            )
        if not self.codes.matches(email, code):
            logger.warning(f"Rejected password reset code for {email}")
            raise InvalidVerificationCodeError(
                "Failed to change password: invalid verification code"
            )

        try:
            async with transaction(self.db):
                user = await get_user_by_email(self.db, email)
                if user is None:
                    raise NotFoundError("Failed to change password: user not found")
                user.password_hash = get_password_hash(new_password)
                await update_user(self.db, user)
        except ClinicError:
            raise
        except Exception as e:
            raise ServiceError(f"Failed to change password: {e}") from e

        self.codes.remove(email)
        logger.info(f"Password changed for {email}")
        return True

    async def _issue_and_send(self, email: str, send) -> None:
        code = self.codes.issue(email)
        try:
            await send(email, code)
        except Exception:
            # an undelivered code is useless, do not leave it pending
            self.codes.remove(email)
            raise
        logger.info(f"Issued code for {email}")

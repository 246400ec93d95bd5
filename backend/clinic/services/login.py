import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from clinic.core.auth import get_password_hash, verify_password
from clinic.core.errors import InvalidArgumentError
from clinic.db.crud.user import get_user_by_login, update_user
from clinic.db.session import transaction
from clinic.mappers import to_user_read
from clinic.schemas.user import ChangePasswordRequest, ChangePasswordResult, UserRead

logger = logging.getLogger(__name__)


class LoginService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def validate_user(self, username: str, password: str) -> Optional[UserRead]:
        """Return the account for `username` (or email) when `password` matches, else None."""
        user = await get_user_by_login(self.db, username)
        if user is None or not verify_password(password, user.password_hash):
            logger.info(f"Login rejected for '{username}'")
            return None
        return to_user_read(user)

    async def change_password(self, dto: Optional[ChangePasswordRequest]) -> ChangePasswordResult:
        if dto is None:
            raise InvalidArgumentError("dto is null")

        user = await get_user_by_login(self.db, dto.username)
        if user is None:
            return ChangePasswordResult(success=False, message="User not found")
        if not verify_password(dto.current_password, user.password_hash):
            return ChangePasswordResult(success=False, message="Current password is incorrect")
        if verify_password(dto.new_password, user.password_hash):
            return ChangePasswordResult(
                success=False, message="New password must be different from the current password"
            )

        async with transaction(self.db):
            user.password_hash = get_password_hash(dto.new_password)
            await update_user(self.db, user)

        logger.info(f"Password changed for user {user.id}")
        return ChangePasswordResult(
            success=True, message="Password changed successfully", user=to_user_read(user)
        )

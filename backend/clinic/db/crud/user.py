# clinic/db/crud/user.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from sqlalchemy.orm import selectinload
from typing import Optional

from clinic.db.models.user import UserModel


def _with_profiles(query):
    return query.options(
        selectinload(UserModel.patient_profile),
        selectinload(UserModel.doctor_profile),
    )


async def get_user_by_email(
    db: AsyncSession, email: str, unverified_only: bool = False
) -> Optional[UserModel]:
    """
    Get a user by email with their profiles loaded.

    Args:
        db: Database session
        email: User's email address
        unverified_only: Only match accounts that have not been verified yet

    Returns:
        UserModel or None if not found
    """
    query = _with_profiles(select(UserModel)).where(UserModel.email == email)
    if unverified_only:
        query = query.where(UserModel.is_verified.is_(False))

    result = await db.execute(query)
    return result.scalar_one_or_none()


async def get_user_by_login(db: AsyncSession, login: str) -> Optional[UserModel]:
    """Get a user whose username or email equals `login`."""
    query = _with_profiles(select(UserModel)).where(
        or_(UserModel.username == login, UserModel.email == login)
    )
    result = await db.execute(query)
    return result.scalars().first()


async def update_user(db: AsyncSession, user: UserModel) -> UserModel:
    """Flush pending changes on `user`. The caller commits."""
    db.add(user)
    await db.flush()
    return user

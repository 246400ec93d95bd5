import logging
from typing import Optional, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from clinic.db.models import DoctorModel, DoctorScheduleModel

logger = logging.getLogger(__name__)


async def get_doctor(db: AsyncSession, doctor_id: int) -> Optional[DoctorModel]:
    """Fetch a doctor profile by its id."""
    result = await db.execute(select(DoctorModel).where(DoctorModel.id == doctor_id))
    return result.scalar_one_or_none()


async def list_all_doctors(db: AsyncSession) -> List[DoctorModel]:
    """Fetches every doctor profile with its user row, ordered by id."""
    result = await db.execute(
        select(DoctorModel)
        .options(selectinload(DoctorModel.user))
        .order_by(DoctorModel.id)
    )
    doctors = list(result.scalars().all())
    logger.debug(f"CRUD: Loaded {len(doctors)} doctors")
    return doctors


async def get_schedules_for_day(
    db: AsyncSession, doctor_id: int, work_day: str
) -> List[DoctorScheduleModel]:
    """
    Availability windows a doctor declared for one weekday.

    Args:
        db: Database session
        doctor_id: ID of the doctor
        work_day: Weekday name, e.g. 'Monday'

    Returns:
        List of DoctorScheduleModel rows ordered by start time
    """
    result = await db.execute(
        select(DoctorScheduleModel)
        .where(
            DoctorScheduleModel.doctor_id == doctor_id,
            DoctorScheduleModel.work_day == work_day,
        )
        .order_by(DoctorScheduleModel.start_time)
    )
    return list(result.scalars().all())

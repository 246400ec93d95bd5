import logging
from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clinic.db.models import PatientModel

logger = logging.getLogger(__name__)


async def get_patient(db: AsyncSession, patient_id: int) -> Optional[PatientModel]:
    """
    Fetch a patient profile by its id.

    Args:
        db (AsyncSession): the database session
        patient_id (int): the patient id (not the user id)

    Returns:
        Optional[PatientModel]: the patient, or None when absent
    """
    result = await db.execute(select(PatientModel).where(PatientModel.id == patient_id))
    patient = result.scalar_one_or_none()
    if patient is None:
        logger.debug(f"CRUD: patient_id {patient_id} not found")
    return patient

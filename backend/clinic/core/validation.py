"""
Existence and availability checks run before any write.

The `check_*` helpers raise on failure so a service can call them in a row
and stop at the first problem. `is_doctor_available` is the non-raising form
used when a negative answer is expected (scanning candidate doctors).
"""
import logging
from datetime import date, time
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from clinic.core.errors import ConflictError, DoctorUnavailableError, NotFoundError
from clinic.db.crud.appointment import find_active_appointment_at, get_appointment
from clinic.db.crud.doctor import get_doctor, get_schedules_for_day
from clinic.db.crud.patient import get_patient
from clinic.db.crud.test_result import get_test_result_for_appointment
from clinic.db.crud.test_type import get_test_type
from clinic.db.models.doctor_schedule import WEEKDAYS

logger = logging.getLogger(__name__)


async def check_patient_exists(db: AsyncSession, patient_id: int) -> None:
    if await get_patient(db, patient_id) is None:
        raise NotFoundError(f"Patient with ID {patient_id} not found")


async def check_doctor_exists(db: AsyncSession, doctor_id: int) -> None:
    if await get_doctor(db, doctor_id) is None:
        raise NotFoundError(f"Doctor with ID {doctor_id} not found")


async def check_test_type_exists(db: AsyncSession, test_type_id: int) -> None:
    if await get_test_type(db, test_type_id) is None:
        raise NotFoundError(f"Test type with ID {test_type_id} not found")


async def check_duplicate_appointment(
    db: AsyncSession,
    appointment_id: int,
    exclude_test_result_id: Optional[int] = None,
) -> None:
    """
    Make sure `appointment_id` exists and no other test result is bound to it.

    Args:
        db: Database session
        appointment_id: Appointment the test result wants to reference
        exclude_test_result_id: The test result being updated, allowed to keep its own link
    """
    if await get_appointment(db, appointment_id, with_relations=False) is None:
        raise NotFoundError(f"Appointment with ID {appointment_id} not found")

    bound = await get_test_result_for_appointment(db, appointment_id)
    if bound is not None and bound.id != exclude_test_result_id:
        raise ConflictError(
            f"Appointment with ID {appointment_id} already has a test result (ID {bound.id})"
        )


async def _unavailability_reason(
    db: AsyncSession,
    doctor_id: int,
    appointment_date: date,
    appointment_time: time,
    exclude_appointment_id: Optional[int],
) -> Optional[str]:
    day_name = WEEKDAYS[appointment_date.weekday()]
    windows = await get_schedules_for_day(db, doctor_id, day_name)
    if not any(w.covers(day_name, appointment_time) for w in windows):
        return (
            f"Doctor with ID {doctor_id} has no schedule covering "
            f"{day_name} {appointment_date} at {appointment_time.strftime('%H:%M')}"
        )

    booked = await find_active_appointment_at(
        db, doctor_id, appointment_date, appointment_time, exclude_appointment_id
    )
    if booked is not None:
        return (
            f"Doctor with ID {doctor_id} already has an appointment on "
            f"{appointment_date} at {appointment_time.strftime('%H:%M')}"
        )
    return None


async def is_doctor_available(
    db: AsyncSession,
    doctor_id: int,
    appointment_date: date,
    appointment_time: time,
    exclude_appointment_id: Optional[int] = None,
) -> bool:
    """True when a schedule window covers the slot and nobody holds it yet."""
    reason = await _unavailability_reason(
        db, doctor_id, appointment_date, appointment_time, exclude_appointment_id
    )
    return reason is None


async def check_doctor_available(
    db: AsyncSession,
    doctor_id: int,
    appointment_date: date,
    appointment_time: time,
    exclude_appointment_id: Optional[int] = None,
) -> None:
    reason = await _unavailability_reason(
        db, doctor_id, appointment_date, appointment_time, exclude_appointment_id
    )
    if reason is not None:
        logger.warning(f"Availability check failed: {reason}")
        raise DoctorUnavailableError(reason)

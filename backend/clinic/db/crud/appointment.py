import logging
from datetime import date, time
from typing import List, Optional, Dict, Any

from sqlalchemy import select, func, and_
from sqlalchemy.orm import selectinload
from sqlalchemy.ext.asyncio import AsyncSession

from clinic.db.models import AppointmentModel, PatientModel, DoctorModel

logger = logging.getLogger(__name__)

# patient.user and doctor.user are always needed to build the response
APPOINTMENT_RELATIONS = (
    selectinload(AppointmentModel.patient).selectinload(PatientModel.user),
    selectinload(AppointmentModel.doctor).selectinload(DoctorModel.user),
)


async def create_appointment(
    db: AsyncSession,
    patient_id: int,
    doctor_id: int,
    appointment_date: date,
    appointment_time: time,
    appointment_type: str = "Appointment",
    status: str = "Scheduled",
    is_anonymous: bool = False,
    note: Optional[str] = None,
) -> AppointmentModel:
    """
    Insert a new appointment row.

    The row is flushed so it receives its ID, but nothing is committed; the
    caller owns the transaction. Existence and availability checks happen in
    the service layer before this is called.

    Args:
        db (AsyncSession): The database session.
        patient_id (int): The patient the appointment is for.
        doctor_id (int): The doctor who will see the patient.
        appointment_date (date): Day of the appointment.
        appointment_time (time): Start time of the appointment.
        appointment_type (str): 'Appointment' or 'Medication'.
        status (str): Initial status, 'Scheduled' for new bookings.
        is_anonymous (bool): Hide the patient's identity from the doctor.
        note (Optional[str]): Free-text note from the patient.

    Returns:
        AppointmentModel: the pending row with its ID populated.
    """
    logger.info(
        f"CRUD: Creating appointment for patient_id={patient_id} with doctor_id={doctor_id} "
        f"on {appointment_date} at {appointment_time}"
    )
    new_appointment = AppointmentModel(
        patient_id=patient_id,
        doctor_id=doctor_id,
        appointment_date=appointment_date,
        appointment_time=appointment_time,
        appointment_type=appointment_type,
        status=status,
        is_anonymous=is_anonymous,
        note=note,
    )
    db.add(new_appointment)
    await db.flush()
    await db.refresh(new_appointment)
    return new_appointment


async def get_appointment(
    db: AsyncSession, appointment_id: int, with_relations: bool = True
) -> Optional[AppointmentModel]:
    """
    Get a specific appointment by ID.

    With `with_relations` the patient/doctor users are loaded and any copy
    already held by the session is refreshed from the database.
    """
    query = select(AppointmentModel).where(AppointmentModel.id == appointment_id)
    if with_relations:
        query = query.options(*APPOINTMENT_RELATIONS).execution_options(
            populate_existing=True
        )
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def list_appointments(
    db: AsyncSession,
    patient_id: Optional[int] = None,
    doctor_id: Optional[int] = None,
    status: Optional[str] = None,
) -> List[AppointmentModel]:
    """
    Get appointments matching the given filters, with relations loaded.

    Args:
        db: Database session
        patient_id: Only appointments of this patient (optional)
        doctor_id: Only appointments with this doctor (optional)
        status: Only appointments in this status (optional)

    Returns:
        List of AppointmentModel ordered by date and time
    """
    query = select(AppointmentModel).options(*APPOINTMENT_RELATIONS)
    if patient_id is not None:
        query = query.where(AppointmentModel.patient_id == patient_id)
    if doctor_id is not None:
        query = query.where(AppointmentModel.doctor_id == doctor_id)
    if status is not None:
        query = query.where(AppointmentModel.status == status)

    query = query.order_by(
        AppointmentModel.appointment_date, AppointmentModel.appointment_time
    )
    result = await db.execute(query)
    appointments = list(result.scalars().all())
    logger.debug(
        f"CRUD list_appointments: patient_id={patient_id}, doctor_id={doctor_id}, "
        f"status={status} -> {len(appointments)} rows"
    )
    return appointments


async def list_appointment_slots(db: AsyncSession, status: Optional[str] = None):
    """(id, appointment_date, appointment_time) rows only, no relations."""
    query = select(
        AppointmentModel.id,
        AppointmentModel.appointment_date,
        AppointmentModel.appointment_time,
    )
    if status is not None:
        query = query.where(AppointmentModel.status == status)
    result = await db.execute(query)
    return list(result.all())


async def get_appointments_by_ids(
    db: AsyncSession, appointment_ids: List[int]
) -> List[AppointmentModel]:
    """Load appointments with relations, returned in the order of `appointment_ids`."""
    if not appointment_ids:
        return []
    result = await db.execute(
        select(AppointmentModel)
        .options(*APPOINTMENT_RELATIONS)
        .where(AppointmentModel.id.in_(appointment_ids))
    )
    by_id = {a.id: a for a in result.scalars().all()}
    return [by_id[i] for i in appointment_ids if i in by_id]


async def find_active_appointment_at(
    db: AsyncSession,
    doctor_id: int,
    appointment_date: date,
    appointment_time: time,
    exclude_appointment_id: Optional[int] = None,
) -> Optional[AppointmentModel]:
    """
    Return a non-cancelled appointment holding the doctor's exact slot, if any.

    `exclude_appointment_id` skips the appointment that is being moved so it
    does not conflict with itself.
    """
    conditions = [
        AppointmentModel.doctor_id == doctor_id,
        AppointmentModel.appointment_date == appointment_date,
        AppointmentModel.appointment_time == appointment_time,
        AppointmentModel.status != "Cancelled",
    ]
    if exclude_appointment_id is not None:
        conditions.append(AppointmentModel.id != exclude_appointment_id)

    result = await db.execute(select(AppointmentModel).where(and_(*conditions)))
    return result.scalars().first()


async def count_appointments(db: AsyncSession, status: Optional[str] = None) -> int:
    """Total number of appointments, optionally only those in `status`."""
    query = select(func.count(AppointmentModel.id))
    if status is not None:
        query = query.where(AppointmentModel.status == status)
    result = await db.execute(query)
    return result.scalar_one()


async def update_appointment(
    db: AsyncSession, appointment: AppointmentModel, update_data: Dict[str, Any]
) -> AppointmentModel:
    """
    Apply `update_data` onto a loaded appointment and flush.

    Args:
        db: Database session
        appointment: The row to change
        update_data: Column name -> new value, only the fields being changed

    Returns:
        The same AppointmentModel instance
    """
    for key, value in update_data.items():
        setattr(appointment, key, value)

    await db.flush()
    logger.info(
        f"CRUD: Updated appointment_id={appointment.id} fields={sorted(update_data)}"
    )
    return appointment

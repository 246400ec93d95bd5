import logging
import math
from datetime import date, datetime, time
from typing import Callable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from clinic.config.settings import Settings, settings as default_settings
from clinic.core.errors import ConflictError, InvalidArgumentError, NotFoundError
from clinic.core.mailer import SmtpEmailSender
from clinic.core.validation import (
    check_doctor_available,
    check_doctor_exists,
    check_patient_exists,
    is_doctor_available,
)
from clinic.db.crud import appointment as appointment_crud
from clinic.db.crud.doctor import list_all_doctors
from clinic.db.models import APPOINTMENT_STATUSES, APPOINTMENT_TYPES
from clinic.db.session import transaction
from clinic.mappers import to_appointment_read, to_available_doctor, update_values
from clinic.schemas.appointment import (
    AppointmentCreate,
    AppointmentRead,
    AppointmentUpdate,
    AvailableDoctorsResult,
)
from clinic.schemas.shared import PagedResponse

logger = logging.getLogger(__name__)

SLOT_TAKEN_MESSAGE = "This time slot is already booked with an active appointment."


class AppointmentService:
    """
    Booking, rescheduling and listing of appointments.

    Every write follows the same shape: validate references and the doctor's
    availability, write inside `transaction()`, then re-read the row with
    patient and doctor users attached and map it to `AppointmentRead`.
    """

    def __init__(
        self,
        db: AsyncSession,
        email_sender: Optional[SmtpEmailSender] = None,
        clock: Callable[[], datetime] = datetime.now,
        settings: Optional[Settings] = None,
    ):
        self.db = db
        self.email_sender = email_sender or SmtpEmailSender()
        self.clock = clock
        self.settings = settings or default_settings

    async def create_appointment(self, dto: Optional[AppointmentCreate]) -> AppointmentRead:
        if dto is None:
            raise InvalidArgumentError("dto is null")

        await check_doctor_exists(self.db, dto.doctor_id)
        await check_patient_exists(self.db, dto.patient_id)
        await check_doctor_available(
            self.db, dto.doctor_id, dto.appointment_date, dto.appointment_time
        )

        try:
            async with transaction(self.db):
                created = await appointment_crud.create_appointment(
                    self.db,
                    patient_id=dto.patient_id,
                    doctor_id=dto.doctor_id,
                    appointment_date=dto.appointment_date,
                    appointment_time=dto.appointment_time,
                    appointment_type=dto.appointment_type.value,
                    status="Scheduled",
                    is_anonymous=dto.is_anonymous,
                    note=dto.note,
                )
        except IntegrityError as e:
            # another booking took the slot between the check and the insert
            raise ConflictError(SLOT_TAKEN_MESSAGE) from e

        logger.info(
            f"Appointment {created.id} scheduled for patient {dto.patient_id} "
            f"with doctor {dto.doctor_id} on {dto.appointment_date} {dto.appointment_time}"
        )
        detailed = await appointment_crud.get_appointment(self.db, created.id)
        return to_appointment_read(detailed)

    async def update_appointment(self, dto: Optional[AppointmentUpdate]) -> AppointmentRead:
        if dto is None:
            raise InvalidArgumentError("dto is null")
        if dto.appointment_type is not None and dto.appointment_type not in APPOINTMENT_TYPES:
            raise InvalidArgumentError(
                "Appointment type must be either 'Appointment' or 'Medication'"
            )
        if dto.status is not None and dto.status not in APPOINTMENT_STATUSES:
            raise InvalidArgumentError(
                "Status must be one of: Scheduled, Confirmed, Completed, Cancelled"
            )

        try:
            async with transaction(self.db):
                appointment = await appointment_crud.get_appointment(self.db, dto.appointment_id)
                if appointment is None:
                    raise NotFoundError(f"Appointment with ID {dto.appointment_id} not found")

                final_date = (
                    dto.appointment_date
                    if dto.appointment_date is not None
                    else appointment.appointment_date
                )
                final_time = (
                    dto.appointment_time
                    if dto.appointment_time is not None
                    else appointment.appointment_time
                )
                final_doctor_id = (
                    dto.doctor_id if dto.doctor_id is not None else appointment.doctor_id
                )

                doctor_changed = final_doctor_id != appointment.doctor_id
                slot_changed = (
                    final_date != appointment.appointment_date
                    or final_time != appointment.appointment_time
                )
                if doctor_changed:
                    await check_doctor_exists(self.db, final_doctor_id)
                if doctor_changed or slot_changed:
                    await check_doctor_available(
                        self.db,
                        final_doctor_id,
                        final_date,
                        final_time,
                        exclude_appointment_id=appointment.id,
                    )

                await appointment_crud.update_appointment(
                    self.db, appointment, update_values(dto, exclude={"appointment_id"})
                )

                patient_user = appointment.patient.user
                await self.email_sender.send_appointment_approval_email(
                    patient_user.email, patient_user.full_name, final_date, final_time
                )
        except IntegrityError as e:
            raise ConflictError(SLOT_TAKEN_MESSAGE) from e

        updated = await appointment_crud.get_appointment(self.db, dto.appointment_id)
        return to_appointment_read(updated)

    async def get_appointments_by_patient(self, patient_id: int) -> List[AppointmentRead]:
        appointments = await appointment_crud.list_appointments(self.db, patient_id=patient_id)
        return [to_appointment_read(a) for a in appointments]

    async def get_appointments_by_doctor(self, doctor_id: int) -> List[AppointmentRead]:
        appointments = await appointment_crud.list_appointments(self.db, doctor_id=doctor_id)
        return [to_appointment_read(a) for a in appointments]

    async def get_available_doctors(
        self, appointment_date: date, appointment_time: time
    ) -> AvailableDoctorsResult:
        """Doctors with a schedule window covering the slot and no booking in it."""
        available = []
        for doctor in await list_all_doctors(self.db):
            if await is_doctor_available(self.db, doctor.id, appointment_date, appointment_time):
                available.append(to_available_doctor(doctor))

        logger.debug(
            f"{len(available)} doctors available on {appointment_date} at {appointment_time}"
        )
        return AvailableDoctorsResult(
            appointment_date=appointment_date,
            appointment_time=appointment_time,
            available_doctors=available,
        )

    async def get_appointment_by_id(self, appointment_id: int) -> AppointmentRead:
        appointment = await appointment_crud.get_appointment(self.db, appointment_id)
        if appointment is None:
            raise NotFoundError(f"Appointment with ID {appointment_id} not found")
        return to_appointment_read(appointment)

    async def get_scheduled_appointments(
        self, page: int = 1, page_size: Optional[int] = None
    ) -> PagedResponse[AppointmentRead]:
        """
        One page of 'Scheduled' appointments, closest to the current time first.

        Distance is absolute, so an overdue appointment from an hour ago ranks
        ahead of one due tomorrow. `page` below 1 becomes 1, a `page_size`
        below 1 becomes the default (10) and anything above the maximum (100)
        is clamped.

        Every request reads the (id, date, time) of all Scheduled rows to rank
        them, so the cost grows with the number of open appointments.
        """
        if page is None or page < 1:
            page = 1
        if page_size is None or page_size < 1:
            page_size = self.settings.default_page_size
        if page_size > self.settings.max_page_size:
            page_size = self.settings.max_page_size

        total_records = await appointment_crud.count_appointments(self.db, status="Scheduled")
        total_pages = math.ceil(total_records / page_size)

        # ranking needs every slot, but only the page itself is loaded with relations
        now = self.clock()
        slots = await appointment_crud.list_appointment_slots(self.db, status="Scheduled")
        slots.sort(
            key=lambda s: abs(
                (datetime.combine(s.appointment_date, s.appointment_time) - now).total_seconds()
            )
        )
        start = (page - 1) * page_size
        page_ids = [s.id for s in slots[start:start + page_size]]
        page_items = await appointment_crud.get_appointments_by_ids(self.db, page_ids)

        return PagedResponse[AppointmentRead](
            data=[to_appointment_read(a) for a in page_items],
            current_page=page,
            page_size=page_size,
            total_pages=total_pages,
            total_records=total_records,
            has_next_page=page < total_pages,
            has_previous_page=page > 1,
        )

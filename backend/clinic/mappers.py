# clinic/mappers.py
"""Entity -> transfer object conversions, one function per pair."""
from typing import Any, Dict, Iterable

from pydantic import BaseModel

from clinic.db.models import AppointmentModel, DoctorModel, TestResultModel, UserModel
from clinic.schemas.appointment import AppointmentRead, AvailableDoctor
from clinic.schemas.test_result import TestResultRead
from clinic.schemas.user import UserRead


def _full_name(profile) -> str | None:
    if profile is None or profile.user is None:
        return None
    return profile.user.full_name


def to_appointment_read(appointment: AppointmentModel) -> AppointmentRead:
    patient_user = appointment.patient.user if appointment.patient else None
    return AppointmentRead(
        appointment_id=appointment.id,
        patient_id=appointment.patient_id,
        patient_name=_full_name(appointment.patient),
        patient_email=patient_user.email if patient_user else None,
        doctor_id=appointment.doctor_id,
        doctor_name=_full_name(appointment.doctor),
        appointment_date=appointment.appointment_date,
        appointment_time=appointment.appointment_time,
        status=appointment.status,
        appointment_type=appointment.appointment_type,
        is_anonymous=appointment.is_anonymous,
        note=appointment.note,
    )


def to_test_result_read(test_result: TestResultModel) -> TestResultRead:
    test_type = test_result.test_type
    appointment = test_result.appointment
    return TestResultRead(
        test_result_id=test_result.id,
        patient_id=test_result.patient_id,
        patient_name=_full_name(test_result.patient),
        doctor_id=test_result.doctor_id,
        doctor_name=_full_name(test_result.doctor),
        test_type_id=test_result.test_type_id,
        test_type_name=test_type.test_type_name if test_type else None,
        unit=test_type.unit if test_type else None,
        normal_range=test_type.normal_range if test_type else None,
        appointment_id=test_result.appointment_id,
        appointment_date=appointment.appointment_date if appointment else None,
        appointment_time=appointment.appointment_time if appointment else None,
        appointment_type=appointment.appointment_type if appointment else None,
        result_value=test_result.result_value,
        notes=test_result.notes,
        test_date=test_result.test_date,
    )


def to_user_read(user: UserModel) -> UserRead:
    return UserRead(
        user_id=user.id,
        username=user.username,
        email=user.email,
        full_name=user.full_name,
        role=user.role,
        is_verified=user.is_verified,
        patient_id=user.patient_profile.id if user.patient_profile else None,
        doctor_id=user.doctor_profile.id if user.doctor_profile else None,
        created_at=user.created_at,
    )


def to_available_doctor(doctor: DoctorModel) -> AvailableDoctor:
    return AvailableDoctor(doctor_id=doctor.id, doctor_name=_full_name(doctor))


def update_values(dto: BaseModel, exclude: Iterable[str] = ()) -> Dict[str, Any]:
    """
    Column values to merge from a partial-update DTO.

    Only fields the caller explicitly set to a value are returned (None means
    "keep the current value"). `exclude` drops the identifier fields that
    select the row rather than change it.
    """
    return dto.model_dump(exclude_unset=True, exclude_none=True, exclude=set(exclude))

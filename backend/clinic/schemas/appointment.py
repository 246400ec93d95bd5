# clinic/schemas/appointment.py
from __future__ import annotations

from datetime import date, time
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from clinic.schemas.shared import AppointmentStatus, AppointmentType


class AppointmentCreate(BaseModel):
    model_config = ConfigDict(extra='forbid')

    doctor_id: int = Field(..., gt=0)
    patient_id: int = Field(..., gt=0)
    appointment_date: date
    appointment_time: time
    appointment_type: AppointmentType = AppointmentType.appointment
    is_anonymous: bool = False
    note: Optional[str] = Field(None, max_length=500)


class AppointmentUpdate(BaseModel):
    """
    Partial update. Only fields that were explicitly set are applied.

    `status` and `appointment_type` stay plain strings here; the service
    checks them against the allowed values and reports an argument error.
    """
    model_config = ConfigDict(extra='forbid')

    appointment_id: int = Field(..., gt=0)
    doctor_id: Optional[int] = Field(None, gt=0)
    appointment_date: Optional[date] = None
    appointment_time: Optional[time] = None
    status: Optional[str] = None
    appointment_type: Optional[str] = None
    is_anonymous: Optional[bool] = None
    note: Optional[str] = Field(None, max_length=500)


class AppointmentRead(BaseModel):
    appointment_id: int
    patient_id: int
    patient_name: Optional[str] = None
    patient_email: Optional[str] = None
    doctor_id: int
    doctor_name: Optional[str] = None
    appointment_date: date
    appointment_time: time
    status: AppointmentStatus
    appointment_type: AppointmentType
    is_anonymous: bool = False
    note: Optional[str] = None


class AvailableDoctor(BaseModel):
    doctor_id: int
    doctor_name: Optional[str] = None


class AvailableDoctorsResult(BaseModel):
    appointment_date: date
    appointment_time: time
    available_doctors: List[AvailableDoctor]

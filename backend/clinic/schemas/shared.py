# clinic/schemas/shared.py
from enum import Enum
from typing import Generic, List, TypeVar
from pydantic import BaseModel

T = TypeVar("T")


class Role(str, Enum):
    doctor = "doctor"
    patient = "patient"
    admin = "admin"


class AppointmentStatus(str, Enum):
    scheduled = "Scheduled"
    confirmed = "Confirmed"
    completed = "Completed"
    cancelled = "Cancelled"


class AppointmentType(str, Enum):
    appointment = "Appointment"
    medication = "Medication"


class PagedResponse(BaseModel, Generic[T]):
    data: List[T]
    current_page: int
    page_size: int
    total_pages: int
    total_records: int
    has_next_page: bool
    has_previous_page: bool

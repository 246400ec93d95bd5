from clinic.db.models.user import UserModel
from clinic.db.models.patient import PatientModel
from clinic.db.models.doctor import DoctorModel
from clinic.db.models.doctor_schedule import DoctorScheduleModel
from clinic.db.models.appointment import (
    AppointmentModel,
    APPOINTMENT_STATUSES,
    APPOINTMENT_TYPES,
)
from clinic.db.models.test_type import TestTypeModel
from clinic.db.models.test_result import TestResultModel

__all__ = [
    "UserModel",
    "PatientModel",
    "DoctorModel",
    "DoctorScheduleModel",
    "AppointmentModel",
    "APPOINTMENT_STATUSES",
    "APPOINTMENT_TYPES",
    "TestTypeModel",
    "TestResultModel",
]

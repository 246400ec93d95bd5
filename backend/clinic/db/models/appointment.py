# clinic/db/models/appointment.py
from sqlalchemy import (
    Boolean,
    Column,
    Integer,
    Date,
    DateTime,
    Time,
    String,
    Text,
    ForeignKey,
    Index,
    text,
)
from sqlalchemy.orm import relationship
from clinic.db.base import Base
from sqlalchemy.sql import func

APPOINTMENT_STATUSES = ("Scheduled", "Confirmed", "Completed", "Cancelled")
APPOINTMENT_TYPES = ("Appointment", "Medication")

_ACTIVE_SLOT = text("status <> 'Cancelled'")


class AppointmentModel(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False, index=True)
    appointment_date = Column(Date, nullable=False)
    appointment_time = Column(Time, nullable=False)
    status = Column(String(20), default="Scheduled", nullable=False)
    appointment_type = Column(String(20), default="Appointment", nullable=False)
    is_anonymous = Column(Boolean, default=False, nullable=False)
    note = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # One active booking per doctor and slot; cancelled rows free the slot
    __table_args__ = (
        Index(
            "uq_appointment_active_slot",
            "doctor_id",
            "appointment_date",
            "appointment_time",
            unique=True,
            postgresql_where=_ACTIVE_SLOT,
            sqlite_where=_ACTIVE_SLOT,
        ),
    )

    # Relationships
    patient = relationship("PatientModel", back_populates="appointments")
    doctor = relationship("DoctorModel", back_populates="appointments")
    test_result = relationship("TestResultModel", back_populates="appointment", uselist=False)

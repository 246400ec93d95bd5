# clinic/db/models/test_result.py
from sqlalchemy import Column, Integer, String, Text, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from clinic.db.base import Base


class TestResultModel(Base):
    __tablename__ = "test_results"
    __test__ = False  # keep pytest from collecting this model

    id = Column(Integer, primary_key=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False)
    test_type_id = Column(Integer, ForeignKey("test_types.id"), nullable=False)
    # an appointment produces at most one result
    appointment_id = Column(Integer, ForeignKey("appointments.id"), nullable=True, unique=True)
    result_value = Column(String(100), nullable=False)
    notes = Column(Text)
    test_date = Column(DateTime(timezone=True), server_default=func.now())

    patient = relationship("PatientModel", back_populates="test_results")
    doctor = relationship("DoctorModel")
    test_type = relationship("TestTypeModel", back_populates="test_results")
    appointment = relationship("AppointmentModel", back_populates="test_result")

# clinic/db/models/patient.py
from sqlalchemy import Column, Integer, String, Date, ForeignKey
from sqlalchemy.orm import relationship
from clinic.db.base import Base

class PatientModel(Base):
    __tablename__ = "patients"

    id         = Column(Integer, primary_key=True)
    user_id    = Column(Integer,
                        ForeignKey("users.id", ondelete="CASCADE"),
                        unique=True,
                        nullable=False)

    date_of_birth = Column(Date)
    gender        = Column(String(10))
    phone         = Column(String(30))

    user = relationship("UserModel", back_populates="patient_profile")
    appointments = relationship("AppointmentModel", back_populates="patient")
    test_results = relationship("TestResultModel", back_populates="patient")

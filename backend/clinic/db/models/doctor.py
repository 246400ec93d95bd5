# clinic/db/models/doctor.py
from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship
from clinic.db.base import Base

class DoctorModel(Base):
    __tablename__ = "doctors"

    id         = Column(Integer, primary_key=True)
    user_id    = Column(Integer,
                        ForeignKey("users.id", ondelete="CASCADE"),
                        unique=True,
                        nullable=False)

    specialty           = Column(String(100))
    years_of_experience = Column(Integer)

    user = relationship("UserModel", back_populates="doctor_profile")
    schedules = relationship(
        "DoctorScheduleModel", back_populates="doctor", cascade="all, delete-orphan"
    )
    appointments = relationship("AppointmentModel", back_populates="doctor")

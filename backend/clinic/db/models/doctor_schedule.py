# clinic/db/models/doctor_schedule.py
from sqlalchemy import Column, Integer, String, Time, ForeignKey
from sqlalchemy.orm import relationship
from clinic.db.base import Base

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


class DoctorScheduleModel(Base):
    __tablename__ = "doctor_schedules"

    id = Column(Integer, primary_key=True)
    doctor_id = Column(
        Integer, ForeignKey("doctors.id", ondelete="CASCADE"), nullable=False, index=True
    )
    work_day = Column(String(10), nullable=False)  # 'Monday' .. 'Sunday'
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    doctor = relationship("DoctorModel", back_populates="schedules")

    def covers(self, day_name: str, at) -> bool:
        """True when this window is on `day_name` and `at` falls inside [start, end)."""
        return self.work_day == day_name and self.start_time <= at < self.end_time

    def __repr__(self):
        return (
            f"<DoctorScheduleModel(doctor_id={self.doctor_id}, {self.work_day} "
            f"{self.start_time}-{self.end_time})>"
        )

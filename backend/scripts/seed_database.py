# backend/scripts/seed_database.py
import asyncio
import logging
import random
from datetime import date, time, timedelta
from typing import List

from sqlalchemy import text, select

# Add project root to sys.path to allow importing from clinic
import sys
from pathlib import Path

backend_dir = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(backend_dir))

from clinic.core.auth import get_password_hash
from clinic.core.errors import ClinicError
from clinic.config.settings import settings as app_settings
from clinic.db.base import get_engine, get_session_factory
from clinic.db.session import service_db_session, set_global_session_factory
from clinic.db.models import (
    UserModel,
    DoctorModel,
    DoctorScheduleModel,
    PatientModel,
    TestTypeModel,
)
from clinic.db.models.doctor_schedule import WEEKDAYS
from clinic.schemas.appointment import AppointmentCreate
from clinic.services.appointment import AppointmentService

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("seed_database")

# --- Configuration for Seed Data ---
NUM_DOCTORS = 8
NUM_PATIENTS = 40
NUM_APPOINTMENTS_PER_PATIENT = 2
COMMON_PASSWORD = "TestPassword123!"
COMMON_PASSWORD_HASH = get_password_hash(COMMON_PASSWORD)

DOCTOR_NAMES = [
    "Nguyen Van An", "Tran Thi Binh", "Le Minh Chau", "Pham Quoc Dung",
    "Hoang Thu Ha", "Vu Duc Khanh", "Dang Thi Lan", "Bui Thanh Long",
]
PATIENT_FIRST_NAMES = ["Anh", "Bao", "Cuong", "Dao", "Giang", "Hieu", "Khoa", "Linh", "Mai", "Nam"]
PATIENT_LAST_NAMES = ["Nguyen", "Tran", "Le", "Pham", "Hoang", "Vu", "Dang", "Bui"]
SPECIALTIES = ["Infectious Disease", "Internal Medicine", "Immunology", "General Practice"]

TEST_TYPES = [
    ("CD4 Count", "cells/mm3", "500 - 1500", "CD4 T-lymphocyte count"),
    ("HIV Viral Load", "copies/mL", "< 50", "Plasma HIV-1 RNA"),
    ("Complete Blood Count", None, None, "Full blood panel"),
    ("Liver Function Test", "U/L", "7 - 56", "ALT level"),
]

# Morning and afternoon shifts on weekdays
SHIFTS = [(time(8, 0), time(12, 0)), (time(13, 0), time(17, 0))]


async def clear_data(db):
    logger.warning("Clearing existing data from tables...")
    await db.execute(text("DELETE FROM test_results;"))
    await db.execute(text("DELETE FROM appointments;"))
    await db.execute(text("DELETE FROM doctor_schedules;"))
    await db.execute(text("DELETE FROM patients;"))
    await db.execute(text("DELETE FROM doctors;"))
    await db.execute(text("DELETE FROM test_types;"))
    await db.execute(
        text("DELETE FROM users WHERE role IN ('patient', 'doctor');")
    )  # Keep admin if any
    await db.commit()
    logger.info("Relevant data cleared.")


async def _user_exists(db, email: str) -> bool:
    result = await db.execute(select(UserModel.id).where(UserModel.email == email))
    return result.scalar_one_or_none() is not None


async def seed_people(db) -> tuple[List[int], List[int]]:
    doctor_ids: List[int] = []
    patient_ids: List[int] = []

    logger.info(f"Seeding {NUM_DOCTORS} doctors with weekday schedules...")
    for i, full_name in enumerate(DOCTOR_NAMES[:NUM_DOCTORS]):
        email = f"doctor{i + 1}@example.com"
        if await _user_exists(db, email):
            logger.info(f"Doctor user {email} already exists, skipping.")
            continue
        user = UserModel(
            username=f"doctor{i + 1}",
            email=email,
            password_hash=COMMON_PASSWORD_HASH,
            full_name=f"Dr. {full_name}",
            role="doctor",
            is_verified=True,
        )
        doctor = DoctorModel(
            user=user,
            specialty=random.choice(SPECIALTIES),
            years_of_experience=random.randint(2, 30),
        )
        for day in WEEKDAYS[:5]:
            start, end = random.choice(SHIFTS)
            doctor.schedules.append(
                DoctorScheduleModel(work_day=day, start_time=start, end_time=end)
            )
        db.add(doctor)
        await db.flush()
        doctor_ids.append(doctor.id)

    logger.info(f"Seeding {NUM_PATIENTS} patients...")
    for i in range(NUM_PATIENTS):
        email = f"patient{i + 1}@example.com"
        if await _user_exists(db, email):
            logger.info(f"Patient user {email} already exists, skipping.")
            continue
        full_name = f"{random.choice(PATIENT_LAST_NAMES)} {random.choice(PATIENT_FIRST_NAMES)}"
        user = UserModel(
            username=f"patient{i + 1}",
            email=email,
            password_hash=COMMON_PASSWORD_HASH,
            full_name=full_name,
            role="patient",
            is_verified=i % 4 != 0,  # leave some accounts unverified
        )
        patient = PatientModel(
            user=user,
            date_of_birth=date(random.randint(1960, 2005), random.randint(1, 12), random.randint(1, 28)),
            gender=random.choice(["Male", "Female"]),
            phone=f"09{random.randint(10000000, 99999999)}",
        )
        db.add(patient)
        await db.flush()
        patient_ids.append(patient.id)

    for name, unit, normal_range, description in TEST_TYPES:
        db.add(
            TestTypeModel(
                test_type_name=name, unit=unit, normal_range=normal_range, description=description
            )
        )

    await db.commit()
    logger.info(f"Committed {len(doctor_ids)} doctors and {len(patient_ids)} patients.")
    return doctor_ids, patient_ids


async def seed_appointments(db, doctor_ids: List[int], patient_ids: List[int]):
    """Books through AppointmentService so every seeded row passes the availability rules."""
    service = AppointmentService(db)
    booked = 0
    rejected = 0
    today = date.today()

    for patient_id in patient_ids:
        for _ in range(NUM_APPOINTMENTS_PER_PATIENT):
            day = today + timedelta(days=random.randint(-10, 20))
            slot = time(random.choice([8, 9, 10, 11, 13, 14, 15, 16]), random.choice([0, 30]))
            dto = AppointmentCreate(
                doctor_id=random.choice(doctor_ids),
                patient_id=patient_id,
                appointment_date=day,
                appointment_time=slot,
            )
            try:
                await service.create_appointment(dto)
                booked += 1
            except ClinicError as e:
                rejected += 1
                logger.debug(f"Skipped appointment for patient {patient_id}: {e}")

    logger.info(f"Seeded {booked} appointments ({rejected} requests rejected by availability rules).")


async def main(should_clear: bool):
    logger.info(f"Connecting to database at: {app_settings.database_url}")
    engine = await get_engine(str(app_settings.database_url))
    session_factory = await get_session_factory(engine)

    set_global_session_factory(session_factory)

    async with service_db_session() as db:
        if should_clear:
            await clear_data(db)
        doctor_ids, patient_ids = await seed_people(db)
        if doctor_ids and patient_ids:
            await seed_appointments(db, doctor_ids, patient_ids)
        else:
            logger.warning("No new doctors or patients created; skipping appointments.")

    await engine.dispose()
    logger.info("Database connection closed.")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(
        description="Seed the database with doctors, schedules, patients, test types and appointments."
    )
    parser.add_argument(
        "--clear", action="store_true", help="Clear existing data before seeding."
    )
    args = parser.parse_args()
    asyncio.run(main(should_clear=args.clear))

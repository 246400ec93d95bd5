import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from clinic.core.errors import ConflictError, InvalidArgumentError, NotFoundError
from clinic.core.validation import (
    check_doctor_exists,
    check_duplicate_appointment,
    check_patient_exists,
    check_test_type_exists,
)
from clinic.db.crud import test_result as test_result_crud
from clinic.db.session import transaction
from clinic.mappers import to_test_result_read, update_values
from clinic.schemas.test_result import TestResultCreate, TestResultRead, TestResultUpdate

logger = logging.getLogger(__name__)


class TestResultService:
    """Lab results recorded against a patient, a doctor and a test type."""

    __test__ = False

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_test_result(self, dto: Optional[TestResultCreate]) -> TestResultRead:
        if dto is None:
            raise InvalidArgumentError("dto is null")

        await check_patient_exists(self.db, dto.patient_id)
        await check_doctor_exists(self.db, dto.doctor_id)
        await check_test_type_exists(self.db, dto.test_type_id)
        if dto.appointment_id is not None:
            await check_duplicate_appointment(self.db, dto.appointment_id)

        try:
            async with transaction(self.db):
                created = await test_result_crud.create_test_result(
                    self.db, dto.model_dump(exclude_none=True)
                )
        except IntegrityError as e:
            raise ConflictError(
                f"Appointment with ID {dto.appointment_id} already has a test result"
            ) from e

        full = await test_result_crud.get_test_result(self.db, created.id)
        return to_test_result_read(full)

    async def update_test_result(self, dto: Optional[TestResultUpdate]) -> TestResultRead:
        if dto is None:
            raise InvalidArgumentError("dto is null")

        try:
            async with transaction(self.db):
                if dto.patient_id is not None:
                    await check_patient_exists(self.db, dto.patient_id)
                if dto.doctor_id is not None:
                    await check_doctor_exists(self.db, dto.doctor_id)
                if dto.test_type_id is not None:
                    await check_test_type_exists(self.db, dto.test_type_id)
                if dto.appointment_id is not None:
                    await check_duplicate_appointment(
                        self.db, dto.appointment_id, exclude_test_result_id=dto.test_result_id
                    )

                test_result = await test_result_crud.get_test_result(
                    self.db, dto.test_result_id, with_relations=False
                )
                if test_result is None:
                    raise NotFoundError(f"Test result with ID {dto.test_result_id} not found")

                await test_result_crud.update_test_result(
                    self.db, test_result, update_values(dto, exclude={"test_result_id"})
                )
        except IntegrityError as e:
            raise ConflictError(
                f"Appointment with ID {dto.appointment_id} already has a test result"
            ) from e

        logger.info(f"Updated test result {dto.test_result_id}")
        full = await test_result_crud.get_test_result(self.db, dto.test_result_id)
        return to_test_result_read(full)

    async def get_all_test_results(self) -> List[TestResultRead]:
        test_results = await test_result_crud.list_test_results(self.db)
        return [to_test_result_read(t) for t in test_results]

    async def get_test_results_by_patient(self, patient_id: int) -> List[TestResultRead]:
        test_results = await test_result_crud.list_test_results(self.db, patient_id=patient_id)
        return [to_test_result_read(t) for t in test_results]

    async def get_test_result_by_id(self, test_result_id: int) -> TestResultRead:
        test_result = await test_result_crud.get_test_result(self.db, test_result_id)
        if test_result is None:
            raise NotFoundError(f"Test result with ID {test_result_id} not found")
        return to_test_result_read(test_result)

    async def delete_test_result_by_id(self, test_result_id: int) -> bool:
        async with transaction(self.db):
            test_result = await test_result_crud.get_test_result(
                self.db, test_result_id, with_relations=False
            )
            if test_result is None:
                raise NotFoundError(f"Test result with ID {test_result_id} not found")
            await test_result_crud.delete_test_result(self.db, test_result)

        logger.info(f"Deleted test result {test_result_id}")
        return True

import pytest

from clinic.core.errors import InvalidArgumentError
from clinic.schemas.shared import Role
from clinic.schemas.user import ChangePasswordRequest
from clinic.services.login import LoginService

from conftest import PASSWORD


@pytest.fixture
def service(db_session):
    return LoginService(db_session)


def _change(username: str, current: str, new: str) -> ChangePasswordRequest:
    return ChangePasswordRequest(
        username=username, current_password=current, new_password=new, confirm_password=new
    )


@pytest.mark.asyncio
async def test_validate_user_by_username_or_email(service, seed):
    by_username = await service.validate_user(seed.patient_username, PASSWORD)
    by_email = await service.validate_user(seed.patient_email, PASSWORD)

    assert by_username is not None
    assert by_username == by_email
    assert by_username.role == Role.patient
    assert by_username.patient_id == seed.patient_id
    assert by_username.doctor_id is None
    assert "password_hash" not in by_username.model_dump()


@pytest.mark.asyncio
async def test_validate_user_rejects_bad_credentials(service, seed):
    assert await service.validate_user(seed.patient_username, "wrong-password") is None
    assert await service.validate_user("nobody", PASSWORD) is None


@pytest.mark.asyncio
async def test_validate_doctor_account(service, seed):
    doctor = await service.validate_user("house", PASSWORD)
    assert doctor.role == Role.doctor
    assert doctor.doctor_id == seed.doctor_id


@pytest.mark.asyncio
async def test_change_password(service, seed):
    result = await service.change_password(_change(seed.patient_username, PASSWORD, "Another123!"))

    assert result.success is True
    assert result.user.email == seed.patient_email
    assert await service.validate_user(seed.patient_username, "Another123!") is not None
    assert await service.validate_user(seed.patient_username, PASSWORD) is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "username, current, new, message",
    [
        ("nobody", PASSWORD, "Another123!", "User not found"),
        ("alice", "not-it-at-all", "Another123!", "Current password is incorrect"),
        ("alice", PASSWORD, PASSWORD, "must be different"),
    ],
)
async def test_change_password_failures(service, seed, username, current, new, message):
    result = await service.change_password(_change(username, current, new))

    assert result.success is False
    assert message in result.message
    assert result.user is None
    assert await service.validate_user(seed.patient_username, PASSWORD) is not None


@pytest.mark.asyncio
async def test_change_password_rejects_none(service):
    with pytest.raises(InvalidArgumentError):
        await service.change_password(None)


def test_change_password_request_requires_matching_confirmation():
    with pytest.raises(ValueError):
        ChangePasswordRequest(
            username="alice",
            current_password="x",
            new_password="Another123!",
            confirm_password="Different123!",
        )


def test_change_password_request_accepts_matching_confirmation():
    request = _change("alice", "x", "Another123!")
    assert request.new_password == request.confirm_password == "Another123!"

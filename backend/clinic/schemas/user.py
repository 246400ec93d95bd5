# clinic/schemas/user.py
from __future__ import annotations

from datetime import datetime
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from clinic.schemas.shared import Role


class UserRead(BaseModel):
    """Read-only projection of an account; never carries the password hash."""
    user_id: int
    username: str
    email: EmailStr
    full_name: str
    role: Role
    is_verified: bool
    patient_id: Optional[int] = None
    doctor_id: Optional[int] = None
    created_at: Optional[datetime] = None


class ChangePasswordRequest(BaseModel):
    model_config = ConfigDict(extra='forbid')

    username: str = Field(..., min_length=1)
    current_password: str = Field(..., min_length=1)
    new_password: Annotated[str, Field(min_length=8, max_length=128)]
    confirm_password: str

    @model_validator(mode="after")
    def _passwords_match(self):
        if self.new_password != self.confirm_password:
            raise ValueError("new_password and confirm_password do not match")
        return self


class ChangePasswordResult(BaseModel):
    success: bool
    message: str
    user: Optional[UserRead] = None

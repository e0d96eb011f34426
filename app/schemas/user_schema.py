# app/schemas/user_schema.py
import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator, ConfigDict
from app.models.user import UserRoleEnum


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str


# claims carried inside the token
class TokenData(BaseModel):
    user_id: str
    role: str


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    full_name: str = Field("", max_length=255)
    role: UserRoleEnum

    @field_validator('password')
    @classmethod
    def validate_password(cls, v: str) -> str:
        """
        At least 8 characters, mixing letters and digits
        """
        if not re.search(r'(?=.*[a-zA-Z])(?=.*[0-9])', v):
            raise ValueError('Password must contain letters and digits')
        return v

    @field_validator('role')
    @classmethod
    def validate_role(cls, v: UserRoleEnum) -> UserRoleEnum:
        # admins are provisioned out of band, never self-registered
        if v == UserRoleEnum.admin:
            raise ValueError('Cannot self-register as admin')
        return v


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    email: EmailStr
    full_name: str
    role: UserRoleEnum
    is_active: bool


class UserBrief(BaseModel):
    """Counterparty info nested into projects, proposals and contracts"""
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    full_name: str
    role: UserRoleEnum
    created_at: Optional[datetime] = None

from __future__ import annotations

from typing import Optional

from pydantic import Field

from citybuild.models.enums import UserRole
from citybuild.schemas.primitives import CamelModel, UtcDatetime


class User(CamelModel):
    id: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    phone: Optional[str] = None
    # role is fixed at creation; UserUpdate does not carry it
    role: UserRole
    name: str
    verified: bool = False
    created_at: UtcDatetime


class UserUpdate(CamelModel):
    email: Optional[str] = Field(default=None, min_length=3)
    phone: Optional[str] = None
    name: Optional[str] = Field(default=None, min_length=1)
    verified: Optional[bool] = None


class RegisterRequest(CamelModel):
    email: str = Field(..., min_length=3)
    phone: Optional[str] = None
    role: UserRole
    name: str = Field(..., min_length=1)


class LoginRequest(CamelModel):
    email: str
    password: str = ""


class VerifyPhoneRequest(CamelModel):
    phone: str
    code: str


class AuthResponse(CamelModel):
    user: User
    token: str
    token_type: str = "bearer"

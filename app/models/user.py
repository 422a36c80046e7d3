"""
User model

Recruiters, admins and client users; the role gates deletion and user
management endpoints.
"""
from typing import Optional
from enum import Enum
from pydantic import EmailStr
from sqlmodel import Field

from .base import SQLModelBase, TimestampMixin, IDMixin, TimestampResponse


class UserRole(str, Enum):
    ADMIN = "admin"
    RECRUTADOR = "recrutador"
    CS = "cs"
    VIEWER = "viewer"
    CLIENTE = "cliente"


# ==================== Table ====================

class User(SQLModelBase, TimestampMixin, IDMixin, table=True):
    __tablename__ = "users"

    email: str = Field(..., max_length=255, unique=True, index=True, description="E-mail")
    full_name: str = Field(..., max_length=200, description="Full name")
    role: str = Field(default=UserRole.RECRUTADOR.value, max_length=20, index=True, description="Access role")
    is_active: bool = Field(default=True, index=True)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value and self.is_active

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"


# ==================== Requests ====================

class UserCreate(SQLModelBase):
    email: EmailStr
    full_name: str = Field(..., min_length=1, max_length=200)
    role: UserRole = UserRole.RECRUTADOR


class UserUpdate(SQLModelBase):
    full_name: Optional[str] = Field(None, min_length=1, max_length=200)
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None


# ==================== Responses ====================

class UserResponse(TimestampResponse):
    email: str
    full_name: str
    role: str
    is_active: bool

"""
Company (client) model

Clients that open job requisitions, tracked in their own commercial funnel
"""
from typing import Optional
from pydantic import field_validator
from sqlmodel import Field

from app.services.cnpj import clean_cnpj, validate_cnpj
from app.services.pipeline import CLIENT_INITIAL_STAGE, map_legacy_client_status
from .base import SQLModelBase, TimestampMixin, IDMixin, TimestampResponse


def _checked_cnpj(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    if not validate_cnpj(value):
        raise ValueError("Invalid CNPJ")
    return clean_cnpj(value)


# ==================== Table ====================

class Company(SQLModelBase, TimestampMixin, IDMixin, table=True):
    __tablename__ = "companies"

    name: str = Field(..., max_length=200, index=True, description="Legal name")
    trade_name: Optional[str] = Field(None, max_length=200, description="Trade name")
    cnpj: str = Field(..., max_length=14, unique=True, index=True, description="CNPJ, digits only")
    stage_slug: str = Field(default=CLIENT_INITIAL_STAGE, max_length=40, index=True)
    notes: Optional[str] = None

    def __repr__(self) -> str:
        return f"<Company(id={self.id}, name={self.name})>"


# ==================== Requests ====================

class CompanyCreate(SQLModelBase):
    name: str = Field(..., min_length=1, max_length=200)
    trade_name: Optional[str] = Field(None, max_length=200)
    cnpj: str = Field(..., max_length=18)
    notes: Optional[str] = None
    status: Optional[str] = Field(
        None, max_length=20, description="Status from the old client list (ativo, prospect, inativo)"
    )

    @field_validator("cnpj")
    @classmethod
    def check_cnpj(cls, v):
        return _checked_cnpj(v)

    def initial_stage(self) -> str:
        return map_legacy_client_status(self.status)


class CompanyUpdate(SQLModelBase):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    trade_name: Optional[str] = Field(None, max_length=200)
    cnpj: Optional[str] = Field(None, max_length=18)
    notes: Optional[str] = None

    @field_validator("name", "cnpj", mode="before")
    @classmethod
    def required_fields_stay_set(cls, v):
        if v is None:
            raise ValueError("This field cannot be cleared")
        return v

    @field_validator("cnpj")
    @classmethod
    def check_cnpj(cls, v):
        return _checked_cnpj(v)


class CompanyMove(SQLModelBase):
    to_stage: str = Field(..., min_length=1)


# ==================== Responses ====================

class CompanyResponse(TimestampResponse):
    name: str
    trade_name: Optional[str]
    cnpj: str
    stage_slug: str
    notes: Optional[str]
    cnpj_formatted: str = ""
    stage_name: Optional[str] = None
    job_count: int = 0

"""
Job event model (vaga_eventos)

Human-readable activity timeline of a job: stage changes, candidates added,
moved or removed, feedback received.
"""
from typing import Optional
from enum import Enum
from sqlmodel import Field, Column, JSON

from .base import SQLModelBase, TimestampMixin, IDMixin, TimestampResponse


class JobEventType(str, Enum):
    ETAPA_ALTERADA = "ETAPA_ALTERADA"
    CANDIDATO_ADICIONADO = "CANDIDATO_ADICIONADO"
    CANDIDATO_MOVIDO = "CANDIDATO_MOVIDO"
    CANDIDATO_REMOVIDO = "CANDIDATO_REMOVIDO"
    FEEDBACK_ADICIONADO = "FEEDBACK_ADICIONADO"


class JobEvent(SQLModelBase, TimestampMixin, IDMixin, table=True):
    __tablename__ = "job_events"

    job_id: str = Field(..., foreign_key="jobs.id", ondelete="CASCADE", max_length=36, index=True)
    actor_user_id: Optional[str] = Field(None, max_length=36)
    event_type: str = Field(..., max_length=30, index=True)
    description: str
    payload: dict = Field(default_factory=dict, sa_column=Column(JSON))

    def __repr__(self) -> str:
        return f"<JobEvent(job_id={self.job_id}, type={self.event_type})>"


class JobEventResponse(TimestampResponse):
    job_id: str
    actor_user_id: Optional[str]
    event_type: str
    description: str
    payload: dict

"""
Scorecard models

Weighted interview templates, their criteria, and the scorecards recruiters
fill in for a candidate (one evaluation per criterion).
"""
from datetime import datetime
from typing import Optional, List
from enum import Enum
from pydantic import field_validator
from sqlmodel import Field

from .base import SQLModelBase, TimestampMixin, IDMixin, TimestampResponse


class CriterionCategory(str, Enum):
    HARD_SKILLS = "hard_skills"
    SOFT_SKILLS = "soft_skills"
    EXPERIENCIA = "experiencia"
    FIT_CULTURAL = "fit_cultural"
    OUTROS = "outros"


class ScaleType(str, Enum):
    RATING_1_5 = "rating_1_5"
    RATING_1_10 = "rating_1_10"
    TEXT_OPTIONS = "text_options"


class Recommendation(str, Enum):
    STRONG_YES = "strong_yes"
    YES = "yes"
    MAYBE = "maybe"
    NO = "no"


# ==================== Tables ====================

class ScorecardTemplate(SQLModelBase, TimestampMixin, IDMixin, table=True):
    __tablename__ = "scorecard_templates"

    name: str = Field(..., max_length=200)
    description: Optional[str] = None
    is_active: bool = Field(default=True)
    created_by: Optional[str] = Field(None, max_length=36)


class ScorecardCriterion(SQLModelBase, TimestampMixin, IDMixin, table=True):
    __tablename__ = "scorecard_criteria"

    template_id: str = Field(
        ..., foreign_key="scorecard_templates.id", ondelete="CASCADE", max_length=36, index=True
    )
    name: str = Field(..., max_length=200)
    description: Optional[str] = None
    category: str = Field(default=CriterionCategory.OUTROS.value, max_length=20)
    weight: int = Field(..., ge=0, le=100)
    scale_type: str = Field(default=ScaleType.RATING_1_5.value, max_length=20)
    display_order: int = Field(default=0)
    # False once a template edit replaced it
    is_active: bool = Field(default=True, index=True)


class CandidateScorecard(SQLModelBase, TimestampMixin, IDMixin, table=True):
    __tablename__ = "candidate_scorecards"

    candidate_id: str = Field(
        ..., foreign_key="candidates.id", ondelete="CASCADE", max_length=36, index=True
    )
    template_id: str = Field(
        ..., foreign_key="scorecard_templates.id", ondelete="CASCADE", max_length=36
    )
    job_id: Optional[str] = Field(
        None, foreign_key="jobs.id", ondelete="SET NULL", max_length=36, index=True
    )
    evaluator_id: Optional[str] = Field(None, max_length=36)
    recommendation: str = Field(..., max_length=20)
    comments: Optional[str] = None
    total_score: float = Field(default=0)
    match_percentage: int = Field(default=0)


class ScorecardEvaluation(SQLModelBase, TimestampMixin, IDMixin, table=True):
    __tablename__ = "scorecard_evaluations"

    scorecard_id: str = Field(
        ..., foreign_key="candidate_scorecards.id", ondelete="CASCADE", max_length=36, index=True
    )
    criteria_id: str = Field(
        ..., foreign_key="scorecard_criteria.id", ondelete="RESTRICT", max_length=36
    )
    score: int
    notes: Optional[str] = None


# ==================== Requests ====================

class CriterionIn(SQLModelBase):
    name: str = Field(..., max_length=200)
    description: Optional[str] = None
    category: CriterionCategory = CriterionCategory.OUTROS
    weight: int = Field(..., ge=0, le=100)
    scale_type: ScaleType = ScaleType.RATING_1_5


class ScorecardTemplateCreate(SQLModelBase):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    is_active: bool = True
    criteria: List[CriterionIn] = Field(default_factory=list)


class ScorecardTemplateUpdate(SQLModelBase):
    """Criteria, when sent, replace the template's current list"""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    is_active: Optional[bool] = None
    criteria: Optional[List[CriterionIn]] = None

    @field_validator("name", "is_active")
    @classmethod
    def required_fields_stay_set(cls, v):
        if v is None:
            raise ValueError("This field cannot be cleared")
        return v


class EvaluationIn(SQLModelBase):
    criteria_id: str
    score: int = Field(0, ge=0)
    notes: Optional[str] = None


class CandidateScorecardCreate(SQLModelBase):
    template_id: str
    job_id: Optional[str] = None
    recommendation: Recommendation
    comments: Optional[str] = None
    evaluations: List[EvaluationIn] = Field(default_factory=list)


# ==================== Responses ====================

class CriterionResponse(SQLModelBase):
    id: str
    name: str
    description: Optional[str]
    category: str
    weight: int
    scale_type: str
    display_order: int


class ScorecardTemplateResponse(TimestampResponse):
    name: str
    description: Optional[str]
    is_active: bool
    criteria: List[CriterionResponse] = Field(default_factory=list)


class EvaluationResponse(SQLModelBase):
    criteria_id: str
    score: int
    notes: Optional[str]


class CandidateScorecardResponse(TimestampResponse):
    candidate_id: str
    template_id: str
    job_id: Optional[str]
    evaluator_id: Optional[str]
    recommendation: str
    comments: Optional[str]
    total_score: float
    match_percentage: int
    evaluations: List[EvaluationResponse] = Field(default_factory=list)


class CriterionAverage(SQLModelBase):
    criterion: str
    average: float
    weight: int
    category: Optional[str]


class EvaluatorComment(SQLModelBase):
    text: str
    evaluator_id: Optional[str]
    date: datetime


class CandidateScoreSummary(SQLModelBase):
    candidate_id: str
    candidate_name: str
    total_score: float
    evaluator_count: int
    low_confidence: bool
    last_evaluated_at: Optional[datetime]
    criteria: List[CriterionAverage]
    top_criteria: List[CriterionAverage]
    comments: List[EvaluatorComment]

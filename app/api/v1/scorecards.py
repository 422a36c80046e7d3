"""
Scorecards API

Templates with weighted criteria, candidate scorecards and the per-job
ranking built from them
"""
from typing import Optional, List
from fastapi import APIRouter, Depends, Query
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_user
from app.core.database import get_db
from app.core.response import (
    success_response,
    paged_response,
    ResponseModel,
    PagedResponseModel,
    DictResponse,
)
from app.core.exceptions import NotFoundException, BadRequestException
from app.crud import (
    scorecard_template_crud,
    candidate_scorecard_crud,
    candidate_crud,
    job_crud,
)
from app.models.scorecard import (
    ScorecardTemplate,
    ScorecardCriterion,
    CandidateScorecard,
    ScorecardTemplateCreate,
    ScorecardTemplateUpdate,
    ScorecardTemplateResponse,
    CriterionResponse,
    CandidateScorecardCreate,
    CandidateScorecardResponse,
    EvaluationResponse,
    CandidateScoreSummary,
)
from app.models.user import User
from app.services.scoring import (
    ScorecardValidationError,
    ScorecardRow,
    EvaluationRow,
    validate_criteria,
    check_score,
    calculate_scores,
    aggregate_scorecards,
)

router = APIRouter()


def _template_response(template: ScorecardTemplate, criteria: List[ScorecardCriterion]) -> dict:
    response = ScorecardTemplateResponse.model_validate(template)
    response.criteria = [CriterionResponse.model_validate(c) for c in criteria]
    return response.model_dump()


async def _get_template_or_404(db: AsyncSession, template_id: str) -> ScorecardTemplate:
    template = await scorecard_template_crud.get(db, template_id)
    if not template:
        raise NotFoundException(f"Scorecard template not found: {template_id}")
    return template


# ==================== Templates ====================

@router.get("/scorecard-templates", summary="List scorecard templates", response_model=PagedResponseModel[ScorecardTemplateResponse])
async def get_templates(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    is_active: Optional[bool] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    skip = (page - 1) * page_size
    conditions = [ScorecardTemplate.is_active == is_active] if is_active is not None else []
    templates = await scorecard_template_crud.get_multi(db, skip=skip, limit=page_size, conditions=conditions)
    total = await scorecard_template_crud.count(db, conditions=conditions)
    items = []
    for t in templates:
        criteria = await scorecard_template_crud.get_criteria(db, t.id)
        items.append(_template_response(t, criteria))
    return paged_response(items, total, page, page_size)


@router.post("/scorecard-templates", summary="Create scorecard template", response_model=ResponseModel[ScorecardTemplateResponse])
async def create_template(
    data: ScorecardTemplateCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    try:
        validate_criteria(data.criteria)
    except ScorecardValidationError as e:
        raise BadRequestException(str(e))

    template = await scorecard_template_crud.create(db, obj_in={
        "name": data.name,
        "description": data.description,
        "is_active": data.is_active,
        "created_by": user.id,
    })
    criteria = await scorecard_template_crud.replace_criteria(db, template.id, data.criteria)
    return success_response(data=_template_response(template, criteria), message="Template created")


@router.get("/scorecard-templates/{template_id}", summary="Get scorecard template", response_model=ResponseModel[ScorecardTemplateResponse])
async def get_template(
    template_id: str,
    db: AsyncSession = Depends(get_db),
):
    template = await _get_template_or_404(db, template_id)
    criteria = await scorecard_template_crud.get_criteria(db, template.id)
    return success_response(data=_template_response(template, criteria))


@router.patch("/scorecard-templates/{template_id}", summary="Update scorecard template", response_model=ResponseModel[ScorecardTemplateResponse])
async def update_template(
    template_id: str,
    data: ScorecardTemplateUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    template = await _get_template_or_404(db, template_id)
    if data.criteria is not None:
        try:
            validate_criteria(data.criteria)
        except ScorecardValidationError as e:
            raise BadRequestException(str(e))

    template = await scorecard_template_crud.update(
        db, db_obj=template, obj_in=data.model_dump(exclude_unset=True, exclude={"criteria"})
    )
    if data.criteria is not None:
        criteria = await scorecard_template_crud.replace_criteria(db, template.id, data.criteria)
    else:
        criteria = await scorecard_template_crud.get_criteria(db, template.id)
    return success_response(data=_template_response(template, criteria), message="Template updated")


# ==================== Candidate scorecards ====================

@router.post("/candidates/{candidate_id}/scorecards", summary="Submit a scorecard", response_model=ResponseModel[CandidateScorecardResponse])
async def create_scorecard(
    candidate_id: str,
    data: CandidateScorecardCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    """
    Score a candidate against a template

    Every criterion of the template must be scored within its scale.
    """
    candidate = await candidate_crud.get_active(db, candidate_id)
    if not candidate:
        raise NotFoundException(f"Candidate not found: {candidate_id}")
    template = await _get_template_or_404(db, data.template_id)
    job_id = data.job_id or candidate.job_id
    if job_id and not await job_crud.get_active(db, job_id):
        raise NotFoundException(f"Job not found: {job_id}")

    criteria = await scorecard_template_crud.get_criteria(db, template.id)
    scores = {ev.criteria_id: ev for ev in data.evaluations}
    unknown = set(scores) - {c.id for c in criteria}
    if unknown:
        raise BadRequestException("Evaluation refers to a criterion outside the template")
    missing = [c.name for c in criteria if c.id not in scores or not check_score(scores[c.id].score, c.scale_type)]
    if missing:
        raise BadRequestException(
            f"Score every criterion before saving: {', '.join(missing)}",
            data={"missing": missing},
        )

    total, percentage = calculate_scores(
        (scores[c.id].score, c.weight, c.scale_type) for c in criteria
    )
    scorecard = CandidateScorecard(
        candidate_id=candidate.id,
        template_id=template.id,
        job_id=job_id,
        evaluator_id=user.id,
        recommendation=data.recommendation,
        comments=data.comments,
        total_score=total,
        match_percentage=percentage,
    )
    scorecard = await candidate_scorecard_crud.create_with_evaluations(
        db, scorecard=scorecard, evaluations=[scores[c.id] for c in criteria]
    )
    logger.info(f"Scorecard {scorecard.id} for candidate {candidate.id}: {total} ({percentage}%)")

    response = CandidateScorecardResponse.model_validate(scorecard)
    response.evaluations = [
        EvaluationResponse(criteria_id=c.id, score=scores[c.id].score, notes=scores[c.id].notes)
        for c in criteria
    ]
    return success_response(data=response.model_dump(), message="Scorecard saved")


@router.get("/candidates/{candidate_id}/scorecards", summary="Candidate scorecards", response_model=ResponseModel[list[CandidateScorecardResponse]])
async def get_candidate_scorecards(
    candidate_id: str,
    db: AsyncSession = Depends(get_db),
):
    if not await candidate_crud.get_active(db, candidate_id):
        raise NotFoundException(f"Candidate not found: {candidate_id}")
    scorecards = await candidate_scorecard_crud.list_for_candidate(db, candidate_id)
    evaluations = await candidate_scorecard_crud.get_evaluations(db, [s.id for s in scorecards])

    items = []
    for s in scorecards:
        response = CandidateScorecardResponse.model_validate(s)
        response.evaluations = [EvaluationResponse.model_validate(e) for e in evaluations[s.id]]
        items.append(response.model_dump())
    return success_response(data=items)


@router.get("/jobs/{job_id}/scorecards/summary", summary="Rank a job's candidates by scorecards", response_model=DictResponse)
async def get_job_scorecard_summary(
    job_id: str,
    db: AsyncSession = Depends(get_db),
):
    if not await job_crud.get_active(db, job_id):
        raise NotFoundException(f"Job not found: {job_id}")

    pairs = await candidate_scorecard_crud.list_for_job(db, job_id)
    if not pairs:
        raise NotFoundException("No complete scorecards found for this job")

    scorecard_ids = [s.id for s, _ in pairs]
    evaluations = await candidate_scorecard_crud.get_evaluations(db, scorecard_ids)
    criteria = await candidate_scorecard_crud.criteria_by_id(
        db, list({e.criteria_id for evs in evaluations.values() for e in evs})
    )

    rows = []
    for scorecard, candidate_name in pairs:
        evs = []
        for e in evaluations[scorecard.id]:
            c = criteria.get(e.criteria_id)
            evs.append(EvaluationRow(
                criterion=c.name if c else "Unknown",
                score=e.score,
                weight=c.weight if c else 10,
                scale_type=c.scale_type if c else "rating_1_5",
                category=c.category if c else None,
            ))
        rows.append(ScorecardRow(
            candidate_id=scorecard.candidate_id,
            candidate_name=candidate_name,
            total_score=scorecard.total_score,
            created_at=scorecard.created_at,
            evaluator_id=scorecard.evaluator_id,
            comments=scorecard.comments,
            evaluations=evs,
        ))

    candidates = [CandidateScoreSummary.model_validate(c).model_dump() for c in aggregate_scorecards(rows)]
    return success_response(data={
        "job_id": job_id,
        "candidates": candidates,
        "total_candidates": len(candidates),
    })

"""
Scorecard CRUD

Templates own their criteria; scorecards own their evaluations. Criteria are
retired rather than deleted so old evaluations stay readable.
"""
from typing import List, Dict, Optional
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.timeutils import utc_now
from app.models.scorecard import (
    ScorecardTemplate,
    ScorecardCriterion,
    CandidateScorecard,
    ScorecardEvaluation,
    CriterionIn,
    EvaluationIn,
)
from app.models.candidate import Candidate
from .base import CRUDBase


class CRUDScorecardTemplate(CRUDBase[ScorecardTemplate]):

    async def get_criteria(self, db: AsyncSession, template_id: str) -> List[ScorecardCriterion]:
        """The template's current criteria; retired ones are left out"""
        result = await db.execute(
            select(ScorecardCriterion)
            .where(ScorecardCriterion.template_id == template_id, ScorecardCriterion.is_active.is_(True))
            .order_by(ScorecardCriterion.display_order)
        )
        return list(result.scalars().all())

    async def replace_criteria(
        self,
        db: AsyncSession,
        template_id: str,
        criteria: List[CriterionIn],
    ) -> List[ScorecardCriterion]:
        """
        Swap in a new criteria list

        Old criteria are retired, not deleted: past evaluations keep pointing
        at the criterion they were scored against.
        """
        await db.execute(
            update(ScorecardCriterion)
            .where(ScorecardCriterion.template_id == template_id, ScorecardCriterion.is_active.is_(True))
            .values(is_active=False, updated_at=utc_now())
            .execution_options(synchronize_session="fetch")
        )
        rows = [
            ScorecardCriterion(
                template_id=template_id,
                display_order=i,
                **c.model_dump(),
            )
            for i, c in enumerate(criteria)
        ]
        db.add_all(rows)
        await db.flush()
        return rows


class CRUDCandidateScorecard(CRUDBase[CandidateScorecard]):

    async def create_with_evaluations(
        self,
        db: AsyncSession,
        *,
        scorecard: CandidateScorecard,
        evaluations: List[EvaluationIn],
    ) -> CandidateScorecard:
        db.add(scorecard)
        await db.flush()
        db.add_all([
            ScorecardEvaluation(scorecard_id=scorecard.id, **ev.model_dump())
            for ev in evaluations
        ])
        await db.flush()
        await db.refresh(scorecard)
        return scorecard

    async def get_evaluations(
        self, db: AsyncSession, scorecard_ids: List[str]
    ) -> Dict[str, List[ScorecardEvaluation]]:
        grouped: Dict[str, List[ScorecardEvaluation]] = {sid: [] for sid in scorecard_ids}
        if not scorecard_ids:
            return grouped
        result = await db.execute(
            select(ScorecardEvaluation).where(ScorecardEvaluation.scorecard_id.in_(scorecard_ids))
        )
        for ev in result.scalars().all():
            grouped[ev.scorecard_id].append(ev)
        return grouped

    async def list_for_candidate(self, db: AsyncSession, candidate_id: str) -> List[CandidateScorecard]:
        result = await db.execute(
            select(self.model)
            .where(self.model.candidate_id == candidate_id)
            .order_by(self.model.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_for_job(self, db: AsyncSession, job_id: str) -> list:
        """(scorecard, candidate name) pairs for non-deleted candidates"""
        result = await db.execute(
            select(self.model, Candidate.full_name)
            .join(Candidate, Candidate.id == self.model.candidate_id)
            .where(self.model.job_id == job_id, Candidate.deleted_at.is_(None))
            .order_by(self.model.created_at)
        )
        return list(result.all())

    async def criteria_by_id(self, db: AsyncSession, criteria_ids: List[str]) -> Dict[str, ScorecardCriterion]:
        if not criteria_ids:
            return {}
        result = await db.execute(
            select(ScorecardCriterion).where(ScorecardCriterion.id.in_(criteria_ids))
        )
        return {c.id: c for c in result.scalars().all()}

    async def latest_match(self, db: AsyncSession, candidate_ids: List[str]) -> Dict[str, Optional[int]]:
        """Match percentage of each candidate's most recent scorecard"""
        if not candidate_ids:
            return {}
        result = await db.execute(
            select(self.model.candidate_id, self.model.match_percentage)
            .where(self.model.candidate_id.in_(candidate_ids))
            .order_by(self.model.created_at)
        )
        latest: Dict[str, Optional[int]] = {}
        for candidate_id, match in result.all():
            latest[candidate_id] = match
        return latest


scorecard_template_crud = CRUDScorecardTemplate(ScorecardTemplate)
candidate_scorecard_crud = CRUDCandidateScorecard(CandidateScorecard)

"""
Scorecard scoring

Template validation, the weighted total of a filled scorecard and the
per-job aggregation used to rank candidates.
"""
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from app.services.pipeline import round_half_up

REQUIRED_WEIGHT_TOTAL = 100
TOP_CRITERIA = 3
MIN_CONFIDENT_EVALUATORS = 2

SCALE_MAX = {
    "rating_1_5": 5,
    "rating_1_10": 10,
    "text_options": 100,
}


class ScorecardValidationError(ValueError):
    pass


def validate_criteria(criteria: Sequence) -> None:
    """
    Check a template's criteria before it is saved

    Each item needs `name` and `weight` attributes.
    """
    if not criteria:
        raise ScorecardValidationError("Add at least one criterion")
    if any(not (c.name or "").strip() for c in criteria):
        raise ScorecardValidationError("Every criterion needs a name")
    total = sum(c.weight for c in criteria)
    if total != REQUIRED_WEIGHT_TOTAL:
        raise ScorecardValidationError(
            f"Criteria weights must add up to 100 (current total: {total})"
        )


def check_score(score: int, scale_type: str) -> bool:
    return 0 < score <= SCALE_MAX.get(scale_type, 5)


def calculate_scores(scored: Iterable[tuple]) -> tuple:
    """
    Weighted total and match percentage

    `scored` yields (score, weight, scale_type) triples. Each score counts as
    a fraction of its scale's maximum, so a full mark on any scale earns the
    criterion's whole weight. Unscored criteria (score 0) still count towards
    the weight total. Returns (total_score, match_percentage).
    """
    total = 0.0
    max_possible = 0
    for score, weight, scale_type in scored:
        max_possible += weight
        if score > 0:
            total += score / SCALE_MAX.get(scale_type, 5) * weight
    total = round(total, 2)
    percentage = round_half_up(total / max_possible * 100) if max_possible > 0 else 0
    return total, percentage


def normalize_score(score: float, scale_type: Optional[str]) -> float:
    """Bring a raw evaluation to 0-100"""
    if scale_type == "rating_1_5":
        return (score - 1) / 4 * 100
    if scale_type == "rating_1_10":
        return (score - 1) / 9 * 100
    return score


# ==================== Aggregation ====================

@dataclass
class EvaluationRow:
    criterion: str
    score: float
    weight: int = 10
    scale_type: str = "rating_1_5"
    category: Optional[str] = None


@dataclass
class ScorecardRow:
    candidate_id: str
    candidate_name: str
    total_score: Optional[float]
    created_at: datetime
    evaluator_id: Optional[str] = None
    comments: Optional[str] = None
    evaluations: List[EvaluationRow] = field(default_factory=list)


def _one_decimal(value: float) -> float:
    return round(value, 1)


def aggregate_scorecards(rows: Sequence[ScorecardRow]) -> List[dict]:
    """
    Group a job's scorecards by candidate and rank them

    Criterion averages are taken over normalised scores and sorted best
    first; candidates are sorted by their mean total score.
    """
    grouped: "OrderedDict[str, dict]" = OrderedDict()
    for row in rows:
        entry = grouped.get(row.candidate_id)
        if entry is None:
            entry = grouped[row.candidate_id] = {
                "candidate_id": row.candidate_id,
                "candidate_name": row.candidate_name or "Candidato",
                "totals": [],
                "count": 0,
                "breakdown": OrderedDict(),
                "comments": [],
                "last": None,
            }
        entry["count"] += 1
        if row.total_score is not None:
            entry["totals"].append(row.total_score)
        if row.comments:
            entry["comments"].append({
                "text": row.comments,
                "evaluator_id": row.evaluator_id,
                "date": row.created_at,
            })
        if entry["last"] is None or row.created_at > entry["last"]:
            entry["last"] = row.created_at

        for ev in row.evaluations:
            slot = entry["breakdown"].setdefault(
                ev.criterion, {"scores": [], "weight": ev.weight, "category": ev.category}
            )
            slot["scores"].append(normalize_score(ev.score, ev.scale_type))

    result = []
    for entry in grouped.values():
        breakdown = [
            {
                "criterion": name,
                "average": _one_decimal(sum(data["scores"]) / len(data["scores"])),
                "weight": data["weight"],
                "category": data["category"],
            }
            for name, data in entry["breakdown"].items()
        ]
        breakdown.sort(key=lambda item: item["average"], reverse=True)
        totals = entry["totals"]
        result.append({
            "candidate_id": entry["candidate_id"],
            "candidate_name": entry["candidate_name"],
            "total_score": _one_decimal(sum(totals) / len(totals)) if totals else 0.0,
            "evaluator_count": entry["count"],
            "low_confidence": entry["count"] < MIN_CONFIDENT_EVALUATORS,
            "last_evaluated_at": entry["last"],
            "criteria": breakdown,
            "top_criteria": breakdown[:TOP_CRITERIA],
            "comments": entry["comments"],
        })

    result.sort(key=lambda item: item["total_score"], reverse=True)
    return result

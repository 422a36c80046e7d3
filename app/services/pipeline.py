"""
Pipeline stage model

Fixed, ordered stage tables shared by the job funnel, the candidate funnel
and the client (company) funnel, plus the pure functions the kanban boards
use to compute progress and plan drag-and-drop transitions.
"""
import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple


@dataclass(frozen=True)
class Stage:
    slug: str
    name: str
    order: int


@dataclass(frozen=True)
class Transition:
    """A stage change that must be written: source differs from target"""
    source: Optional[Stage]
    target: Stage

    @property
    def description(self) -> str:
        old = self.source.name if self.source else "-"
        return f'Etapa alterada de "{old}" para "{self.target.name}"'

    def payload(self) -> dict:
        return {
            "old_status": self.source.name if self.source else None,
            "old_status_slug": self.source.slug if self.source else None,
            "new_status": self.target.name,
            "new_status_slug": self.target.slug,
        }


class InvalidStageError(ValueError):
    """Target slug is not part of the stage table"""


def _build(*pairs: Tuple[str, str]) -> Tuple[Stage, ...]:
    return tuple(Stage(slug=slug, name=name, order=i + 1) for i, (slug, name) in enumerate(pairs))


# ==================== Job requisitions ====================

JOB_STAGES: Tuple[Stage, ...] = _build(
    ("a-iniciar", "A iniciar"),
    ("discovery", "Discovery"),
    ("triagem", "Triagem"),
    ("entrevistas-rhello", "Entrevistas Rhello"),
    ("aguardando-retorno", "Aguardando retorno do cliente"),
    ("apresentacao-candidatos", "Apresentação de Candidatos"),
    ("entrevista-cliente", "Entrevista cliente"),
    ("em-contratacao", "Em processo de contratação"),
    ("concluida", "Concluído"),
    ("cancelada", "Cancelada"),
)

JOB_INITIAL_STAGE = "a-iniciar"
JOB_CLOSED_SLUGS = frozenset({"concluida", "cancelada"})
JOB_BOARD_STAGES: Tuple[Stage, ...] = tuple(s for s in JOB_STAGES if s.slug != "cancelada")


# ==================== Candidates ====================

CANDIDATE_STAGES: Tuple[Stage, ...] = _build(
    ("banco-talentos", "Banco de Talentos"),
    ("selecionado", "Selecionado"),
    ("entrevista-rhello", "Entrevista rhello"),
    ("aprovado-rhello", "Aprovado rhello"),
    ("reprovado-rhello", "Reprovado rhello"),
    ("entrevistas-solicitante", "Entrevistas Solicitante"),
    ("aprovado-solicitante", "Aprovado Solicitante"),
    ("reprovado-solicitante", "Reprovado Solicitante"),
    ("contratado", "Contratado"),
)

CANDIDATE_INITIAL_STAGE = "banco-talentos"
CANDIDATE_APPLIED_STAGE = "selecionado"
CANDIDATE_REJECTED_SLUGS = frozenset({"reprovado-rhello", "reprovado-solicitante"})
CANDIDATE_FINAL_SLUGS = frozenset({"contratado"}) | CANDIDATE_REJECTED_SLUGS
CANDIDATE_BOARD_STAGES: Tuple[Stage, ...] = tuple(
    s for s in CANDIDATE_STAGES if s.slug != CANDIDATE_INITIAL_STAGE
)


# ==================== Clients (companies) ====================

CLIENT_STAGES: Tuple[Stage, ...] = _build(
    ("novo_negocio", "Novo negócio"),
    ("contato_realizado", "Contato realizado"),
    ("discovery", "Discovery"),
    ("processo_andamento", "Processo em andamento"),
    ("processo_finalizado", "Processo finalizado"),
    ("acompanhamento_30_60_90", "Acompanhamento 30/60/90"),
)

CLIENT_INITIAL_STAGE = "novo_negocio"

_LEGACY_CLIENT_STATUS = {
    "ativo": "processo_andamento",
    "prospect": "novo_negocio",
    "inativo": "processo_finalizado",
}


def map_legacy_client_status(old_status: Optional[str]) -> str:
    return _LEGACY_CLIENT_STATUS.get(old_status or "", CLIENT_INITIAL_STAGE)


# ==================== Functions ====================

def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives, like the browser's Math.round"""
    return int(math.floor(value + 0.5))


def get_stage(stages: Sequence[Stage], slug: Optional[str]) -> Optional[Stage]:
    for stage in stages:
        if stage.slug == slug:
            return stage
    return None


def stage_index(stages: Sequence[Stage], slug: Optional[str]) -> int:
    for i, stage in enumerate(stages):
        if stage.slug == slug:
            return i
    return -1


def calculate_progress(stages: Sequence[Stage], slug: Optional[str]) -> int:
    """Percent of the funnel reached; unknown stages count as 0"""
    index = stage_index(stages, slug)
    if index == -1:
        return 0
    return round_half_up((index + 1) / len(stages) * 100)


def plan_transition(
    stages: Sequence[Stage],
    current_slug: Optional[str],
    target_slug: str,
) -> Optional[Transition]:
    """
    Plan a drag-and-drop move

    Returns None when the card is dropped on its own column. The current
    slug may be unknown (legacy rows); the target must be a valid stage.
    """
    target = get_stage(stages, target_slug)
    if target is None:
        raise InvalidStageError(f"Unknown stage: {target_slug}")
    if current_slug == target_slug:
        return None
    return Transition(source=get_stage(stages, current_slug), target=target)


def is_rejected_status(slug: Optional[str]) -> bool:
    return slug in CANDIDATE_REJECTED_SLUGS


def is_open_job(slug: Optional[str]) -> bool:
    return slug not in JOB_CLOSED_SLUGS

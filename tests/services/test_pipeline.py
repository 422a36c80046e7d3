"""
Stage tables and drag-and-drop planning
"""
import pytest

from app.services.pipeline import (
    JOB_STAGES,
    CANDIDATE_STAGES,
    CANDIDATE_BOARD_STAGES,
    CLIENT_STAGES,
    InvalidStageError,
    calculate_progress,
    map_legacy_client_status,
    plan_transition,
    is_rejected_status,
    is_open_job,
    round_half_up,
)


def test_stage_orders_are_contiguous():
    for stages in (JOB_STAGES, CANDIDATE_STAGES, CLIENT_STAGES):
        assert [s.order for s in stages] == list(range(1, len(stages) + 1))
        assert len({s.slug for s in stages}) == len(stages)


def test_job_progress():
    assert calculate_progress(JOB_STAGES, "a-iniciar") == 10
    assert calculate_progress(JOB_STAGES, "concluida") == 90
    assert calculate_progress(JOB_STAGES, "cancelada") == 100
    assert calculate_progress(JOB_STAGES, "unknown") == 0
    assert calculate_progress(JOB_STAGES, None) == 0


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(0.5) == 1
    assert round_half_up(2.49) == 2


def test_plan_transition_same_column_is_noop():
    assert plan_transition(JOB_STAGES, "triagem", "triagem") is None


def test_plan_transition_describes_the_move():
    transition = plan_transition(JOB_STAGES, "a-iniciar", "triagem")
    assert transition.source.slug == "a-iniciar"
    assert transition.target.name == "Triagem"
    assert transition.description == 'Etapa alterada de "A iniciar" para "Triagem"'
    assert transition.payload() == {
        "old_status": "A iniciar",
        "old_status_slug": "a-iniciar",
        "new_status": "Triagem",
        "new_status_slug": "triagem",
    }


def test_plan_transition_from_legacy_slug():
    transition = plan_transition(CANDIDATE_STAGES, "legacy", "selecionado")
    assert transition.source is None
    assert transition.payload()["old_status"] is None


def test_plan_transition_rejects_unknown_target():
    with pytest.raises(InvalidStageError):
        plan_transition(JOB_STAGES, "a-iniciar", "nope")


def test_candidate_board_hides_talent_pool():
    assert "banco-talentos" not in {s.slug for s in CANDIDATE_BOARD_STAGES}
    assert len(CANDIDATE_BOARD_STAGES) == len(CANDIDATE_STAGES) - 1


def test_status_predicates():
    assert is_rejected_status("reprovado-rhello")
    assert is_rejected_status("reprovado-solicitante")
    assert not is_rejected_status("contratado")
    assert is_open_job("triagem")
    assert not is_open_job("concluida")
    assert not is_open_job("cancelada")


def test_legacy_client_status():
    assert map_legacy_client_status("ativo") == "processo_andamento"
    assert map_legacy_client_status("inativo") == "processo_finalizado"
    assert map_legacy_client_status(None) == "novo_negocio"
    assert map_legacy_client_status("whatever") == "novo_negocio"

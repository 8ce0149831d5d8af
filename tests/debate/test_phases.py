"""Tests for arborvote.debate.phases and the advance_phase operation."""

from __future__ import annotations

import pytest

from arborvote.core.exceptions import DebateUninitialized, PhaseMismatch, ValidationException
from arborvote.debate.enums import Phase
from arborvote.debate.models import Debate, PhaseData
from arborvote.debate.phases import advance_phase, derive_phase, effective_phase, init_phase_data, require_phase

START_TIME = 1_700_000_000
TIME_UNIT = 60


class TestInitPhaseData:
    def test_derives_deadlines(self):
        phase_data = init_phase_data(START_TIME, 60)

        assert phase_data.current_phase == Phase.EDITING
        assert phase_data.time_unit == 60
        assert phase_data.editing_end_time == START_TIME + 420
        assert phase_data.voting_end_time == START_TIME + 600
        assert phase_data.editing_end_time < phase_data.voting_end_time

    @pytest.mark.parametrize("time_unit", [0, -1])
    def test_rejects_non_positive_unit(self, time_unit):
        with pytest.raises(ValidationException):
            init_phase_data(START_TIME, time_unit)

    def test_default_is_uninitialized(self):
        phase_data = PhaseData()
        assert phase_data.current_phase == Phase.UNINITIALIZED
        assert phase_data.time_unit == 0
        assert phase_data.editing_end_time == 0
        assert phase_data.voting_end_time == 0


class TestDerivePhase:
    @pytest.mark.parametrize(
        "offset,expected",
        [
            (0, Phase.EDITING),
            (419, Phase.EDITING),
            (420, Phase.VOTING),
            (599, Phase.VOTING),
            (600, Phase.FINISHED),
            (10_000, Phase.FINISHED),
        ],
    )
    def test_thresholds(self, offset, expected):
        phase_data = init_phase_data(START_TIME, 60)
        assert derive_phase(phase_data, START_TIME + offset) == expected


class TestAdvancePhase:
    def _debate(self) -> Debate:
        return Debate(id=3, thesis="t", phase_data=init_phase_data(START_TIME, 60))

    def test_early_call_is_noop(self):
        debate = self._debate()
        assert advance_phase(debate, START_TIME + 10) == Phase.EDITING
        assert debate.phase_data.current_phase == Phase.EDITING

    def test_jumps_straight_to_finished(self):
        debate = self._debate()
        assert advance_phase(debate, START_TIME + 601) == Phase.FINISHED

    def test_never_regresses(self):
        debate = self._debate()
        advance_phase(debate, START_TIME + 500)
        assert advance_phase(debate, START_TIME) == Phase.VOTING

    def test_uninitialized_debate(self):
        with pytest.raises(DebateUninitialized) as exc_info:
            advance_phase(Debate(id=3, thesis="t"), START_TIME)
        assert exc_info.value.debate_id == 3


class TestRequirePhase:
    def _debate(self) -> Debate:
        return Debate(id=3, thesis="t", phase_data=init_phase_data(START_TIME, 60))

    def test_checks_without_writing(self):
        debate = self._debate()
        require_phase(debate, START_TIME + 420, Phase.VOTING)
        assert debate.phase_data.current_phase == Phase.EDITING

    def test_mismatch_reports_effective_phase(self):
        with pytest.raises(PhaseMismatch) as exc_info:
            require_phase(self._debate(), START_TIME + 600, Phase.VOTING)
        assert (exc_info.value.expected, exc_info.value.actual) == (Phase.VOTING, Phase.FINISHED)

    def test_effective_phase_never_regresses(self):
        debate = self._debate()
        debate.phase_data.current_phase = Phase.FINISHED
        assert effective_phase(debate, START_TIME) == Phase.FINISHED

    def test_uninitialized_debate(self):
        with pytest.raises(DebateUninitialized):
            require_phase(Debate(id=3, thesis="t"), START_TIME, Phase.EDITING)


class TestAdvancePhaseOperation:
    """advance_phase through the service."""

    def test_sequence(self, system, debate_id, clock):
        assert system.advance_phase(debate_id) == Phase.EDITING

        clock.advance(7 * TIME_UNIT)
        assert system.advance_phase(debate_id) == Phase.VOTING
        assert system.advance_phase(debate_id) == Phase.VOTING

        clock.advance(3 * TIME_UNIT)
        assert system.advance_phase(debate_id) == Phase.FINISHED
        assert system.get_phase(debate_id).current_phase == Phase.FINISHED

    def test_unknown_debate(self, system):
        with pytest.raises(DebateUninitialized) as exc_info:
            system.advance_phase(42)
        assert str(exc_info.value) == "DebateUninitialized(42)"

    def test_get_phase_does_not_advance(self, system, debate_id, clock):
        clock.advance(8 * TIME_UNIT)
        assert system.get_phase(debate_id).current_phase == Phase.EDITING

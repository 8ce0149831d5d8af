"""Debate lifecycle clock: Editing -> Voting -> Finished.

Deadlines are fixed once, when the debate is created. Advancing is lazy and
idempotent: the phase justified by the current logical time is computed and
written only when it is later than the stored one.
"""

from __future__ import annotations

import logging

from ..core.exceptions import DebateUninitialized, PhaseMismatch
from .constants import DebateConstants
from .enums import Phase
from .models import Debate, PhaseData
from .validators import validate_time_unit

logger = logging.getLogger(__name__)


def init_phase_data(now: int, time_unit: int) -> PhaseData:
    """Open the Editing phase and derive both deadlines from ``time_unit``."""
    validate_time_unit(time_unit)
    return PhaseData(
        current_phase=Phase.EDITING,
        time_unit=time_unit,
        editing_end_time=now + DebateConstants.EDITING_TIME_UNITS * time_unit,
        voting_end_time=now + DebateConstants.VOTING_TIME_UNITS * time_unit,
    )


def derive_phase(phase_data: PhaseData, now: int) -> Phase:
    """Phase that logical time justifies for an initialized debate."""
    if now < phase_data.editing_end_time:
        return Phase.EDITING
    if now < phase_data.voting_end_time:
        return Phase.VOTING
    return Phase.FINISHED


def effective_phase(debate: Debate, now: int) -> Phase:
    """Phase the debate is in at ``now``, whether or not it was written yet.

    Raises:
        DebateUninitialized: If the debate has no phase data yet
    """
    phase_data = debate.phase_data
    if phase_data.current_phase == Phase.UNINITIALIZED:
        raise DebateUninitialized(debate.id)
    return max(phase_data.current_phase, derive_phase(phase_data, now))


def require_phase(debate: Debate, now: int, expected: Phase) -> None:
    """Check the phase at ``now`` without advancing the stored one.

    Raises:
        DebateUninitialized: If the debate has no phase data yet
        PhaseMismatch: If the debate is in another phase at ``now``
    """
    actual = effective_phase(debate, now)
    if actual != expected:
        raise PhaseMismatch(expected, actual)


def advance_phase(debate: Debate, now: int) -> Phase:
    """Move the debate to the phase justified by ``now``. Never regresses.

    Raises:
        DebateUninitialized: If the debate has no phase data yet
    """
    phase_data = debate.phase_data
    target = effective_phase(debate, now)
    if target != phase_data.current_phase:
        logger.info(f"Debate {debate.id} advanced from {phase_data.current_phase} to {target}")
        phase_data.current_phase = target

    return phase_data.current_phase

"""Bottom-up aggregation of argument markets into a debate verdict.

Combination rule, with all values fixed-point in [0, PRECISION]:

    own(a)        = con / (pro + con) of a's market
    childs_vote(a) = sum over tallied children c of sign(c) * score(c)
                    sign(c) = +1 if c supports a, -1 if it opposes a
    score(a)      = clamp(own(a) + childs_vote(a) * w / 100 / n(a), 0, PRECISION)

where ``n(a)`` is the number of tallied children (at least 1) and ``w`` is
``TallyPolicy.child_weight_percent``. The weighted child term is truncated
toward zero, so supporting and opposing children of equal score move their
parent by the same amount. Only FINAL arguments are tallied;
INVALID and unresolved DISPUTED arguments are excluded together with
their subtrees. The root has no market: its ``childs_vote`` decides the
verdict by sign.

Tallying resets and rewrites every ``childs_vote``, so repeated calls on the
same tree give the same result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..core.exceptions import ValidationException
from .constants import DebateConstants
from .enums import ArgumentState, Verdict
from .market import approval
from .models import Debate, DebateResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TallyPolicy:
    """Weighting of child arguments relative to an argument's own market."""

    child_weight_percent: int = 50

    def __post_init__(self):
        if not 0 <= self.child_weight_percent <= 100:
            raise ValidationException(
                "Child weight must be between 0 and 100",
                "child_weight_percent",
                self.child_weight_percent,
            )


def _clamp(value: int) -> int:
    return max(0, min(DebateConstants.PRECISION, value))


def _influence(childs_vote: int, weight_percent: int, child_count: int) -> int:
    """Weighted mean child score, truncated toward zero."""
    magnitude = abs(childs_vote) * weight_percent // 100 // max(1, child_count)
    return magnitude if childs_vote >= 0 else -magnitude


def tally_debate(debate: Debate, policy: TallyPolicy | None = None) -> DebateResult:
    """Walk the tree bottom-up and produce the debate's verdict.

    Args:
        debate: A debate whose arguments have been finalized as far as time allows
        policy: Combination weights (defaults to TallyPolicy())

    Returns:
        DebateResult with the verdict and per-argument scores
    """
    policy = policy or TallyPolicy()
    arguments = debate.arguments

    for argument in arguments:
        argument.childs_vote = 0

    # Pre-order over tallied arguments; reversed, children precede parents
    order: list[int] = []
    stack = [DebateConstants.ROOT_ARGUMENT_ID]
    while stack:
        argument_id = stack.pop()
        order.append(argument_id)
        for child_id in arguments[argument_id].child_ids:
            if arguments[child_id].state == ArgumentState.FINAL:
                stack.append(child_id)

    scores: dict[int, int] = {}
    for argument_id in reversed(order):
        argument = arguments[argument_id]
        tallied_children = [c for c in argument.child_ids if c in scores]

        childs_vote = 0
        for child_id in tallied_children:
            score = scores[child_id]
            childs_vote += score if arguments[child_id].is_supporting else -score
        argument.childs_vote = childs_vote

        if argument.is_root:
            continue

        influence = _influence(childs_vote, policy.child_weight_percent, len(tallied_children))
        scores[argument_id] = _clamp(approval(argument.market) + influence)

    root = arguments[DebateConstants.ROOT_ARGUMENT_ID]
    if root.childs_vote > 0:
        verdict = Verdict.SUPPORTED
    elif root.childs_vote < 0:
        verdict = Verdict.REJECTED
    else:
        verdict = Verdict.UNDECIDED

    excluded = [a.id for a in arguments if not a.is_root and a.id not in scores]

    logger.info(
        f"Debate {debate.id} tallied: {verdict.value} "
        f"({len(scores)} arguments counted, {len(excluded)} excluded)"
    )

    return DebateResult(
        debate_id=debate.id,
        verdict=verdict,
        root_childs_vote=root.childs_vote,
        argument_scores=scores,
        excluded_argument_ids=excluded,
    )

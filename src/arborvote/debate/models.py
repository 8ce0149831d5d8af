"""Data models for the debate protocol.

Records are owned by a single arena (see ``store``); tree links between
arguments are integer indices into ``Debate.arguments``, never object
references. All amounts are integers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .constants import DebateConstants
from .enums import ArgumentState, Phase, Role, Verdict


# ============================================================================
# Market Models
# ============================================================================


@dataclass
class Market:
    """Bonding-curve reserves of one argument.

    At initialization ``pro + con == vote`` and ``pro * con == const``.
    Trades keep ``const`` and grow ``vote`` by the net amount invested.
    """

    pro: int = 0
    con: int = 0
    const: int = 0
    vote: int = 0
    fees: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "pro": self.pro,
            "con": self.con,
            "const": self.const,
            "vote": self.vote,
            "fees": self.fees,
        }


@dataclass
class UserShare:
    """Shares a participant holds in one argument's market."""

    pro: int = 0
    con: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"pro": self.pro, "con": self.con}


# ============================================================================
# Debate Models
# ============================================================================


@dataclass
class PhaseData:
    """Phase clock of a debate. Deadlines are derived once, at creation."""

    current_phase: Phase = Phase.UNINITIALIZED
    time_unit: int = 0
    editing_end_time: int = 0
    voting_end_time: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "current_phase": str(self.current_phase),
            "time_unit": self.time_unit,
            "editing_end_time": self.editing_end_time,
            "voting_end_time": self.voting_end_time,
        }


@dataclass
class Member:
    """Membership of one participant in one debate."""

    role: Role = Role.UNASSIGNED
    token_balance: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"role": self.role.value, "token_balance": self.token_balance}


@dataclass
class Argument:
    """A node of the argument tree."""

    id: int
    parent_argument_id: int
    content_uri: str
    is_supporting: bool
    creator: str
    state: ArgumentState = ArgumentState.UNINITIALIZED
    creation_time: int = 0
    finalization_time: int = 0
    childs_vote: int = 0
    child_ids: list[int] = field(default_factory=list)
    live_child_count: int = 0
    market: Market = field(default_factory=Market)

    @property
    def is_root(self) -> bool:
        return self.id == DebateConstants.ROOT_ARGUMENT_ID

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "parent_argument_id": self.parent_argument_id,
            "content_uri": self.content_uri,
            "is_supporting": self.is_supporting,
            "creator": self.creator,
            "state": self.state.value,
            "creation_time": self.creation_time,
            "finalization_time": self.finalization_time,
            "childs_vote": self.childs_vote,
            "child_ids": list(self.child_ids),
            "market": self.market.to_dict(),
        }


@dataclass
class DisputeRecord:
    """A challenge raised against an argument."""

    argument_id: int
    challenger: str
    dispute_id: int | None = None  # Assigned by the arbitrator
    deposit: int = 0
    ruled: bool = False
    upheld: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "dispute_id": self.dispute_id,
            "argument_id": self.argument_id,
            "challenger": self.challenger,
            "deposit": self.deposit,
            "ruled": self.ruled,
            "upheld": self.upheld,
        }


@dataclass
class Debate:
    """A thesis under argumentation, owning its phase clock, tree, and members.

    ``leaf_argument_ids`` and ``disputed_argument_ids`` are insertion-ordered
    sets (dict keys) maintained incrementally by the store.
    """

    id: int
    thesis: str
    phase_data: PhaseData = field(default_factory=PhaseData)
    arguments: list[Argument] = field(default_factory=list)
    members: dict[str, Member] = field(default_factory=dict)
    shares: dict[tuple[int, str], UserShare] = field(default_factory=dict)
    leaf_argument_ids: dict[int, None] = field(default_factory=dict)
    disputed_argument_ids: dict[int, None] = field(default_factory=dict)
    disputes: dict[int, DisputeRecord] = field(default_factory=dict)  # By argument id

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "thesis": self.thesis,
            "phase_data": self.phase_data.to_dict(),
            "arguments": [a.to_dict() for a in self.arguments],
            "members": {k: m.to_dict() for k, m in self.members.items()},
            "leaf_argument_ids": list(self.leaf_argument_ids),
            "disputed_argument_ids": list(self.disputed_argument_ids),
            "disputes": [d.to_dict() for d in self.disputes.values()],
        }


@dataclass
class DebateResult:
    """Outcome of tallying a finished debate."""

    debate_id: int
    verdict: Verdict
    root_childs_vote: int
    argument_scores: dict[int, int] = field(default_factory=dict)
    excluded_argument_ids: list[int] = field(default_factory=list)

    @property
    def tallied_argument_ids(self) -> list[int]:
        return sorted(self.argument_scores)

    def to_dict(self) -> dict[str, Any]:
        return {
            "debate_id": self.debate_id,
            "verdict": self.verdict.value,
            "root_childs_vote": self.root_childs_vote,
            "argument_scores": {str(k): v for k, v in self.argument_scores.items()},
            "excluded_argument_ids": list(self.excluded_argument_ids),
        }

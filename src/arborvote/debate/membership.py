"""Identity-gated membership per debate.

A participant joins a debate once. Joining requires a valid identity proof
and grants INITIAL_TOKENS of the debate's internal vote token.
"""

from __future__ import annotations

import logging

from ..core.exceptions import AlreadyJoined, IdentityProofInvalid
from .constants import DebateConstants
from .enums import Role
from .models import Debate, Member
from .ports import IdentityOracle
from .validators import validate_balance

logger = logging.getLogger(__name__)


def get_member(debate: Debate, participant: str) -> Member:
    """Membership of ``participant``. Strangers get an unstored UNASSIGNED record."""
    return debate.members.get(participant) or Member()


def join(debate: Debate, participant: str, identity_oracle: IdentityOracle) -> Member:
    """Register ``participant`` in ``debate``.

    Raises:
        AlreadyJoined: If the participant already holds a role
        IdentityProofInvalid: If the identity oracle rejects the participant
    """
    if participant in debate.members:
        raise AlreadyJoined(debate.id, participant)

    if not identity_oracle.is_verified(participant):
        raise IdentityProofInvalid()

    member = Member(role=Role.PARTICIPANT, token_balance=DebateConstants.INITIAL_TOKENS)
    debate.members[participant] = member

    logger.info(f"{participant} joined debate {debate.id}")

    return member


def debit(member: Member, amount: int) -> None:
    """Take ``amount`` vote tokens from a member.

    Raises:
        InsufficientTokens: If the balance does not cover the amount
    """
    validate_balance(member, amount)
    member.token_balance -= amount


def credit(member: Member, amount: int) -> None:
    member.token_balance += amount


def leave(debate: Debate, participant: str) -> None:
    """Drop a membership whose join could not be completed."""
    if debate.members.pop(participant, None) is not None:
        logger.info(f"{participant} removed from debate {debate.id}")

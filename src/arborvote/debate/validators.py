"""Validation functions for the debate protocol.

Each validator raises the typed fault for the first violated precondition
and returns nothing when the input is acceptable.
"""

from __future__ import annotations

from ..core.exceptions import (
    InitialApprovalOutOfBounds,
    InsufficientTokens,
    RoleRequired,
    ValidationException,
)
from .constants import DebateConstants
from .enums import Role
from .models import Member


# ============================================================================
# Validation Functions
# ============================================================================


def validate_initial_approval(approval: int) -> None:
    """Check that a requested approval percentage lies in [50, 100].

    Raises:
        InitialApprovalOutOfBounds: Carrying the violated bound and the value
    """
    if approval < DebateConstants.MIN_APPROVAL:
        raise InitialApprovalOutOfBounds(DebateConstants.MIN_APPROVAL, approval)
    if approval > DebateConstants.MAX_APPROVAL:
        raise InitialApprovalOutOfBounds(DebateConstants.MAX_APPROVAL, approval)


def validate_time_unit(time_unit: int) -> None:
    """A time unit must be positive so editing ends before voting does."""
    if time_unit <= 0:
        raise ValidationException("Time unit must be positive", "time_unit", time_unit)


def validate_role(member: Member, required: Role) -> None:
    if member.role != required:
        raise RoleRequired(required, member.role)


def validate_balance(member: Member, amount: int) -> None:
    if member.token_balance < amount:
        raise InsufficientTokens(amount, member.token_balance)

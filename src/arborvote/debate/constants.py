"""Constants for the debate protocol.

These are protocol constants rather than settings: every replica must
use identical values to reach identical state.
"""

from __future__ import annotations


class DebateConstants:
    """Constants for phases, membership, and argument markets."""

    # Membership
    INITIAL_TOKENS = 100

    # Phase lengths, in multiples of the debate's time unit
    EDITING_TIME_UNITS = 7
    VOTING_TIME_UNITS = 10
    FINALIZATION_TIME_UNITS = 1

    # Argument tree
    ROOT_ARGUMENT_ID = 0

    # Market initialization
    MARKET_LIQUIDITY = 10
    MIN_APPROVAL = 50
    MAX_APPROVAL = 100

    # Trading
    FEE_PERCENT = 5

    # Fixed-point scale for scores (1.0 == PRECISION)
    PRECISION = 10**6

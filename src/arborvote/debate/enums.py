"""Enums for the debate protocol.

Contains the lifecycle, role, and argument state enumerations.
Phase values are ordered so phases can be compared for monotonicity.
"""

from enum import IntEnum, StrEnum


class Phase(IntEnum):
    """Lifecycle phase of a debate. Only ever moves forward."""

    UNINITIALIZED = 0
    EDITING = 1
    VOTING = 2
    FINISHED = 3

    def __str__(self) -> str:
        return self.name.lower()


class Role(StrEnum):
    """Role of a member within one debate."""

    UNASSIGNED = "unassigned"
    PARTICIPANT = "participant"
    JUROR = "juror"  # Eligible for arbitration; semantics live outside the core


class ArgumentState(StrEnum):
    """State of an argument in the tree."""

    UNINITIALIZED = "uninitialized"
    CREATED = "created"  # Inside its finalization window
    FINAL = "final"  # Window passed or dispute rejected
    DISPUTED = "disputed"  # Awaiting an arbitration ruling
    INVALID = "invalid"  # Dispute upheld; discarded from tallying


class Verdict(StrEnum):
    """Outcome of tallying a debate."""

    SUPPORTED = "supported"
    REJECTED = "rejected"
    UNDECIDED = "undecided"

# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Custom exception hierarchy for ArborVote.

Every fault raised by the debate core derives from ArborVoteException.
Protocol faults carry their parameters both as attributes and in
``details`` so client tooling can render precise diagnostics, and render
as ``Name(arg, ...)`` when converted to a string.
"""

from __future__ import annotations

from typing import Any


class ArborVoteException(Exception):  # noqa: N818
    """Base exception for all ArborVote errors."""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(ArborVoteException):
    """Exception for validation errors.

    Raised when:
    - Input validation fails
    - Field values are out of range
    """

    def __init__(self, message: str, field: str | None = None, value: Any = None):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class ConfigException(ArborVoteException):
    """Exception for configuration errors.

    Raised when:
    - Configuration values are invalid
    - Required ports were not supplied
    """

    def __init__(self, message: str, missing_vars: list[str] | None = None):
        details = {}
        if missing_vars:
            details["missing_vars"] = missing_vars
        super().__init__(message, details)
        self.missing_vars = missing_vars or []


# ============================================================================
# Protocol faults
# ============================================================================


class ProtocolFault(ArborVoteException):
    """A fault that aborts a debate operation.

    Subclasses pass their parameters in order; the message is rendered as
    ``Name(arg1, arg2)``.
    """

    def __init__(self, *args: Any, **details: Any):
        rendered = ", ".join(str(a) for a in args)
        super().__init__(f"{self.__class__.__name__}({rendered})", details)
        self.params = args


class AlreadyInitialized(ProtocolFault):
    """The system was already bound to its ports."""

    def __init__(self):
        super().__init__()


class NotInitialized(ProtocolFault):
    """An operation was attempted before the system was initialized."""

    def __init__(self):
        super().__init__()


class DebateUninitialized(ProtocolFault):
    """The operation targets a debate id that was never created."""

    def __init__(self, debate_id: int):
        super().__init__(debate_id, debate_id=debate_id)
        self.debate_id = debate_id


class IdentityProofInvalid(ProtocolFault):
    """The identity oracle rejected the caller."""

    def __init__(self):
        super().__init__()


class AlreadyJoined(ProtocolFault):
    """The participant is already a member of the debate."""

    def __init__(self, debate_id: int, participant: str):
        super().__init__(debate_id, participant, debate_id=debate_id, participant=participant)
        self.debate_id = debate_id
        self.participant = participant


class InitialApprovalOutOfBounds(ProtocolFault):
    """Requested approval lies outside [50, 100]; carries the violated bound."""

    def __init__(self, bound: int, actual: int):
        super().__init__(bound, actual, bound=bound, actual=actual)
        self.bound = bound
        self.actual = actual


class RoleRequired(ProtocolFault):
    """The caller does not hold the role the operation requires."""

    def __init__(self, required: Any, actual: Any):
        super().__init__(required, actual, required=str(required), actual=str(actual))
        self.required = required
        self.actual = actual


class PhaseMismatch(ProtocolFault):
    """The debate is not in the phase the operation requires."""

    def __init__(self, expected: Any, actual: Any):
        super().__init__(expected, actual, expected=str(expected), actual=str(actual))
        self.expected = expected
        self.actual = actual


class ArgumentNotFound(ProtocolFault):
    """No argument with this id exists in the debate."""

    def __init__(self, debate_id: int, argument_id: int):
        super().__init__(debate_id, argument_id, debate_id=debate_id, argument_id=argument_id)
        self.debate_id = debate_id
        self.argument_id = argument_id


class InvalidArgumentState(ProtocolFault):
    """The argument is not in a state that permits the operation."""

    def __init__(self, argument_id: int, expected: Any, actual: Any):
        super().__init__(
            argument_id,
            expected,
            actual,
            argument_id=argument_id,
            expected=str(expected),
            actual=str(actual),
        )
        self.argument_id = argument_id
        self.expected = expected
        self.actual = actual


class InsufficientTokens(ProtocolFault):
    """The member's token balance does not cover the requested amount."""

    def __init__(self, required: int, available: int):
        super().__init__(required, available, required=required, available=available)
        self.required = required
        self.available = available


class UnauthorizedCaller(ProtocolFault):
    """The caller is not allowed to invoke this entrypoint."""

    def __init__(self, caller: str):
        super().__init__(caller, caller=caller)
        self.caller = caller


class NotArgumentCreator(ProtocolFault):
    """Only the argument's creator may perform this operation."""

    def __init__(self, argument_id: int, caller: str):
        super().__init__(argument_id, caller, argument_id=argument_id, caller=caller)
        self.argument_id = argument_id
        self.caller = caller


class TokenTransferFailed(ProtocolFault):
    """The stake token refused a transfer."""

    def __init__(self, sender: str, recipient: str, amount: int):
        super().__init__(sender, recipient, amount, sender=sender, recipient=recipient, amount=amount)
        self.sender = sender
        self.recipient = recipient
        self.amount = amount

"""Finalization windows and dispute routing.

Every non-root argument is open to challenge during
``[creation_time, finalization_time)``. There is no background job: an
unchallenged argument turns FINAL the first time it is read or touched
after its window closed.

    CREATED --(window closes)--> FINAL
    CREATED --challenge-------> DISPUTED --rule(upheld)----> INVALID
                                         --rule(rejected)--> FINAL

The functions here only apply effects to the debate record and check their
preconditions before the first write. Talking to the arbitrator and the
stake token is left to the service, which does so after these effects are
in place and calls ``withdraw_challenge`` if either call fails.
"""

from __future__ import annotations

import logging

from ..core.exceptions import InvalidArgumentState
from .enums import ArgumentState
from .models import Argument, Debate, DisputeRecord
from .store import DebateStore

logger = logging.getLogger(__name__)


def effective_state(argument: Argument, now: int) -> ArgumentState:
    """State the argument has at ``now``, counting a closed window as FINAL."""
    if argument.state == ArgumentState.CREATED and now >= argument.finalization_time:
        return ArgumentState.FINAL
    return argument.state


def finalize_if_due(store: DebateStore, debate: Debate, argument: Argument, now: int) -> bool:
    """Turn a CREATED argument FINAL once its window has closed.

    Returns:
        True if the argument changed state
    """
    if argument.state != effective_state(argument, now):
        store.mark_final(debate, argument)
        logger.debug(f"Argument {argument.id} in debate {debate.id} finalized")
        return True
    return False


def finalize_due_arguments(store: DebateStore, debate: Debate, now: int) -> list[int]:
    """Finalize every argument whose window has closed.

    Returns:
        Ids of the arguments that changed state
    """
    return [a.id for a in debate.arguments if finalize_if_due(store, debate, a, now)]


def open_challenge(
    store: DebateStore,
    debate: Debate,
    argument: Argument,
    challenger: str,
    now: int,
    deposit: int = 0,
) -> DisputeRecord:
    """Move an argument from CREATED to DISPUTED and record the challenge.

    Raises:
        InvalidArgumentState: If the argument is not CREATED or its window closed
    """
    state = effective_state(argument, now)
    if state != ArgumentState.CREATED:
        raise InvalidArgumentState(argument.id, ArgumentState.CREATED, state)

    store.mark_disputed(debate, argument)
    record = DisputeRecord(argument_id=argument.id, challenger=challenger, deposit=deposit)
    debate.disputes[argument.id] = record

    logger.info(f"Argument {argument.id} in debate {debate.id} challenged by {challenger}")

    return record


def withdraw_challenge(store: DebateStore, debate: Debate, argument: Argument) -> None:
    """Undo ``open_challenge`` for a challenge that was never registered.

    An argument that was ruled on in the meantime is left as it is.
    """
    if argument.state != ArgumentState.DISPUTED:
        return
    store.reopen(debate, argument)
    debate.disputes.pop(argument.id, None)
    logger.info(f"Challenge of argument {argument.id} in debate {debate.id} withdrawn")


def apply_ruling(store: DebateStore, debate: Debate, argument: Argument, upheld: bool) -> ArgumentState:
    """Resolve a DISPUTED argument.

    Args:
        upheld: True if the challenge succeeded and the argument is discarded

    Returns:
        The argument's new state

    Raises:
        InvalidArgumentState: If the argument is not DISPUTED
    """
    if argument.state != ArgumentState.DISPUTED:
        raise InvalidArgumentState(argument.id, ArgumentState.DISPUTED, argument.state)

    if upheld:
        store.mark_invalid(debate, argument)
    else:
        store.mark_final(debate, argument)

    record = debate.disputes.get(argument.id)
    if record is not None:
        record.ruled = True
        record.upheld = upheld

    logger.info(f"Dispute on argument {argument.id} in debate {debate.id} ruled: {argument.state}")

    return argument.state

"""Arena of debates and their argument trees.

The store exclusively owns every Debate record. Debate ids and argument ids
are sequential list indices; parent/child links are ids. The leaf and
disputed indices are updated on each creation and state transition and are
never rebuilt by traversal.

Leaf set: non-root arguments without live children. An argument stops being
live when it is ruled INVALID; a parent whose last live child is
invalidated becomes a leaf again. The root is never a leaf.
"""

from __future__ import annotations

import copy
import logging

from ..core.exceptions import ArgumentNotFound, DebateUninitialized
from .constants import DebateConstants
from .enums import ArgumentState
from .models import Argument, Debate, Market

logger = logging.getLogger(__name__)


class DebateStore:
    """In-memory owner of all debates, arguments, members, and markets."""

    def __init__(self):
        self._debates: list[Debate] = []

    @property
    def debate_count(self) -> int:
        return len(self._debates)

    # ------------------------------------------------------------------
    # Debates
    # ------------------------------------------------------------------

    def create_debate(self, thesis: str) -> Debate:
        """Append a new debate with the next sequential id."""
        debate = Debate(id=len(self._debates), thesis=thesis)
        self._debates.append(debate)
        return debate

    def get_debate(self, debate_id: int) -> Debate:
        """Get a debate by id.

        Raises:
            DebateUninitialized: If the id was never allocated
        """
        if not 0 <= debate_id < len(self._debates):
            raise DebateUninitialized(debate_id)
        return self._debates[debate_id]

    def restore_debate(self, snapshot: Debate) -> None:
        """Copy a snapshot back into the live record. Used for rollback.

        The live Debate object keeps its identity; its containers are replaced.
        """
        vars(self._debates[snapshot.id]).update(vars(snapshot))

    def truncate(self, count: int) -> None:
        """Drop debates allocated after ``count``. Used for rollback."""
        del self._debates[count:]

    def savepoint(self) -> Savepoint:
        return Savepoint(self)

    # ------------------------------------------------------------------
    # Arguments
    # ------------------------------------------------------------------

    def add_root_argument(self, debate: Debate, creator: str, now: int) -> Argument:
        """Create the root argument: FINAL at once, opposing, with an empty market.

        The root is not inserted into the leaf set.
        """
        root = Argument(
            id=DebateConstants.ROOT_ARGUMENT_ID,
            parent_argument_id=DebateConstants.ROOT_ARGUMENT_ID,
            content_uri=debate.thesis,
            is_supporting=False,
            creator=creator,
            state=ArgumentState.FINAL,
            creation_time=now,
            finalization_time=now,
            market=Market(),
        )
        debate.arguments.append(root)
        return root

    def add_argument(
        self,
        debate: Debate,
        parent_argument_id: int,
        content_uri: str,
        is_supporting: bool,
        creator: str,
        now: int,
        finalization_time: int,
        market: Market,
    ) -> Argument:
        """Attach a new CREATED argument below ``parent_argument_id``.

        The parent must exist; the caller checks its state.
        """
        parent = self.get_argument(debate, parent_argument_id)

        argument = Argument(
            id=len(debate.arguments),
            parent_argument_id=parent.id,
            content_uri=content_uri,
            is_supporting=is_supporting,
            creator=creator,
            state=ArgumentState.CREATED,
            creation_time=now,
            finalization_time=finalization_time,
            market=market,
        )
        debate.arguments.append(argument)

        parent.child_ids.append(argument.id)
        parent.live_child_count += 1
        if not parent.is_root and parent.live_child_count == 1:
            debate.leaf_argument_ids.pop(parent.id, None)
        debate.leaf_argument_ids[argument.id] = None

        logger.debug(f"Argument {argument.id} attached to {parent.id} in debate {debate.id}")

        return argument

    def get_argument(self, debate: Debate, argument_id: int) -> Argument:
        """Get an argument by id.

        Raises:
            ArgumentNotFound: If no such argument exists in the debate
        """
        if not 0 <= argument_id < len(debate.arguments):
            raise ArgumentNotFound(debate.id, argument_id)
        return debate.arguments[argument_id]

    def get_child_ids(self, debate: Debate, argument_id: int) -> list[int]:
        return list(self.get_argument(debate, argument_id).child_ids)

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------

    def mark_final(self, debate: Debate, argument: Argument) -> None:
        argument.state = ArgumentState.FINAL
        debate.disputed_argument_ids.pop(argument.id, None)

    def mark_disputed(self, debate: Debate, argument: Argument) -> None:
        argument.state = ArgumentState.DISPUTED
        debate.disputed_argument_ids[argument.id] = None

    def reopen(self, debate: Debate, argument: Argument) -> None:
        """Return a DISPUTED argument to CREATED."""
        argument.state = ArgumentState.CREATED
        debate.disputed_argument_ids.pop(argument.id, None)

    def mark_invalid(self, debate: Debate, argument: Argument) -> None:
        """Discard an argument: drop it from both indices and release its parent."""
        argument.state = ArgumentState.INVALID
        debate.disputed_argument_ids.pop(argument.id, None)
        debate.leaf_argument_ids.pop(argument.id, None)

        parent = debate.arguments[argument.parent_argument_id]
        parent.live_child_count -= 1
        if (
            not parent.is_root
            and parent.live_child_count == 0
            and parent.state != ArgumentState.INVALID
        ):
            debate.leaf_argument_ids[parent.id] = None

    # ------------------------------------------------------------------
    # Indices
    # ------------------------------------------------------------------

    def leaf_argument_ids(self, debate: Debate) -> list[int]:
        return list(debate.leaf_argument_ids)

    def disputed_argument_ids(self, debate: Debate) -> list[int]:
        return list(debate.disputed_argument_ids)


class Savepoint:
    """Rollback point for a group of operations.

    Debates are captured lazily, the first time an operation in the group
    targets them. Rolling back restores every captured debate in place and
    drops debates allocated after the savepoint was taken.
    """

    def __init__(self, store: DebateStore):
        self._store = store
        self.debate_count = store.debate_count
        self._snapshots: dict[int, Debate] = {}

    @property
    def captured_ids(self) -> list[int]:
        return list(self._snapshots)

    def capture(self, debate_id: int) -> None:
        """Copy a debate before its first change inside the group.

        Raises:
            DebateUninitialized: If the id was never allocated
        """
        debate = self._store.get_debate(debate_id)
        if debate_id in self._snapshots or debate_id >= self.debate_count:
            return
        self._snapshots[debate_id] = copy.deepcopy(debate)

    def rollback(self) -> None:
        self._store.truncate(self.debate_count)
        for snapshot in self._snapshots.values():
            self._store.restore_debate(snapshot)
        logger.debug(f"Rolled back {len(self._snapshots)} debates to {self.debate_count} allocated")

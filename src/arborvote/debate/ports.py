"""External capabilities consumed by the debate core.

The core depends on these protocols rather than concrete implementations.
The calling application binds its adapters once, via
``ArborVote.initialize()``.
"""

from __future__ import annotations

import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class IdentityOracle(Protocol):
    """Proof-of-personhood registry."""

    def is_verified(self, participant_id: str) -> bool:
        """Whether the participant has a valid identity proof."""
        ...


@runtime_checkable
class StakeToken(Protocol):
    """Fungible token used for deposits. Its accounting is external."""

    def transfer_from(self, sender: str, recipient: str, amount: int) -> bool:
        """Move ``amount`` from ``sender`` to ``recipient`` using an allowance."""
        ...

    def balance_of(self, owner: str) -> int:
        """Token balance of ``owner``."""
        ...


@runtime_checkable
class Arbitrator(Protocol):
    """Dispute-arbitration oracle.

    Receives challenges and later calls back
    ``ArborVote.rule_on_dispute(arbitrator_id, ...)`` with its ruling.
    """

    @property
    def arbitrator_id(self) -> str:
        """Caller identity the arbitrator uses when delivering rulings."""
        ...

    def create_dispute(self, debate_id: int, argument_id: int, challenger: str) -> int:
        """Open a dispute and return the arbitrator's dispute id."""
        ...


@runtime_checkable
class Clock(Protocol):
    """Source of logical time. Must be monotonically non-decreasing."""

    def now(self) -> int:
        ...


class SystemClock:
    """Clock backed by integer epoch seconds."""

    def now(self) -> int:
        return int(time.time())

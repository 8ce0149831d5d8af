"""Debate protocol for ArborVote.

This package implements structured argumentation over a thesis:
- Debates advance through Editing -> Voting -> Finished on a logical clock
- Participants join through an identity oracle and receive vote tokens
- Arguments form a pro/con tree; each carries a bonding-curve market
- Arguments may be challenged during their finalization window and are
  resolved by an external arbitrator
- A bottom-up tally turns the markets into a verdict on the thesis

Submodules:
- constants: Protocol constants
- enums: Phase, role, argument state, and verdict enumerations
- models: Data models for debates, arguments, members, and markets
- ports: Protocols for the external capabilities
- market: Market initialization and trading
- store: Arena owning all debates and argument trees
- phases: Phase clock
- membership: Identity-gated membership
- disputes: Finalization windows and dispute rulings
- tally: Aggregation of markets into a verdict
- validators: Precondition checks
- service: ArborVote class exposing the operations
"""

from .constants import DebateConstants

from .enums import (
    Phase,
    Role,
    ArgumentState,
    Verdict,
)

from .models import (
    Market,
    UserShare,
    PhaseData,
    Member,
    Argument,
    DisputeRecord,
    Debate,
    DebateResult,
)

from .ports import (
    IdentityOracle,
    StakeToken,
    Arbitrator,
    Clock,
    SystemClock,
)

from .market import (
    TradeQuote,
    init_market,
    approval,
    quote_buy,
    buy,
)

from .store import DebateStore

from .tally import (
    TallyPolicy,
    tally_debate,
)

from .service import ArborVote

__all__ = [
    # Constants
    "DebateConstants",
    # Enums
    "Phase",
    "Role",
    "ArgumentState",
    "Verdict",
    # Models
    "Market",
    "UserShare",
    "PhaseData",
    "Member",
    "Argument",
    "DisputeRecord",
    "Debate",
    "DebateResult",
    # Ports
    "IdentityOracle",
    "StakeToken",
    "Arbitrator",
    "Clock",
    "SystemClock",
    # Market
    "TradeQuote",
    "init_market",
    "approval",
    "quote_buy",
    "buy",
    # Store
    "DebateStore",
    # Tally
    "TallyPolicy",
    "tally_debate",
    # Service
    "ArborVote",
]

# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""ArborVote - structured argumentation with market-priced credibility.

A participant proposes a thesis; participants attach pro and con arguments
as a tree; every argument carries a bonding-curve market whose reserves
express how credible the crowd finds it. A debate runs through a time-boxed
lifecycle and ends with a tally that folds the markets up the tree into a
verdict on the thesis.

Architecture:
  ArborVote (service facade, atomic operations)
    → DebateStore (arena of debates, argument trees, leaf/disputed indices)
    → Market (per-argument reserves and trading)
    → Phases, Membership, Disputes, Tally

External capabilities (identity oracle, stake token, arbitrator, clock) are
protocols bound once through ``ArborVote.initialize()``. Every operation is
deterministic given the same inputs and logical time.
"""

__version__ = "0.1.0"

from . import (
    core as core,
    debate as debate,
)
from .debate import ArborVote

__all__ = ["ArborVote", "__version__"]

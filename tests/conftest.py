"""Global test fixtures for the ArborVote test suite."""

from __future__ import annotations

import os

import pytest

from arborvote.core.config import CoreSettings, clear_config_cache
from arborvote.debate import ArborVote

START_TIME = 1_700_000_000
TIME_UNIT = 60


# ============================================================================
# Fake Capabilities
# ============================================================================


class ManualClock:
    """Logical clock that only moves when a test advances it."""

    def __init__(self, start: int = START_TIME):
        self.time = start

    def now(self) -> int:
        return self.time

    def advance(self, seconds: int) -> None:
        self.time += seconds

    def advance_to(self, timestamp: int) -> None:
        self.time = max(self.time, timestamp)


class FakeIdentityOracle:
    """Identity oracle verifying a fixed set of participants."""

    def __init__(self, verified: set[str] | None = None):
        self.verified = set(verified or ())
        self.queries: list[str] = []

    def is_verified(self, participant_id: str) -> bool:
        self.queries.append(participant_id)
        return participant_id in self.verified


class FakeStakeToken:
    """Token ledger with balances; transfers fail when the sender is short."""

    def __init__(self, balances: dict[str, int] | None = None):
        self.balances = dict(balances or {})
        self.transfers: list[tuple[str, str, int]] = []

    def transfer_from(self, sender: str, recipient: str, amount: int) -> bool:
        if self.balances.get(sender, 0) < amount:
            return False
        self.balances[sender] -= amount
        self.balances[recipient] = self.balances.get(recipient, 0) + amount
        self.transfers.append((sender, recipient, amount))
        return True

    def balance_of(self, owner: str) -> int:
        return self.balances.get(owner, 0)


class FakeArbitrator:
    """Arbitrator that records disputes and hands out sequential ids."""

    def __init__(self, arbitrator_id: str = "arbitrator"):
        self._arbitrator_id = arbitrator_id
        self.disputes: list[tuple[int, int, str]] = []
        self.on_create = None

    @property
    def arbitrator_id(self) -> str:
        return self._arbitrator_id

    def create_dispute(self, debate_id: int, argument_id: int, challenger: str) -> int:
        self.disputes.append((debate_id, argument_id, challenger))
        if self.on_create is not None:
            self.on_create(debate_id, argument_id, challenger)
        return len(self.disputes) - 1


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture
def clean_env(monkeypatch):
    """Remove all ARBORVOTE_ environment variables."""
    for key in list(os.environ.keys()):
        if key.startswith("ARBORVOTE_"):
            monkeypatch.delenv(key, raising=False)
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def settings(clean_env):
    """Default settings, independent of the environment."""
    return CoreSettings()


# ============================================================================
# System Fixtures
# ============================================================================


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def oracle():
    return FakeIdentityOracle({"alice", "bob", "carol"})


@pytest.fixture
def token():
    return FakeStakeToken({"alice": 1000, "bob": 1000, "carol": 5})


@pytest.fixture
def arbitrator():
    return FakeArbitrator()


@pytest.fixture
def make_system(settings, oracle, token, arbitrator, clock):
    """Factory for an initialized system, optionally with settings overrides."""

    def _make(**overrides) -> ArborVote:
        system = ArborVote(settings.model_copy(update=overrides))
        system.initialize(oracle, token, arbitrator, clock)
        return system

    return _make


@pytest.fixture
def system(make_system):
    """Initialized system with default settings."""
    return make_system()


@pytest.fixture
def debate_id(system):
    """A debate created at START_TIME with alice and bob joined."""
    debate_id = system.create_debate("alice", "ipfs://thesis", TIME_UNIT)
    system.join("alice", debate_id)
    system.join("bob", debate_id)
    return debate_id

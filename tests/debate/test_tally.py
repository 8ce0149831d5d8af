"""Tests for arborvote.debate.tally and the debate_result operation."""

from __future__ import annotations

import pytest

from arborvote.core.exceptions import PhaseMismatch, ValidationException
from arborvote.debate.enums import ArgumentState, Phase, Verdict
from arborvote.debate.market import init_market
from arborvote.debate.store import DebateStore
from arborvote.debate.tally import TallyPolicy, tally_debate

NOW = 1_700_000_000
TIME_UNIT = 60


@pytest.fixture
def store():
    return DebateStore()


@pytest.fixture
def tree(store):
    """Thesis with a pro (80%) that has a con (50%), and a con (60%).

    Ids: 1 = pro thesis, 2 = con thesis, 3 = con of 1.
    """
    debate = store.create_debate("ipfs://thesis")
    store.add_root_argument(debate, "alice", NOW)
    for parent, supporting, approval in [(0, True, 80), (0, False, 60), (1, False, 50)]:
        argument = store.add_argument(
            debate,
            parent_argument_id=parent,
            content_uri="ipfs://a",
            is_supporting=supporting,
            creator="alice",
            now=NOW,
            finalization_time=NOW + TIME_UNIT,
            market=init_market(approval),
        )
        store.mark_final(debate, argument)
    return debate


class TestTallyPolicy:
    @pytest.mark.parametrize("weight", [-1, 101])
    def test_weight_bounds(self, weight):
        with pytest.raises(ValidationException):
            TallyPolicy(child_weight_percent=weight)

    def test_default(self):
        assert TallyPolicy().child_weight_percent == 50


class TestTallyDebate:
    def test_scores_and_verdict(self, tree):
        result = tally_debate(tree, TallyPolicy(child_weight_percent=50))

        assert result.argument_scores == {3: 500_000, 2: 600_000, 1: 550_000}
        assert tree.arguments[1].childs_vote == -500_000
        assert result.root_childs_vote == 550_000 - 600_000
        assert result.verdict == Verdict.REJECTED
        assert result.excluded_argument_ids == []

    def test_children_ignored_at_zero_weight(self, tree):
        result = tally_debate(tree, TallyPolicy(child_weight_percent=0))

        assert result.argument_scores[1] == 800_000
        assert result.root_childs_vote == 200_000
        assert result.verdict == Verdict.SUPPORTED

    def test_idempotent(self, tree):
        first = tally_debate(tree)
        second = tally_debate(tree)
        assert first == second
        assert [a.childs_vote for a in tree.arguments] == [-50_000, -500_000, 0, 0]

    def test_invalid_subtree_excluded(self, store, tree):
        store.mark_invalid(tree, tree.arguments[1])
        result = tally_debate(tree)

        assert result.excluded_argument_ids == [1, 3]
        assert result.root_childs_vote == -600_000
        assert result.verdict == Verdict.REJECTED

    def test_disputed_excluded(self, store, tree):
        store.mark_disputed(tree, tree.arguments[2])
        result = tally_debate(tree)

        assert result.excluded_argument_ids == [2]
        assert result.verdict == Verdict.SUPPORTED

    def test_support_and_opposition_round_alike(self, store):
        """Equal pro and con children shift their parents by the same amount."""
        debate = store.create_debate("ipfs://thesis")
        store.add_root_argument(debate, "alice", NOW)

        def add(parent, supporting, approval):
            argument = store.add_argument(
                debate, parent, "ipfs://a", supporting, "alice", NOW, NOW + TIME_UNIT, init_market(approval)
            )
            store.mark_final(debate, argument)
            return argument.id

        supported = add(0, True, 50)
        opposed = add(0, True, 50)
        for parent, supporting in [(supported, True), (opposed, False)]:
            for approval in (50, 50, 60):
                add(parent, supporting, approval)

        scores = tally_debate(debate, TallyPolicy(child_weight_percent=50)).argument_scores

        # 1_600_000 * 50 / 100 / 3 = 266_666.67
        assert scores[supported] == 500_000 + 266_666
        assert scores[opposed] == 500_000 - 266_666

    def test_empty_tree_is_undecided(self, store):
        debate = store.create_debate("ipfs://thesis")
        store.add_root_argument(debate, "alice", NOW)
        result = tally_debate(debate)

        assert result.verdict == Verdict.UNDECIDED
        assert result.argument_scores == {}

    def test_scores_are_clamped(self, store):
        debate = store.create_debate("ipfs://thesis")
        store.add_root_argument(debate, "alice", NOW)
        ids = []
        for parent in (0, 1):
            argument = store.add_argument(
                debate, parent, "ipfs://a", True, "alice", NOW, NOW + TIME_UNIT, init_market(100)
            )
            store.mark_final(debate, argument)
            ids.append(argument.id)

        result = tally_debate(debate, TallyPolicy(child_weight_percent=100))
        assert result.argument_scores[ids[0]] == 1_000_000


class TestDebateResultOperation:
    def test_requires_finished(self, system, debate_id, clock):
        clock.advance(8 * TIME_UNIT)
        with pytest.raises(PhaseMismatch) as exc_info:
            system.debate_result(debate_id)
        assert exc_info.value.expected == Phase.FINISHED
        assert exc_info.value.actual == Phase.VOTING

    def test_finalizes_then_tallies(self, system, debate_id, clock):
        pro = system.add_argument("alice", debate_id, 0, "ipfs://pro", True, 90)
        system.add_argument("bob", debate_id, 0, "ipfs://con", False, 50)
        clock.advance(10 * TIME_UNIT)

        result = system.debate_result(debate_id)

        assert result.verdict == Verdict.SUPPORTED
        assert result.root_childs_vote == 900_000 - 500_000
        assert system.get_argument(debate_id, pro).state == ArgumentState.FINAL

    def test_re_callable(self, system, debate_id, clock):
        system.add_argument("alice", debate_id, 0, "ipfs://pro", True, 70)
        clock.advance(10 * TIME_UNIT)

        assert system.debate_result(debate_id) == system.debate_result(debate_id)

    def test_uses_configured_weight(self, make_system, clock):
        system = make_system(tally_child_weight_percent=0)
        assert system.tally_policy.child_weight_percent == 0

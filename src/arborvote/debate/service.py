"""ArborVote service: the externally invoked debate operations.

Contains the ArborVote class, the single entrypoint through which debates,
members, arguments, markets, disputes, and tallies are created and changed.

Every operation runs atomically. Operations that make no external calls
check all their preconditions before their first write, so a fault leaves
nothing behind. Calls to external capabilities (identity oracle, stake
token, arbitrator) happen only after the operation's internal effects are
written, so a reentrant call from a capability observes consistent state.
The outermost operation that makes such calls takes a savepoint; if it
fails, every debate changed under it, including by reentrant operations,
is restored and debates allocated meanwhile are dropped.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from ..core.config import CoreSettings, get_config
from ..core.exceptions import (
    AlreadyInitialized,
    ConfigException,
    InvalidArgumentState,
    NotArgumentCreator,
    NotInitialized,
    TokenTransferFailed,
    UnauthorizedCaller,
    ValidationException,
)
from ..core.logging import operation_context, operation_logger
from . import disputes, market, membership
from .constants import DebateConstants
from .enums import ArgumentState, Phase, Role
from .models import Argument, Debate, DebateResult, Member, PhaseData, UserShare
from .phases import advance_phase, init_phase_data, require_phase
from .ports import Arbitrator, Clock, IdentityOracle, StakeToken, SystemClock
from .store import DebateStore, Savepoint
from .tally import TallyPolicy, tally_debate
from .validators import validate_balance, validate_role

logger = logging.getLogger(__name__)


class ArborVote:
    """Structured-argumentation service.

    Construct, then bind the external capabilities once with
    ``initialize()``. All state lives in memory, owned by a DebateStore.
    """

    def __init__(self, settings: CoreSettings | None = None):
        self.settings = settings or get_config()
        self.tally_policy = TallyPolicy(child_weight_percent=self.settings.tally_child_weight_percent)

        self._store = DebateStore()
        self._identity_oracle: IdentityOracle | None = None
        self._token: StakeToken | None = None
        self._arbitrator: Arbitrator | None = None
        self._clock: Clock | None = None
        self._initialized = False
        self._savepoint: Savepoint | None = None

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    def initialize(
        self,
        identity_oracle: IdentityOracle,
        token: StakeToken,
        arbitrator: Arbitrator,
        clock: Clock | None = None,
    ) -> None:
        """Bind the external capabilities. Allowed exactly once.

        Raises:
            AlreadyInitialized: On a second call
            ConfigException: If a capability does not implement its protocol
        """
        if self._initialized:
            raise AlreadyInitialized()

        clock = clock or SystemClock()
        ports = {
            "identity_oracle": (identity_oracle, IdentityOracle),
            "token": (token, StakeToken),
            "arbitrator": (arbitrator, Arbitrator),
            "clock": (clock, Clock),
        }
        invalid = [name for name, (port, protocol) in ports.items() if not isinstance(port, protocol)]
        if invalid:
            raise ConfigException(f"Capabilities do not implement their protocol: {', '.join(invalid)}", invalid)

        self._identity_oracle = identity_oracle
        self._token = token
        self._arbitrator = arbitrator
        self._clock = clock
        self._initialized = True

        logger.info("ArborVote initialized")

    @property
    def initialized(self) -> bool:
        return self._initialized

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise NotInitialized()

    def _now(self) -> int:
        assert self._clock is not None
        return self._clock.now()

    @contextmanager
    def _operation(
        self,
        name: str,
        debate_id: int | None = None,
        calls_out: bool = False,
        **arguments: Any,
    ) -> Generator[None, None, None]:
        """Run one operation atomically.

        Args:
            name: Operation name, for logging
            debate_id: Debate the operation may change; None when it allocates one
            calls_out: True if the operation calls an external capability
            arguments: Operation parameters, for logging
        """
        with operation_context(name, debate_id):
            operation_logger.log_call(name, {"debate_id": debate_id, **arguments})
            savepoint = None
            try:
                self._require_initialized()
                if calls_out and self._savepoint is None:
                    savepoint = self._savepoint = self._store.savepoint()
                # Reentered from an external call: capture before the first write
                if self._savepoint is not None and debate_id is not None:
                    self._savepoint.capture(debate_id)
                yield
            except Exception as e:
                if savepoint is not None:
                    savepoint.rollback()
                operation_logger.log_fault(name, e)
                raise
            finally:
                if savepoint is not None:
                    self._savepoint = None

    def _pull_deposit(self, sender: str, amount: int) -> None:
        assert self._token is not None
        recipient = self.settings.custody_account
        if not self._token.transfer_from(sender, recipient, amount):
            raise TokenTransferFailed(sender, recipient, amount)

    def _get_debate(self, debate_id: int) -> Debate:
        self._require_initialized()
        return self._store.get_debate(debate_id)

    def _get_traded_argument(self, debate: Debate, argument_id: int) -> Argument:
        argument = self._store.get_argument(debate, argument_id)
        if argument.is_root:
            raise ValidationException("The thesis has no market", "argument_id", argument_id)
        return argument

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def create_debate(self, caller: str, thesis: str, time_unit: int) -> int:
        """Open a new debate in the Editing phase.

        Args:
            caller: Identity of the creator (recorded on the root argument)
            thesis: Content reference of the thesis
            time_unit: Duration unit; editing lasts 7 units, voting ends after 10

        Returns:
            The debate id, sequential from 0

        Raises:
            ValidationException: If time_unit is not positive
        """
        with self._operation("create_debate", None, caller=caller, thesis=thesis, time_unit=time_unit):
            now = self._now()
            phase_data = init_phase_data(now, time_unit)
            debate = self._store.create_debate(thesis)
            debate.phase_data = phase_data
            self._store.add_root_argument(debate, caller, now)

        logger.info(f"Debate {debate.id} created by {caller}, voting ends at {phase_data.voting_end_time}")

        return debate.id

    def advance_phase(self, debate_id: int) -> Phase:
        """Advance the debate to the phase justified by the current time.

        Idempotent; calling before a deadline changes nothing.

        Raises:
            DebateUninitialized: If the debate was never created
        """
        with self._operation("advance_phase", debate_id):
            return advance_phase(self._store.get_debate(debate_id), self._now())

    def get_phase(self, debate_id: int) -> PhaseData:
        """Stored phase data of a debate, without advancing it."""
        return copy.deepcopy(self._get_debate(debate_id).phase_data)

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    def join(self, caller: str, debate_id: int) -> Member:
        """Join a debate as a participant.

        Raises:
            DebateUninitialized: If the debate was never created
            IdentityProofInvalid: If the identity oracle rejects the caller
            AlreadyJoined: If the caller is already a member
            TokenTransferFailed: If the join deposit could not be collected
        """
        with self._operation("join", debate_id, calls_out=True, caller=caller):
            debate = self._store.get_debate(debate_id)
            assert self._identity_oracle is not None
            member = membership.join(debate, caller, self._identity_oracle)

            if self.settings.join_deposit > 0:
                try:
                    self._pull_deposit(caller, self.settings.join_deposit)
                except Exception:
                    membership.leave(debate, caller)
                    raise

        return copy.deepcopy(member)

    def get_member(self, debate_id: int, participant: str) -> Member:
        return copy.deepcopy(membership.get_member(self._get_debate(debate_id), participant))

    # ------------------------------------------------------------------
    # Arguments
    # ------------------------------------------------------------------

    def add_argument(
        self,
        caller: str,
        debate_id: int,
        parent_argument_id: int,
        content_uri: str,
        is_supporting: bool,
        initial_approval: int,
    ) -> int:
        """Attach an argument to the tree during the Editing phase.

        Args:
            caller: Participant adding the argument
            debate_id: Target debate
            parent_argument_id: Argument this one supports or opposes (0 = thesis)
            content_uri: Content reference
            is_supporting: True for pro, False for con
            initial_approval: Approval percentage in [50, 100] seeding the market

        Returns:
            The new argument id, sequential from 1

        Raises:
            PhaseMismatch: If the debate is not in Editing
            RoleRequired: If the caller is not a participant
            InitialApprovalOutOfBounds: If initial_approval is outside [50, 100]
            ArgumentNotFound: If the parent does not exist
            InvalidArgumentState: If the parent was ruled invalid
        """
        with self._operation(
            "add_argument",
            debate_id,
            caller=caller,
            parent_argument_id=parent_argument_id,
            content_uri=content_uri,
            is_supporting=is_supporting,
            initial_approval=initial_approval,
        ):
            debate = self._store.get_debate(debate_id)
            now = self._now()
            require_phase(debate, now, Phase.EDITING)
            validate_role(membership.get_member(debate, caller), Role.PARTICIPANT)

            argument_market = market.init_market(initial_approval)

            parent = self._store.get_argument(debate, parent_argument_id)
            if parent.state == ArgumentState.INVALID:
                raise InvalidArgumentState(parent.id, ArgumentState.FINAL, parent.state)

            advance_phase(debate, now)
            disputes.finalize_if_due(self._store, debate, parent, now)
            finalization_time = now + DebateConstants.FINALIZATION_TIME_UNITS * debate.phase_data.time_unit
            argument = self._store.add_argument(
                debate,
                parent_argument_id=parent.id,
                content_uri=content_uri,
                is_supporting=is_supporting,
                creator=caller,
                now=now,
                finalization_time=finalization_time,
                market=argument_market,
            )

        logger.info(
            f"Argument {argument.id} added to debate {debate_id} by {caller} "
            f"({'pro' if is_supporting else 'con'} {parent_argument_id}, approval {initial_approval})"
        )

        return argument.id

    def get_argument(self, debate_id: int, argument_id: int) -> Argument:
        """Get an argument, finalizing it first if its window has closed."""
        with self._operation("get_argument", debate_id, argument_id=argument_id):
            debate = self._store.get_debate(debate_id)
            argument = self._store.get_argument(debate, argument_id)
            disputes.finalize_if_due(self._store, debate, argument, self._now())
            return copy.deepcopy(argument)

    def get_leaf_argument_ids(self, debate_id: int) -> list[int]:
        return self._store.leaf_argument_ids(self._get_debate(debate_id))

    def get_disputed_argument_ids(self, debate_id: int) -> list[int]:
        return self._store.disputed_argument_ids(self._get_debate(debate_id))

    def get_child_argument_ids(self, debate_id: int, argument_id: int) -> list[int]:
        return self._store.get_child_ids(self._get_debate(debate_id), argument_id)

    def get_debate(self, debate_id: int) -> Debate:
        return copy.deepcopy(self._get_debate(debate_id))

    @property
    def debate_count(self) -> int:
        return self._store.debate_count

    # ------------------------------------------------------------------
    # Disputes
    # ------------------------------------------------------------------

    def finalize_arguments(self, debate_id: int) -> list[int]:
        """Finalize every argument whose window has closed.

        Returns:
            Ids of the arguments that became FINAL
        """
        with self._operation("finalize_arguments", debate_id):
            debate = self._store.get_debate(debate_id)
            return disputes.finalize_due_arguments(self._store, debate, self._now())

    def challenge(self, caller: str, debate_id: int, argument_id: int) -> int:
        """Dispute an argument inside its finalization window.

        The argument turns DISPUTED before the deposit is collected and the
        arbitrator is contacted.

        Returns:
            The arbitrator's dispute id

        Raises:
            RoleRequired: If the caller is not a participant
            InvalidArgumentState: If the argument is not CREATED or its window closed
            TokenTransferFailed: If the dispute deposit could not be collected
        """
        with self._operation("challenge", debate_id, calls_out=True, caller=caller, argument_id=argument_id):
            debate = self._store.get_debate(debate_id)
            now = self._now()
            validate_role(membership.get_member(debate, caller), Role.PARTICIPANT)

            argument = self._store.get_argument(debate, argument_id)
            deposit = self.settings.dispute_deposit
            disputes.open_challenge(self._store, debate, argument, caller, now, deposit)
            advance_phase(debate, now)

            try:
                if deposit > 0:
                    self._pull_deposit(caller, deposit)
                assert self._arbitrator is not None
                dispute_id = self._arbitrator.create_dispute(debate_id, argument_id, caller)
            except Exception:
                disputes.withdraw_challenge(self._store, debate, argument)
                raise

            debate.disputes[argument_id].dispute_id = dispute_id

        return dispute_id

    def rule_on_dispute(self, caller: str, debate_id: int, argument_id: int, upheld: bool) -> ArgumentState:
        """Deliver the arbitrator's ruling on a disputed argument.

        Args:
            caller: Must be the bound arbitrator's id
            upheld: True if the challenge succeeded (argument becomes INVALID),
                False if it was rejected (argument becomes FINAL)

        Raises:
            UnauthorizedCaller: If the caller is not the arbitrator
            InvalidArgumentState: If the argument is not DISPUTED
        """
        with self._operation("rule_on_dispute", debate_id, caller=caller, argument_id=argument_id, upheld=upheld):
            assert self._arbitrator is not None
            if caller != self._arbitrator.arbitrator_id:
                raise UnauthorizedCaller(caller)

            debate = self._store.get_debate(debate_id)
            argument = self._store.get_argument(debate, argument_id)
            return disputes.apply_ruling(self._store, debate, argument, upheld)

    # ------------------------------------------------------------------
    # Markets
    # ------------------------------------------------------------------

    def invest(self, caller: str, debate_id: int, argument_id: int, amount: int, pro: bool) -> int:
        """Buy pro or con shares of a final argument during the Voting phase.

        Returns:
            Number of shares received

        Raises:
            PhaseMismatch: If the debate is not in Voting
            RoleRequired: If the caller is not a participant
            InvalidArgumentState: If the argument is not FINAL
            InsufficientTokens: If the caller's balance does not cover amount
            ValidationException: If amount is not positive or the argument is the root
        """
        with self._operation("invest", debate_id, caller=caller, argument_id=argument_id, amount=amount, pro=pro):
            debate = self._store.get_debate(debate_id)
            now = self._now()
            require_phase(debate, now, Phase.VOTING)
            member = membership.get_member(debate, caller)
            validate_role(member, Role.PARTICIPANT)

            argument = self._get_traded_argument(debate, argument_id)
            state = disputes.effective_state(argument, now)
            if state != ArgumentState.FINAL:
                raise InvalidArgumentState(argument_id, ArgumentState.FINAL, state)

            quote = market.quote_buy(argument.market, amount, pro)
            validate_balance(member, amount)

            advance_phase(debate, now)
            disputes.finalize_if_due(self._store, debate, argument, now)
            membership.debit(member, amount)
            market.buy(argument.market, amount, pro)

            share = debate.shares.setdefault((argument_id, caller), UserShare())
            if pro:
                share.pro += quote.shares
            else:
                share.con += quote.shares

        logger.info(
            f"{caller} bought {quote.shares} {'pro' if pro else 'con'} shares of argument "
            f"{argument_id} in debate {debate_id} for {amount} (fee {quote.fee})"
        )

        return quote.shares

    def quote_investment(self, debate_id: int, argument_id: int, amount: int, pro: bool) -> market.TradeQuote:
        """Price an investment without executing it.

        Raises:
            ValidationException: If amount is not positive or the argument is the root
        """
        argument = self._get_traded_argument(self._get_debate(debate_id), argument_id)
        return market.quote_buy(argument.market, amount, pro)

    def get_user_share(self, debate_id: int, argument_id: int, participant: str) -> UserShare:
        debate = self._get_debate(debate_id)
        self._store.get_argument(debate, argument_id)
        return copy.deepcopy(debate.shares.get((argument_id, participant), UserShare()))

    def collect_fees(self, caller: str, debate_id: int, argument_id: int) -> int:
        """Pay an argument's accumulated trading fees to its creator once the debate finished.

        Returns:
            Amount credited to the creator's balance

        Raises:
            PhaseMismatch: If the debate is not Finished
            NotArgumentCreator: If the caller did not create the argument
        """
        with self._operation("collect_fees", debate_id, caller=caller, argument_id=argument_id):
            debate = self._store.get_debate(debate_id)
            now = self._now()
            require_phase(debate, now, Phase.FINISHED)

            argument = self._store.get_argument(debate, argument_id)
            if argument.creator != caller:
                raise NotArgumentCreator(argument_id, caller)
            member = debate.members.get(caller)
            if member is None:
                raise NotArgumentCreator(argument_id, caller)

            advance_phase(debate, now)
            fees = market.collect_fees(argument.market)
            membership.credit(member, fees)

        return fees

    # ------------------------------------------------------------------
    # Tally
    # ------------------------------------------------------------------

    def debate_result(self, debate_id: int) -> DebateResult:
        """Tally a finished debate.

        Finalizes every argument whose window closed, then aggregates the
        tree bottom-up. Re-callable; the same tree always yields the same result.

        Raises:
            PhaseMismatch: If the debate is not Finished
        """
        with self._operation("debate_result", debate_id):
            debate = self._store.get_debate(debate_id)
            now = self._now()
            require_phase(debate, now, Phase.FINISHED)
            advance_phase(debate, now)
            disputes.finalize_due_arguments(self._store, debate, now)
            return tally_debate(debate, self.tally_policy)

"""Ledger events.

Every committed mutation of the ledger is recorded as an event. Events are
immutable records of what happened; replaying a journal of events on a
genesis state reproduces the ledger exactly.

Each event's apply() checks every precondition against the state before it
mutates anything, so an event that raises leaves the state untouched. Only
events whose apply() succeeded are appended to the journal.

Example event timeline:
    1. InvestorRegistered: Owner registers Bob (rate 95)
    2. ManagerRegistered: Owner registers Charlie (rate 20)
    3. FundsDeposited: Owner deposits 10, Bob deposits 20
    4. ProposalSubmitted: Charlie asks for 10
    5. ProposalApproved: Bob votes, proposal secures
    6. RevenueReceived: Charlie pays 50 back
    7. RevenueDistributed: Owner splits the 50
"""

from abc import ABC, abstractmethod
from typing import Literal, TYPE_CHECKING

from pydantic import ConfigDict, Field

from ..errors import (
    AlreadySecured,
    AlreadyVoted,
    DuplicateIdentity,
    InsufficientFreeFunds,
    NothingToDistribute,
    NotSecured,
    Unauthorized,
)
from .base import DomainModel, AccountId, PositiveAmount, ProfitRate, ProposalIndex
from .accounts import Investor, Manager
from .distribution import split_revenue
from .proposals import Proposal

# Avoid circular import for type hints
if TYPE_CHECKING:
    from .state import LedgerState


# =============================================================================
# Event Base Class
# =============================================================================

class LedgerEvent(DomainModel, ABC):
    """Base class for all ledger events.

    Event principles:
        1. Events are append-only (never modified or deleted)
        2. Events are ordered by sequence number
        3. State is computed by replaying events in order
        4. caller is the authenticated identity that issued the operation
    """

    model_config = ConfigDict(frozen=True)

    sequence: int = Field(
        ge=0,
        description="Position of this event in the ledger journal"
    )

    # Not constrained: unknown or malformed callers are rejected by role checks
    caller: str = Field(
        description="Authenticated identity that issued the operation"
    )

    @abstractmethod
    def apply(self, state: 'LedgerState') -> None:
        """Validate against state, then mutate it.

        Args:
            state: The LedgerState to mutate

        Raises:
            LedgerError: If a precondition fails (state is left unchanged)
        """
        pass


# =============================================================================
# Registration Events
# =============================================================================

class InvestorRegistered(LedgerEvent):
    """Owner registers a new investor with zero balances."""

    event_type: Literal["investor_registered"] = "investor_registered"

    account_id: AccountId
    nickname: str
    profit_rate: ProfitRate

    def apply(self, state: 'LedgerState') -> None:
        state.require_owner(self.caller)
        if state.is_investor(self.account_id):
            raise DuplicateIdentity(f"{self.account_id} is already an investor")

        state.investors[self.account_id] = Investor(
            account_id=self.account_id,
            nickname=self.nickname,
            profit_rate=self.profit_rate,
        )


class ManagerRegistered(LedgerEvent):
    """Owner registers a new manager with zero balances."""

    event_type: Literal["manager_registered"] = "manager_registered"

    account_id: AccountId
    nickname: str
    profit_rate: ProfitRate

    def apply(self, state: 'LedgerState') -> None:
        state.require_owner(self.caller)
        if state.is_manager(self.account_id):
            raise DuplicateIdentity(f"{self.account_id} is already a manager")

        state.managers[self.account_id] = Manager(
            account_id=self.account_id,
            nickname=self.nickname,
            profit_rate=self.profit_rate,
        )


# =============================================================================
# Funds Deposited Event
# =============================================================================

class FundsDeposited(LedgerEvent):
    """An investor (the owner included) adds capital to the pool.

    When reevaluate_pending is set, every unsecured proposal is re-checked in
    index order after the deposit and secured if it now qualifies. The flag
    is stored on the event so replay does not depend on configuration.
    """

    event_type: Literal["funds_deposited"] = "funds_deposited"

    amount: PositiveAmount
    reevaluate_pending: bool = False

    def apply(self, state: 'LedgerState') -> None:
        investor = state.require_investor(self.caller)

        investor.funds_invested += self.amount
        state.total_funds += self.amount
        state.free_funds += self.amount

        if self.reevaluate_pending:
            for proposal in state.pending_proposals():
                if state.can_secure(proposal):
                    state.secure(proposal)


# =============================================================================
# Proposal Events
# =============================================================================

class ProposalSubmitted(LedgerEvent):
    """A manager asks for pool capital.

    Free funds are not checked here; availability is checked when the
    proposal tries to secure.
    """

    event_type: Literal["proposal_submitted"] = "proposal_submitted"

    proposal_index: ProposalIndex
    description: str
    required_funds: PositiveAmount

    def apply(self, state: 'LedgerState') -> None:
        state.require_manager(self.caller)
        if self.proposal_index != len(state.proposals):
            raise ValueError(
                f"Proposal index {self.proposal_index} out of order "
                f"(next index is {len(state.proposals)})"
            )

        state.proposals.append(
            Proposal(
                index=self.proposal_index,
                manager=self.caller,
                description=self.description,
                required_funds=self.required_funds,
            )
        )


class ProposalApproved(LedgerEvent):
    """An investor votes yes on an unsecured proposal.

    The vote is recorded, then the proposal secures in the same step if
    approvers hold at least approve_share_threshold percent of total_funds
    and free_funds covers required_funds. If the threshold is met but free
    funds fall short, the vote stands and the proposal stays unsecured.
    """

    event_type: Literal["proposal_approved"] = "proposal_approved"

    proposal_index: ProposalIndex

    def apply(self, state: 'LedgerState') -> None:
        state.require_investor(self.caller)
        proposal = state.proposal(self.proposal_index)
        if proposal.secured:
            raise AlreadySecured(f"Proposal {proposal.index} is already secured")
        if proposal.has_approved(self.caller):
            raise AlreadyVoted(f"{self.caller} already approved proposal {proposal.index}")

        proposal.approvers.append(self.caller)

        if state.can_secure(proposal):
            state.secure(proposal)


class ProposalReevaluated(LedgerEvent):
    """An investor re-checks a proposal that passed approval without funds.

    Only journaled when the proposal actually secures.
    """

    event_type: Literal["proposal_reevaluated"] = "proposal_reevaluated"

    proposal_index: ProposalIndex

    def apply(self, state: 'LedgerState') -> None:
        state.require_investor(self.caller)
        proposal = state.proposal(self.proposal_index)
        if proposal.secured:
            raise AlreadySecured(f"Proposal {proposal.index} is already secured")
        if not state.threshold_met(proposal):
            raise ValueError(
                f"Proposal {proposal.index} has {state.approve_share_of(proposal)}% approval, "
                f"below threshold {state.approve_share_threshold}%"
            )
        if state.free_funds < proposal.required_funds:
            raise InsufficientFreeFunds(
                f"Proposal {proposal.index} needs {proposal.required_funds}, "
                f"free funds are {state.free_funds}"
            )

        state.secure(proposal)


# =============================================================================
# Revenue Events
# =============================================================================

class RevenueReceived(LedgerEvent):
    """A proposal's manager pays revenue back in.

    Revenue is tracked per proposal, separately from principal: total_funds
    and free_funds are not touched.
    """

    event_type: Literal["revenue_received"] = "revenue_received"

    proposal_index: ProposalIndex
    amount: PositiveAmount

    def apply(self, state: 'LedgerState') -> None:
        proposal = state.proposal(self.proposal_index)
        if self.caller != proposal.manager:
            raise Unauthorized(
                f"{self.caller} is not the manager of proposal {proposal.index}"
            )
        if not proposal.secured:
            raise NotSecured(f"Proposal {proposal.index} is not secured")

        proposal.revenue_received += self.amount


class RevenueDistributed(LedgerEvent):
    """Owner splits a proposal's undistributed revenue.

    The manager takes its fee off the top, investors share the rest by
    weight, and revenue_payed catches up with revenue_received. Dust from
    floor division stays with the proposal, unclaimed.
    """

    event_type: Literal["revenue_distributed"] = "revenue_distributed"

    proposal_index: ProposalIndex

    def apply(self, state: 'LedgerState') -> None:
        state.require_owner(self.caller)
        proposal = state.proposal(self.proposal_index)
        if proposal.undistributed == 0:
            raise NothingToDistribute(
                f"Proposal {proposal.index} has no undistributed revenue"
            )

        manager = state.managers[proposal.manager]
        split = split_revenue(
            proposal_index=proposal.index,
            manager=manager.account_id,
            manager_rate=manager.profit_rate,
            undistributed=proposal.undistributed,
            investors=state.investors.values(),
        )

        for share in split.investor_shares:
            state.investors[share.account_id].profit += share.amount
        manager.profit += split.manager_cut

        proposal.revenue_payed = proposal.revenue_received
        proposal.dust_retained += split.dust
        state.undistributed_dust += split.dust
        state.distributions.append(split)

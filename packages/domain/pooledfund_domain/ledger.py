"""The pooled-capital ledger.

Ledger is the aggregate root: it owns the live LedgerState, the event
journal and the lock that serializes mutations. Every public mutating method
is one atomic unit of work. It takes the lock, validates, mutates and
journals, or raises a LedgerError and leaves the state untouched.

Queries also take the lock and return copies, so readers only ever see
committed state.

Example:
    ledger = Ledger(LedgerCFG(owner_id="0xa11", owner_nickname="Ali",
                              approve_share_threshold=60))
    ledger.register_investor("0xa11", "0xb0b", "Bob", 95)
    ledger.register_manager("0xa11", "0xc4a", "Charlie", 20)
    ledger.deposit("0xa11", 10)
    ledger.deposit("0xb0b", 20)

    index = ledger.submit_proposal("0xc4a", "Invest in project", 10)
    ledger.approve_proposal("0xb0b", index)      # 20/30 = 66% >= 60% → secured
    ledger.receive_revenue("0xc4a", index, 50)
    split = ledger.distribute_revenue("0xa11", index)
    split.manager_cut, split.share_of("0xa11"), split.share_of("0xb0b"), split.dust
    # (10, 14, 25, 1)
"""

import logging
import threading
from typing import Callable, Iterable, List, Optional, Set

from .errors import InvalidAmount, InvalidRate, LedgerError
from .schemas.accounts import Investor, Manager, Role
from .schemas.config import LedgerCFG
from .schemas.distribution import RevenueSplit
from .schemas.events import (
    FundsDeposited,
    InvestorRegistered,
    LedgerEvent,
    ManagerRegistered,
    ProposalApproved,
    ProposalReevaluated,
    ProposalSubmitted,
    RevenueDistributed,
    RevenueReceived,
)
from .schemas.proposals import Proposal
from .schemas.state import LedgerState

logger = logging.getLogger(__name__)


def _require_positive_amount(amount, what: str) -> int:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmount(f"{what} must be an integer, got {amount!r}")
    if amount <= 0:
        raise InvalidAmount(f"{what} must be positive, got {amount}")
    return amount


def _require_rate(rate) -> int:
    if isinstance(rate, bool) or not isinstance(rate, int):
        raise InvalidRate(f"profit rate must be an integer, got {rate!r}")
    if rate < 0:
        raise InvalidRate(f"profit rate must be non-negative, got {rate}")
    return rate


class Ledger:
    """Single shared ledger for one capital pool.

    Roles:
        - Owner: registers investors and managers, distributes revenue;
          also an investor (implicit record with rate OWNER_PROFIT_RATE)
        - Investor: deposits funds, approves proposals
        - Manager: submits proposals, pays revenue back
    """

    def __init__(self, config: LedgerCFG):
        self.config = config
        self._lock = threading.RLock()
        self._state = LedgerState.genesis(config)
        self._history: List[LedgerEvent] = []

        logger.info(
            "Ledger created: owner=%s threshold=%d%%",
            config.owner_id, config.approve_share_threshold
        )

    @classmethod
    def replay(cls, config: LedgerCFG, events: Iterable[LedgerEvent]) -> "Ledger":
        """Rebuild a ledger from a journal of committed events.

        Raises:
            ValueError: If the journal has gaps or is out of order
            LedgerError: If an event does not apply to the rebuilt state
        """
        ledger = cls(config)
        with ledger._lock:
            for event in events:
                ledger._commit(event)
        return ledger

    # ------------------------------------------------------------------ #
    # Commit
    # ------------------------------------------------------------------ #

    def _next_sequence(self) -> int:
        return len(self._history)

    def _commit(self, event: LedgerEvent) -> None:
        """Apply an event to the live state and journal it.

        Must be called with the lock held.

        Raises:
            ValueError: If the event's sequence is not the next journal position
            LedgerError: If the event does not apply to the current state
        """
        if event.sequence != self._next_sequence():
            raise ValueError(
                f"Event sequence {event.sequence} out of order "
                f"(next sequence is {self._next_sequence()})"
            )
        try:
            event.apply(self._state)
        except LedgerError as exc:
            logger.debug("Rejected %s from %s: %s", event.event_type, event.caller, exc)
            raise
        self._history.append(event)
        logger.info("Committed #%d %s from %s", event.sequence, event.event_type, event.caller)

    def _execute(self, build: Callable[[int], LedgerEvent]) -> LedgerEvent:
        with self._lock:
            event = build(self._next_sequence())
            self._commit(event)
            return event

    # ------------------------------------------------------------------ #
    # Registration (owner only)
    # ------------------------------------------------------------------ #

    def register_investor(self, caller: str, account_id: str, nickname: str, profit_rate: int) -> Investor:
        """Register a new investor with zero balances.

        Raises:
            Unauthorized: caller is not the owner
            DuplicateIdentity: account_id is already an investor
            InvalidRate: profit_rate is negative or not an integer
        """
        _require_rate(profit_rate)
        self._execute(lambda seq: InvestorRegistered(
            sequence=seq,
            caller=caller,
            account_id=account_id,
            nickname=nickname,
            profit_rate=profit_rate,
        ))
        return self.investor(account_id)

    def register_manager(self, caller: str, account_id: str, nickname: str, profit_rate: int) -> Manager:
        """Register a new manager with zero balances.

        Raises:
            Unauthorized: caller is not the owner
            DuplicateIdentity: account_id is already a manager
            InvalidRate: profit_rate is negative or not an integer
        """
        _require_rate(profit_rate)
        self._execute(lambda seq: ManagerRegistered(
            sequence=seq,
            caller=caller,
            account_id=account_id,
            nickname=nickname,
            profit_rate=profit_rate,
        ))
        return self.manager(account_id)

    # ------------------------------------------------------------------ #
    # Investor operations
    # ------------------------------------------------------------------ #

    def deposit(self, caller: str, amount: int) -> Investor:
        """Add capital to the pool.

        Raises:
            InvalidAmount: amount is not a positive integer
            Unauthorized: caller is not an investor
        """
        _require_positive_amount(amount, "deposit amount")
        self._execute(lambda seq: FundsDeposited(
            sequence=seq,
            caller=caller,
            amount=amount,
            reevaluate_pending=self.config.secure_on_deposit,
        ))
        return self.investor(caller)

    def approve_proposal(self, caller: str, index: int) -> bool:
        """Vote yes on a proposal.

        Returns:
            True if the proposal is secured after this vote

        Raises:
            Unauthorized: caller is not an investor
            NotFound: no proposal with this index
            AlreadySecured: proposal is already secured
            AlreadyVoted: caller already approved this proposal
        """
        with self._lock:
            self._state.require_investor(caller)
            # Resolve index before building the event so bad indices raise NotFound
            self._state.proposal(index)
            self._commit(ProposalApproved(
                sequence=self._next_sequence(),
                caller=caller,
                proposal_index=index,
            ))
            return self._state.proposals[index].secured

    def reevaluate_proposal(self, caller: str, index: int) -> bool:
        """Re-check a proposal that passed approval while free funds were short.

        Returns:
            True if the proposal secured, False if approval is still below
            the threshold (nothing changes and nothing is journaled)

        Raises:
            Unauthorized: caller is not an investor
            NotFound: no proposal with this index
            AlreadySecured: proposal is already secured
            InsufficientFreeFunds: threshold met but free funds still short
        """
        with self._lock:
            self._state.require_investor(caller)
            proposal = self._state.proposal(index)
            if not proposal.secured and not self._state.threshold_met(proposal):
                return False
            self._commit(ProposalReevaluated(
                sequence=self._next_sequence(),
                caller=caller,
                proposal_index=index,
            ))
            return True

    # ------------------------------------------------------------------ #
    # Manager operations
    # ------------------------------------------------------------------ #

    def submit_proposal(self, caller: str, description: str, required_funds: int) -> int:
        """Ask for pool capital.

        Returns:
            Index of the new proposal

        Raises:
            InvalidAmount: required_funds is not a positive integer
            Unauthorized: caller is not a manager
        """
        _require_positive_amount(required_funds, "required funds")
        event = self._execute(lambda seq: ProposalSubmitted(
            sequence=seq,
            caller=caller,
            proposal_index=len(self._state.proposals),
            description=description,
            required_funds=required_funds,
        ))
        return event.proposal_index

    def receive_revenue(self, caller: str, index: int, amount: int) -> Proposal:
        """Pay revenue back in against a secured proposal.

        Raises:
            InvalidAmount: amount is not a positive integer
            NotFound: no proposal with this index
            Unauthorized: caller is not the proposal's manager
            NotSecured: proposal is not secured
        """
        _require_positive_amount(amount, "revenue amount")
        with self._lock:
            self._state.proposal(index)
            self._commit(RevenueReceived(
                sequence=self._next_sequence(),
                caller=caller,
                proposal_index=index,
                amount=amount,
            ))
            return self._state.proposals[index].model_copy(deep=True)

    # ------------------------------------------------------------------ #
    # Owner operations
    # ------------------------------------------------------------------ #

    def distribute_revenue(self, caller: str, index: int) -> RevenueSplit:
        """Split a proposal's undistributed revenue.

        Returns:
            The committed RevenueSplit (manager cut, investor shares, dust)

        Raises:
            Unauthorized: caller is not the owner
            NotFound: no proposal with this index
            NothingToDistribute: no revenue received since the last distribution
            InvalidRate: manager rate above 100% would take more than the revenue
        """
        with self._lock:
            self._state.require_owner(caller)
            self._state.proposal(index)
            self._commit(RevenueDistributed(
                sequence=self._next_sequence(),
                caller=caller,
                proposal_index=index,
            ))
            split = self._state.distributions[-1]
            logger.info(
                "Distributed proposal %d: manager_cut=%d investors=%d dust=%d",
                index, split.manager_cut, split.investors_total, split.dust
            )
            return split.model_copy(deep=True)

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def snapshot(self) -> LedgerState:
        """Deep copy of the committed state."""
        with self._lock:
            return self._state.model_copy(deep=True)

    @property
    def history(self) -> List[LedgerEvent]:
        """Committed events, oldest first."""
        with self._lock:
            return list(self._history)

    @property
    def distributions(self) -> List[RevenueSplit]:
        with self._lock:
            return [split.model_copy(deep=True) for split in self._state.distributions]

    @property
    def owner_id(self) -> str:
        return self._state.owner_id

    @property
    def owner_nickname(self) -> str:
        return self._state.owner_nickname

    @property
    def approve_share_threshold(self) -> int:
        return self._state.approve_share_threshold

    @property
    def total_funds(self) -> int:
        with self._lock:
            return self._state.total_funds

    @property
    def free_funds(self) -> int:
        with self._lock:
            return self._state.free_funds

    @property
    def undistributed_dust(self) -> int:
        with self._lock:
            return self._state.undistributed_dust

    @property
    def total_revenue(self) -> int:
        with self._lock:
            return self._state.total_revenue

    @property
    def proposal_count(self) -> int:
        with self._lock:
            return len(self._state.proposals)

    def investor(self, account_id: str) -> Investor:
        with self._lock:
            return self._state.investor(account_id).model_copy(deep=True)

    def manager(self, account_id: str) -> Manager:
        with self._lock:
            return self._state.manager(account_id).model_copy(deep=True)

    def investors(self) -> List[Investor]:
        """All investors in registration order (owner first)."""
        with self._lock:
            return [inv.model_copy(deep=True) for inv in self._state.investors.values()]

    def managers(self) -> List[Manager]:
        """All managers in registration order."""
        with self._lock:
            return [mgr.model_copy(deep=True) for mgr in self._state.managers.values()]

    def investor_ids(self) -> List[str]:
        with self._lock:
            return list(self._state.investors)

    def manager_ids(self) -> List[str]:
        with self._lock:
            return list(self._state.managers)

    def proposal(self, index: int) -> Proposal:
        with self._lock:
            return self._state.proposal(index).model_copy(deep=True)

    def proposals(self) -> List[Proposal]:
        with self._lock:
            return [p.model_copy(deep=True) for p in self._state.proposals]

    def approvers(self, index: int) -> List[str]:
        """Approving investors of a proposal, in voting order."""
        with self._lock:
            return list(self._state.proposal(index).approvers)

    def approve_share(self, index: int) -> int:
        """Integer percent of total_funds currently held by a proposal's approvers."""
        with self._lock:
            return self._state.approve_share(index)

    def undistributed(self, index: int) -> int:
        with self._lock:
            return self._state.proposal(index).undistributed

    def is_owner(self, account_id: str) -> bool:
        return self._state.is_owner(account_id)

    def is_investor(self, account_id: str) -> bool:
        with self._lock:
            return self._state.is_investor(account_id)

    def is_manager(self, account_id: str) -> bool:
        with self._lock:
            return self._state.is_manager(account_id)

    def roles_of(self, account_id: str) -> Set[Role]:
        with self._lock:
            return self._state.roles_of(account_id)

    def primary_role(self, account_id: str) -> Optional[Role]:
        with self._lock:
            return self._state.primary_role(account_id)

    def nickname_of(self, account_id: str) -> str:
        with self._lock:
            return self._state.nickname_of(account_id)

    def check_invariants(self) -> None:
        """Raise InvariantViolation if committed state breaks a pool invariant."""
        with self._lock:
            self._state.check_invariants()

    def __repr__(self) -> str:
        return (
            f"Ledger(owner={self.owner_id!r}, total_funds={self.total_funds}, "
            f"free_funds={self.free_funds}, proposals={self.proposal_count})"
        )

"""Ledger state: accounts, proposals and pool totals.

LedgerState is the single aggregate every ledger event reads and mutates.
The Ledger owns one live instance; snapshots handed to readers are deep
copies of it, so reporting code can never observe or cause a partial update.
"""

from typing import Dict, List, Optional, Set

from pydantic import Field

from ..errors import InvariantViolation, NotFound, Unauthorized
from .base import DomainModel, AccountId, Amount, ThresholdPercent, OWNER_PROFIT_RATE, PERCENT
from .accounts import Investor, Manager, Role
from .config import LedgerCFG
from .distribution import RevenueSplit
from .proposals import Proposal


class LedgerState(DomainModel):
    """Point-in-time ledger state.

    Usage:
        snapshot = ledger.snapshot()
        snapshot.total_funds
        snapshot.approve_share(0)
        snapshot.nickname_of("0xb0b")

    Invariants (checked by check_invariants):
        - total_funds == sum(funds_invested)
        - free_funds == total_funds - sum(required_funds of secured proposals)
        - 0 <= free_funds <= total_funds
        - revenue_payed <= revenue_received on every proposal
        - sum(funds_secured) == sum(required_funds of secured proposals)
    """

    owner_id: AccountId = Field(
        description="Privileged owner identity"
    )

    owner_nickname: str = Field(
        description="Display name of the owner"
    )

    approve_share_threshold: ThresholdPercent = Field(
        description="Percent of total_funds approvers must hold to secure a proposal"
    )

    investors: Dict[str, Investor] = Field(
        default_factory=dict,
        description="Investor records (account_id → Investor), in registration order"
    )

    managers: Dict[str, Manager] = Field(
        default_factory=dict,
        description="Manager records (account_id → Manager), in registration order"
    )

    proposals: List[Proposal] = Field(
        default_factory=list,
        description="All proposals; list position equals proposal index"
    )

    total_funds: Amount = Field(
        default=0,
        description="Sum of all investors' funds_invested"
    )

    free_funds: Amount = Field(
        default=0,
        description="Pool capital not committed to a secured proposal"
    )

    undistributed_dust: Amount = Field(
        default=0,
        description="Floor-division remainders left unclaimed across all distributions"
    )

    distributions: List[RevenueSplit] = Field(
        default_factory=list,
        description="Every committed revenue split, in order"
    )

    @classmethod
    def genesis(cls, config: LedgerCFG) -> "LedgerState":
        """Initial state: only the owner's implicit investor record, no funds."""
        return cls(
            owner_id=config.owner_id,
            owner_nickname=config.owner_nickname,
            approve_share_threshold=config.approve_share_threshold,
            investors={
                config.owner_id: Investor(
                    account_id=config.owner_id,
                    nickname=config.owner_nickname,
                    profit_rate=OWNER_PROFIT_RATE,
                )
            },
        )

    # ------------------------------------------------------------------ #
    # Roles
    # ------------------------------------------------------------------ #

    def is_owner(self, account_id: str) -> bool:
        return account_id == self.owner_id

    def is_investor(self, account_id: str) -> bool:
        return account_id in self.investors

    def is_manager(self, account_id: str) -> bool:
        return account_id in self.managers

    def roles_of(self, account_id: str) -> Set[Role]:
        """Capability set held by an identity (empty for unknown identities)."""
        roles: Set[Role] = set()
        if self.is_owner(account_id):
            roles.add(Role.OWNER)
        if self.is_investor(account_id):
            roles.add(Role.INVESTOR)
        if self.is_manager(account_id):
            roles.add(Role.MANAGER)
        return roles

    def primary_role(self, account_id: str) -> Optional[Role]:
        """Role a front end would act as: owner, then manager, then investor."""
        for role in (Role.OWNER, Role.MANAGER, Role.INVESTOR):
            if role in self.roles_of(account_id):
                return role
        return None

    def require_owner(self, caller: str) -> None:
        if not self.is_owner(caller):
            raise Unauthorized(f"{caller} is not the owner")

    def require_investor(self, caller: str) -> Investor:
        if not self.is_investor(caller):
            raise Unauthorized(f"{caller} is not an investor")
        return self.investors[caller]

    def require_manager(self, caller: str) -> Manager:
        if not self.is_manager(caller):
            raise Unauthorized(f"{caller} is not a manager")
        return self.managers[caller]

    # ------------------------------------------------------------------ #
    # Lookups
    # ------------------------------------------------------------------ #

    def investor(self, account_id: str) -> Investor:
        """Get an investor record.

        Raises:
            NotFound: If the identity is not a registered investor
        """
        if account_id not in self.investors:
            raise NotFound(f"Investor not found: {account_id}")
        return self.investors[account_id]

    def manager(self, account_id: str) -> Manager:
        """Get a manager record.

        Raises:
            NotFound: If the identity is not a registered manager
        """
        if account_id not in self.managers:
            raise NotFound(f"Manager not found: {account_id}")
        return self.managers[account_id]

    def proposal(self, index: int) -> Proposal:
        """Get a proposal by index.

        Raises:
            NotFound: If no proposal has this index
        """
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(self.proposals):
            raise NotFound(f"Proposal not found: {index!r} (count={len(self.proposals)})")
        return self.proposals[index]

    def nickname_of(self, account_id: str) -> str:
        """Display name for an identity.

        Manager nickname first, then investor nickname, then the owner's
        nickname, else a shortened identity ('0x7099...79C8').
        """
        if account_id in self.managers and self.managers[account_id].nickname:
            return self.managers[account_id].nickname
        if account_id in self.investors and self.investors[account_id].nickname:
            return self.investors[account_id].nickname
        if self.is_owner(account_id):
            return self.owner_nickname
        if len(account_id) <= 10:
            return account_id
        return f"{account_id[:6]}...{account_id[-4:]}"

    # ------------------------------------------------------------------ #
    # Pool math
    # ------------------------------------------------------------------ #

    @property
    def committed_funds(self) -> int:
        """Funds granted to secured proposals."""
        return sum(p.required_funds for p in self.proposals if p.secured)

    @property
    def total_revenue(self) -> int:
        """Revenue ever paid in across all proposals."""
        return sum(p.revenue_received for p in self.proposals)

    @property
    def total_undistributed(self) -> int:
        return sum(p.undistributed for p in self.proposals)

    def approved_funds(self, proposal: Proposal) -> int:
        """Sum of funds_invested over a proposal's approvers."""
        return sum(
            self.investors[a].funds_invested for a in proposal.approvers if a in self.investors
        )

    def approve_share_of(self, proposal: Proposal) -> int:
        """Integer percent of total_funds held by approvers (floor).

        Returns 0 when total_funds is 0: the share is undefined and the
        proposal cannot secure.
        """
        if self.total_funds == 0:
            return 0
        return self.approved_funds(proposal) * PERCENT // self.total_funds

    def approve_share(self, index: int) -> int:
        return self.approve_share_of(self.proposal(index))

    def threshold_met(self, proposal: Proposal) -> bool:
        if self.total_funds == 0:
            return False
        return self.approve_share_of(proposal) >= self.approve_share_threshold

    def can_secure(self, proposal: Proposal) -> bool:
        """Whether the proposal would secure if evaluated now."""
        return (
            not proposal.secured
            and self.threshold_met(proposal)
            and self.free_funds >= proposal.required_funds
        )

    def secure(self, proposal: Proposal) -> None:
        """Grant a proposal its funds. Callers check can_secure() first."""
        proposal.secured = True
        self.managers[proposal.manager].funds_secured += proposal.required_funds
        self.free_funds -= proposal.required_funds

    def pending_proposals(self) -> List[Proposal]:
        return [p for p in self.proposals if not p.secured]

    # ------------------------------------------------------------------ #
    # Invariants
    # ------------------------------------------------------------------ #

    def check_invariants(self) -> None:
        """Verify pool invariants.

        Raises:
            InvariantViolation: On the first broken invariant
        """
        invested = sum(inv.funds_invested for inv in self.investors.values())
        if self.total_funds != invested:
            raise InvariantViolation(
                f"total_funds {self.total_funds} != sum(funds_invested) {invested}"
            )

        if not 0 <= self.free_funds <= self.total_funds:
            raise InvariantViolation(
                f"free_funds {self.free_funds} outside [0, {self.total_funds}]"
            )

        if self.free_funds != self.total_funds - self.committed_funds:
            raise InvariantViolation(
                f"free_funds {self.free_funds} != total_funds {self.total_funds} "
                f"- committed {self.committed_funds}"
            )

        secured_by_managers = sum(m.funds_secured for m in self.managers.values())
        if secured_by_managers != self.committed_funds:
            raise InvariantViolation(
                f"sum(funds_secured) {secured_by_managers} != committed {self.committed_funds}"
            )

        for proposal in self.proposals:
            if proposal.revenue_payed > proposal.revenue_received:
                raise InvariantViolation(
                    f"Proposal {proposal.index}: revenue_payed > revenue_received"
                )
            if proposal.manager not in self.managers:
                raise InvariantViolation(
                    f"Proposal {proposal.index}: unknown manager {proposal.manager}"
                )

        dust = sum(p.dust_retained for p in self.proposals)
        if dust != self.undistributed_dust:
            raise InvariantViolation(
                f"undistributed_dust {self.undistributed_dust} != sum(dust_retained) {dust}"
            )

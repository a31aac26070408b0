"""Revenue split between a proposal's manager and the pool's investors.

The split is fixed-point: every division floors toward zero and nothing is
ever converted to float. Flooring leaves a remainder ("dust") of at most
(number of weighted investors - 1) smallest units; it is recorded on the split
and paid to nobody.

Algorithm:
    1. manager_cut = undistributed * manager_rate // 100
    2. remaining   = undistributed - manager_cut
    3. weight_i    = funds_invested_i * profit_rate_i
    4. share_i     = remaining * weight_i // total_weight   (weight_i > 0 only)
    5. dust        = remaining - sum(share_i)

Example (manager rate 20%, revenue 50):
    manager_cut = 10, remaining = 40
    Owner: 10 * 110 = 1100, Bob: 20 * 95 = 1900, total_weight = 3000
    Owner share = 40 * 1100 // 3000 = 14
    Bob share   = 40 * 1900 // 3000 = 25
    dust        = 40 - 39 = 1
"""

from typing import Iterable, List

from pydantic import Field, model_validator

from ..errors import InvalidRate
from .base import DomainModel, AccountId, Amount, ProfitRate, ProposalIndex, PERCENT
from .accounts import Investor


class InvestorShare(DomainModel):
    """One investor's slice of a distribution."""

    account_id: AccountId
    weight: Amount = Field(description="funds_invested * profit_rate at distribution time")
    amount: Amount = Field(description="Revenue credited to this investor")


class RevenueSplit(DomainModel):
    """Result of splitting one proposal's undistributed revenue."""

    proposal_index: ProposalIndex = Field(
        description="Proposal whose revenue was split"
    )

    manager: AccountId = Field(
        description="Manager credited with the management fee"
    )

    undistributed: Amount = Field(
        description="revenue_received - revenue_payed before the split"
    )

    manager_rate: ProfitRate = Field(
        description="Manager's profit rate applied to the split"
    )

    manager_cut: Amount = Field(
        description="Management fee taken off the top"
    )

    remaining: Amount = Field(
        description="Revenue left for investors after the management fee"
    )

    total_weight: Amount = Field(
        description="Sum of investor weights at distribution time"
    )

    investor_shares: List[InvestorShare] = Field(
        default_factory=list,
        description="Per-investor credits (investors with positive weight only)"
    )

    dust: Amount = Field(
        default=0,
        description="Floor-division remainder left unclaimed"
    )

    @model_validator(mode='after')
    def validate_conservation(self):
        """Everything paid out plus dust must equal what was undistributed."""
        paid = self.manager_cut + self.investors_total
        if paid + self.dust != self.undistributed:
            raise ValueError(
                f"Split does not conserve revenue: paid {paid} + dust {self.dust} "
                f"!= undistributed {self.undistributed}"
            )
        return self

    @property
    def investors_total(self) -> int:
        return sum(share.amount for share in self.investor_shares)

    @property
    def total_paid(self) -> int:
        """Revenue actually credited to someone (manager + investors)."""
        return self.manager_cut + self.investors_total

    def share_of(self, account_id: str) -> int:
        """Amount credited to an investor by this split (0 if none)."""
        return next(
            (share.amount for share in self.investor_shares if share.account_id == account_id),
            0
        )


def split_revenue(
    proposal_index: int,
    manager: str,
    manager_rate: int,
    undistributed: int,
    investors: Iterable[Investor],
) -> RevenueSplit:
    """Compute a revenue split without touching any ledger state.

    Args:
        proposal_index: Proposal being distributed
        manager: Manager identity receiving the management fee
        manager_rate: Manager's profit rate (integer percent)
        undistributed: Revenue to split (smallest units)
        investors: Every registered investor, in registration order

    Returns:
        RevenueSplit with the manager cut, per-investor shares and dust

    Raises:
        InvalidRate: If manager_rate would take more than undistributed

    Note:
        Investors with zero funds_invested carry zero weight and receive
        nothing. If no investor carries weight the whole remainder is dust.
    """
    manager_cut = undistributed * manager_rate // PERCENT
    if manager_cut > undistributed:
        raise InvalidRate(
            f"Manager rate {manager_rate}% takes {manager_cut}, "
            f"more than the {undistributed} undistributed"
        )
    remaining = undistributed - manager_cut

    weighted = [(inv.account_id, inv.weight) for inv in investors if inv.weight > 0]
    total_weight = sum(weight for _, weight in weighted)

    shares: List[InvestorShare] = []
    if total_weight > 0:
        for account_id, weight in weighted:
            shares.append(InvestorShare(
                account_id=account_id,
                weight=weight,
                amount=remaining * weight // total_weight,
            ))

    distributed = sum(share.amount for share in shares)

    return RevenueSplit(
        proposal_index=proposal_index,
        manager=manager,
        undistributed=undistributed,
        manager_rate=manager_rate,
        manager_cut=manager_cut,
        remaining=remaining,
        total_weight=total_weight,
        investor_shares=shares,
        dust=remaining - distributed,
    )

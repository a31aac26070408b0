"""Funding proposals submitted by managers and approved by investors."""

from typing import List

from pydantic import Field, field_validator, model_validator

from .base import DomainModel, AccountId, Amount, PositiveAmount, ProposalIndex


class Proposal(DomainModel):
    """A manager's request for pool capital.

    Lifecycle:
        1. Submitted unsecured with no approvers
        2. Investors vote; approvers accumulate (unique, in voting order)
        3. Secured once approving investors hold enough of the pool and free
           funds cover required_funds (one-way, never reverses)
        4. Manager pays revenue in (revenue_received grows)
        5. Owner distributes; revenue_payed catches up to revenue_received

    Example:
        Proposal(index=0, manager="0xc4a", description="Invest in project",
                 required_funds=10)
    """

    index: ProposalIndex = Field(
        description="Position in the proposal list (0-based)"
    )

    manager: AccountId = Field(
        description="Identity of the submitting manager"
    )

    description: str = Field(
        description="Free-form description of what the funds are for"
    )

    required_funds: PositiveAmount = Field(
        description="Capital requested, fixed at submission"
    )

    secured: bool = Field(
        default=False,
        description="True once the proposal has been granted its funds"
    )

    revenue_received: Amount = Field(
        default=0,
        description="Cumulative revenue paid in by the manager"
    )

    revenue_payed: Amount = Field(
        default=0,
        description="Cumulative revenue distributed out of revenue_received"
    )

    dust_retained: Amount = Field(
        default=0,
        description="Floor-division remainder left unclaimed by distributions"
    )

    approvers: List[AccountId] = Field(
        default_factory=list,
        description="Investors who voted yes, in voting order"
    )

    @field_validator('approvers')
    @classmethod
    def validate_unique_approvers(cls, v: List[str]) -> List[str]:
        """Approver membership is unique."""
        if len(set(v)) != len(v):
            raise ValueError(f"Duplicate approvers: {v}")
        return v

    @model_validator(mode='after')
    def validate_revenue_counters(self):
        """Distributed revenue can never exceed received revenue."""
        if self.revenue_payed > self.revenue_received:
            raise ValueError(
                f"revenue_payed ({self.revenue_payed}) exceeds "
                f"revenue_received ({self.revenue_received})"
            )
        return self

    @property
    def undistributed(self) -> int:
        """Revenue received but not yet distributed."""
        return self.revenue_received - self.revenue_payed

    def has_approved(self, account_id: str) -> bool:
        return account_id in self.approvers

"""Account records for the roles that share the pool.

Roles are capabilities attached to an identity, not a class hierarchy:
the owner is also an investor, and one identity may be registered both as an
investor and as a manager. Operations check membership, not type.
"""

from enum import Enum

from pydantic import Field

from .base import DomainModel, AccountId, Amount, ProfitRate


# =============================================================================
# Roles
# =============================================================================

class Role(str, Enum):
    """Capability an identity may hold."""

    OWNER = "owner"
    INVESTOR = "investor"
    MANAGER = "manager"


# =============================================================================
# Investor
# =============================================================================

class Investor(DomainModel):
    """Capital provider in the shared pool.

    Balances only ever grow: funds_invested through deposits, profit through
    revenue distributions. profit_rate is fixed when the record is created;
    changing it requires a new identity.

    Example:
        Investor(account_id="0xb0b", nickname="Bob", profit_rate=95)
        After depositing 20: funds_invested=20, weight=20*95=1900
    """

    account_id: AccountId = Field(
        description="Identity this record belongs to"
    )

    nickname: str = Field(
        description="Display name"
    )

    funds_invested: Amount = Field(
        default=0,
        description="Cumulative principal deposited into the pool"
    )

    profit: Amount = Field(
        default=0,
        description="Cumulative revenue share credited to this investor"
    )

    profit_rate: ProfitRate = Field(
        description="Integer percentage weighting this investor's revenue share"
    )

    @property
    def weight(self) -> int:
        """Revenue-split weight: funds_invested * profit_rate."""
        return self.funds_invested * self.profit_rate


# =============================================================================
# Manager
# =============================================================================

class Manager(DomainModel):
    """Fund manager that draws pool capital against approved proposals.

    profit_rate is the management fee: the percentage of returned revenue the
    manager keeps before the remainder is split among investors.
    """

    account_id: AccountId = Field(
        description="Identity this record belongs to"
    )

    nickname: str = Field(
        description="Display name"
    )

    funds_secured: Amount = Field(
        default=0,
        description="Cumulative funds granted across this manager's secured proposals"
    )

    profit: Amount = Field(
        default=0,
        description="Cumulative management fees credited to this manager"
    )

    profit_rate: ProfitRate = Field(
        description="Management fee as integer percentage of returned revenue"
    )

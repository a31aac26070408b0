"""Ledger domain schemas.

This package contains all Pydantic models for the ledger domain layer:
- Base types and conventions
- Accounts (investors, managers) and roles
- Proposals
- Revenue splits
- Ledger state and configuration
- Events (journal of committed operations)
- Statement workbook configuration

Usage:
    from pooledfund_domain.schemas import (
        LedgerCFG, LedgerState, Investor, Manager, Proposal,
        RevenueSplit, split_revenue, StatementCFG
    )
"""

# Base types
from .base import (
    DomainModel,
    Amount,
    PositiveAmount,
    ProfitRate,
    ThresholdPercent,
    AccountId,
    ProposalIndex,
    OWNER_PROFIT_RATE,
)

# Accounts
from .accounts import (
    Role,
    Investor,
    Manager,
)

# Proposals
from .proposals import Proposal

# Revenue splits
from .distribution import (
    InvestorShare,
    RevenueSplit,
    split_revenue,
)

# Configuration and state
from .config import LedgerCFG
from .state import LedgerState

# Events
from .events import (
    LedgerEvent,
    InvestorRegistered,
    ManagerRegistered,
    FundsDeposited,
    ProposalSubmitted,
    ProposalApproved,
    ProposalReevaluated,
    RevenueReceived,
    RevenueDistributed,
)

# Workbook
from .workbook import StatementCFG

__all__ = [
    # Base types
    "DomainModel",
    "Amount",
    "PositiveAmount",
    "ProfitRate",
    "ThresholdPercent",
    "AccountId",
    "ProposalIndex",
    "OWNER_PROFIT_RATE",
    # Accounts
    "Role",
    "Investor",
    "Manager",
    # Proposals
    "Proposal",
    # Revenue splits
    "InvestorShare",
    "RevenueSplit",
    "split_revenue",
    # Configuration and state
    "LedgerCFG",
    "LedgerState",
    # Events
    "LedgerEvent",
    "InvestorRegistered",
    "ManagerRegistered",
    "FundsDeposited",
    "ProposalSubmitted",
    "ProposalApproved",
    "ProposalReevaluated",
    "RevenueReceived",
    "RevenueDistributed",
    # Workbook
    "StatementCFG",
]

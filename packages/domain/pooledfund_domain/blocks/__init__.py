"""Reporting blocks for ledger analysis.

This package contains the computation layer that turns a ledger snapshot into
DataFrames suitable for Excel rendering or other consumption.

Architecture:
    Ledger → LedgerState snapshot → Blocks (computation) → DataFrames (output)

Available blocks:
- AccountsBlock: investors and managers tables
- ProposalsBlock: proposals and votes tables
- PoolSummaryBlock: pool-level totals (depends on ProposalsBlock)
- DistributionsBlock: revenue splits flattened to payee rows

Usage:
    from pooledfund_domain.blocks import BlockExecutor, BlockContext, standard_blocks

    context = BlockContext.for_snapshot(ledger.snapshot())
    BlockExecutor(standard_blocks()).execute(context)

    summary_df = context.get("pool_summary")
"""

from typing import List

from .base import Block, BlockExecutor, BlockContext, SNAPSHOT_KEY
from .accounts import AccountsBlock
from .proposals import ProposalsBlock
from .pool import PoolSummaryBlock, DistributionsBlock


def standard_blocks() -> List[Block]:
    """Every reporting block, ready for a BlockExecutor."""
    return [AccountsBlock(), ProposalsBlock(), PoolSummaryBlock(), DistributionsBlock()]


__all__ = [
    "Block",
    "BlockExecutor",
    "BlockContext",
    "SNAPSHOT_KEY",
    "AccountsBlock",
    "ProposalsBlock",
    "PoolSummaryBlock",
    "DistributionsBlock",
    "standard_blocks",
]

"""Pool summary and distribution reporting blocks.

Output DataFrames:
- pool_summary: single row of pool-level totals
- ledger_distributions: one row per payee per revenue split
"""

from typing import List

import pandas as pd

from .base import Block, BlockContext, SNAPSHOT_KEY
from ..schemas import LedgerState

DISTRIBUTION_COLUMNS = [
    "distribution",
    "proposal_index",
    "payee",
    "nickname",
    "payee_type",
    "weight",
    "amount",
]


class PoolSummaryBlock(Block):
    """Computes pool-level totals.

    Inputs (from context):
        - ledger_snapshot: LedgerState
        - ledger_proposals: DataFrame from ProposalsBlock

    Outputs (to context):
        - pool_summary: DataFrame with single row:
            * total_funds, free_funds, committed_funds
            * total_revenue: revenue ever received across proposals
            * revenue_distributed, undistributed_revenue
            * undistributed_dust: floor-division remainders left unclaimed
            * investors, managers, proposals, secured_proposals
            * approve_share_threshold
    """

    def __init__(
        self,
        snapshot_key: str = SNAPSHOT_KEY,
        proposals_key: str = "ledger_proposals",
    ):
        self.snapshot_key = snapshot_key
        self.proposals_key = proposals_key

    def inputs(self) -> List[str]:
        return [self.snapshot_key, self.proposals_key]

    def outputs(self) -> List[str]:
        return ["pool_summary"]

    def execute(self, context: BlockContext) -> None:
        snapshot: LedgerState = context.get(self.snapshot_key)
        proposals_df: pd.DataFrame = context.get(self.proposals_key)

        secured = proposals_df[proposals_df["status"] == "secured"]

        summary = {
            "total_funds": snapshot.total_funds,
            "free_funds": snapshot.free_funds,
            "committed_funds": int(secured["required_funds"].sum()),
            "total_revenue": int(proposals_df["revenue_received"].sum()),
            "revenue_distributed": int(proposals_df["revenue_payed"].sum()),
            "undistributed_revenue": int(proposals_df["undistributed"].sum()),
            "undistributed_dust": snapshot.undistributed_dust,
            "investors": len(snapshot.investors),
            "managers": len(snapshot.managers),
            "proposals": len(proposals_df),
            "secured_proposals": len(secured),
            "approve_share_threshold": snapshot.approve_share_threshold,
        }

        context.set("pool_summary", pd.DataFrame([summary]))


class DistributionsBlock(Block):
    """Flattens committed revenue splits into payee rows.

    Inputs (from context):
        - ledger_snapshot: LedgerState

    Outputs (to context):
        - ledger_distributions: DataFrame with columns:
            * distribution: 1-based distribution number
            * proposal_index: proposal whose revenue was split
            * payee: account credited (None for the dust row)
            * nickname: payee display name ("(unclaimed dust)" for dust)
            * payee_type: "manager", "investor" or "dust"
            * weight: investor weight, nullable Int64 (<NA> for manager and dust rows)
            * amount: amount credited

        Each distribution's amounts sum to its undistributed revenue.
    """

    def __init__(self, snapshot_key: str = SNAPSHOT_KEY):
        self.snapshot_key = snapshot_key

    def inputs(self) -> List[str]:
        return [self.snapshot_key]

    def outputs(self) -> List[str]:
        return ["ledger_distributions"]

    def execute(self, context: BlockContext) -> None:
        snapshot: LedgerState = context.get(self.snapshot_key)

        rows = []
        for number, split in enumerate(snapshot.distributions, start=1):
            rows.append({
                "distribution": number,
                "proposal_index": split.proposal_index,
                "payee": split.manager,
                "nickname": snapshot.nickname_of(split.manager),
                "payee_type": "manager",
                "weight": None,
                "amount": split.manager_cut,
            })
            for share in split.investor_shares:
                rows.append({
                    "distribution": number,
                    "proposal_index": split.proposal_index,
                    "payee": share.account_id,
                    "nickname": snapshot.nickname_of(share.account_id),
                    "payee_type": "investor",
                    "weight": share.weight,
                    "amount": share.amount,
                })
            if split.dust:
                rows.append({
                    "distribution": number,
                    "proposal_index": split.proposal_index,
                    "payee": None,
                    "nickname": "(unclaimed dust)",
                    "payee_type": "dust",
                    "weight": None,
                    "amount": split.dust,
                })

        # Nullable ints so manager and dust rows do not turn weights into floats
        df = pd.DataFrame(rows, columns=DISTRIBUTION_COLUMNS).astype({"weight": "Int64"})
        context.set("ledger_distributions", df)

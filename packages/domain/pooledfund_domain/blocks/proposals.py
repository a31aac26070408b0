"""Proposals reporting block.

Converts a LedgerState snapshot into proposal and vote DataFrames.
"""

from typing import List

import pandas as pd

from .base import Block, BlockContext, SNAPSHOT_KEY
from ..schemas import LedgerState

PROPOSAL_COLUMNS = [
    "index",
    "manager",
    "manager_nickname",
    "description",
    "required_funds",
    "status",
    "approvers",
    "approve_share_pct",
    "threshold_met",
    "revenue_received",
    "revenue_payed",
    "undistributed",
    "dust_retained",
]

APPROVAL_COLUMNS = [
    "proposal_index",
    "vote_order",
    "account_id",
    "nickname",
    "funds_invested",
]


class ProposalsBlock(Block):
    """Converts a LedgerState snapshot to proposal DataFrames.

    Inputs (from context):
        - ledger_snapshot: LedgerState to convert

    Outputs (to context):
        - ledger_proposals: one row per proposal, index order:
            * index, manager, manager_nickname, description, required_funds
            * status: "secured", "awaiting_funds" (threshold met, free funds
              short) or "voting"
            * approvers: number of approving investors
            * approve_share_pct: integer percent of total_funds held by approvers
            * threshold_met: approve_share_pct >= approve_share_threshold
            * revenue_received, revenue_payed, undistributed, dust_retained

        - ledger_approvals: one row per vote:
            * proposal_index, vote_order (1-based), account_id, nickname
            * funds_invested: approver's current principal
    """

    def __init__(self, snapshot_key: str = SNAPSHOT_KEY):
        self.snapshot_key = snapshot_key

    def inputs(self) -> List[str]:
        return [self.snapshot_key]

    def outputs(self) -> List[str]:
        return ["ledger_proposals", "ledger_approvals"]

    def execute(self, context: BlockContext) -> None:
        snapshot: LedgerState = context.get(self.snapshot_key)

        context.set("ledger_proposals", self._compute_proposals(snapshot))
        context.set("ledger_approvals", self._compute_approvals(snapshot))

    def _compute_proposals(self, snapshot: LedgerState) -> pd.DataFrame:
        rows = []
        for proposal in snapshot.proposals:
            threshold_met = snapshot.threshold_met(proposal)
            if proposal.secured:
                status = "secured"
            elif threshold_met:
                status = "awaiting_funds"
            else:
                status = "voting"

            rows.append({
                "index": proposal.index,
                "manager": proposal.manager,
                "manager_nickname": snapshot.nickname_of(proposal.manager),
                "description": proposal.description,
                "required_funds": proposal.required_funds,
                "status": status,
                "approvers": len(proposal.approvers),
                "approve_share_pct": snapshot.approve_share_of(proposal),
                "threshold_met": threshold_met,
                "revenue_received": proposal.revenue_received,
                "revenue_payed": proposal.revenue_payed,
                "undistributed": proposal.undistributed,
                "dust_retained": proposal.dust_retained,
            })

        return pd.DataFrame(rows, columns=PROPOSAL_COLUMNS)

    def _compute_approvals(self, snapshot: LedgerState) -> pd.DataFrame:
        rows = []
        for proposal in snapshot.proposals:
            for order, account_id in enumerate(proposal.approvers, start=1):
                investor = snapshot.investors.get(account_id)
                rows.append({
                    "proposal_index": proposal.index,
                    "vote_order": order,
                    "account_id": account_id,
                    "nickname": snapshot.nickname_of(account_id),
                    "funds_invested": investor.funds_invested if investor else 0,
                })

        return pd.DataFrame(rows, columns=APPROVAL_COLUMNS)

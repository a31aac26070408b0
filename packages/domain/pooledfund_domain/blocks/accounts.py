"""Accounts reporting block.

Converts a LedgerState snapshot into investor and manager DataFrames.
"""

from typing import List

import pandas as pd

from .base import Block, BlockContext, SNAPSHOT_KEY
from ..schemas import LedgerState

INVESTOR_COLUMNS = [
    "account_id",
    "nickname",
    "is_owner",
    "funds_invested",
    "profit_rate",
    "weight",
    "pool_share_pct",
    "profit",
]

MANAGER_COLUMNS = [
    "account_id",
    "nickname",
    "profit_rate",
    "funds_secured",
    "profit",
    "proposals",
    "secured_proposals",
]


class AccountsBlock(Block):
    """Converts a LedgerState snapshot to account DataFrames.

    Inputs (from context):
        - ledger_snapshot: LedgerState to convert

    Outputs (to context):
        - ledger_investors: one row per investor, registration order:
            * account_id, nickname, is_owner
            * funds_invested: principal deposited
            * profit_rate: integer percent
            * weight: funds_invested * profit_rate
            * pool_share_pct: funds_invested / total_funds * 100 (display only)
            * profit: cumulative revenue share

        - ledger_managers: one row per manager, registration order:
            * account_id, nickname, profit_rate
            * funds_secured, profit
            * proposals: proposals submitted
            * secured_proposals: proposals secured
    """

    def __init__(self, snapshot_key: str = SNAPSHOT_KEY):
        self.snapshot_key = snapshot_key

    def inputs(self) -> List[str]:
        return [self.snapshot_key]

    def outputs(self) -> List[str]:
        return ["ledger_investors", "ledger_managers"]

    def execute(self, context: BlockContext) -> None:
        snapshot: LedgerState = context.get(self.snapshot_key)

        context.set("ledger_investors", self._compute_investors(snapshot))
        context.set("ledger_managers", self._compute_managers(snapshot))

    def _compute_investors(self, snapshot: LedgerState) -> pd.DataFrame:
        rows = []
        for investor in snapshot.investors.values():
            if snapshot.total_funds > 0:
                pool_share_pct = round(investor.funds_invested * 100 / snapshot.total_funds, 2)
            else:
                pool_share_pct = 0.0

            rows.append({
                "account_id": investor.account_id,
                "nickname": investor.nickname,
                "is_owner": snapshot.is_owner(investor.account_id),
                "funds_invested": investor.funds_invested,
                "profit_rate": investor.profit_rate,
                "weight": investor.weight,
                "pool_share_pct": pool_share_pct,
                "profit": investor.profit,
            })

        return pd.DataFrame(rows, columns=INVESTOR_COLUMNS)

    def _compute_managers(self, snapshot: LedgerState) -> pd.DataFrame:
        rows = []
        for manager in snapshot.managers.values():
            own = [p for p in snapshot.proposals if p.manager == manager.account_id]
            rows.append({
                "account_id": manager.account_id,
                "nickname": manager.nickname,
                "profit_rate": manager.profit_rate,
                "funds_secured": manager.funds_secured,
                "profit": manager.profit,
                "proposals": len(own),
                "secured_proposals": sum(1 for p in own if p.secured),
            })

        return pd.DataFrame(rows, columns=MANAGER_COLUMNS)

"""Statement workbook renderer: one sheet per ledger report."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Font, Border, Side, Alignment, PatternFill
from openpyxl.utils import absolute_coordinate, get_column_letter
from openpyxl.workbook.defined_name import DefinedName
from openpyxl.worksheet.worksheet import Worksheet

from pooledfund_domain.blocks import BlockContext, BlockExecutor, standard_blocks
from pooledfund_domain.schemas import LedgerState, StatementCFG

logger = logging.getLogger(__name__)

AMOUNT_FORMAT = "#,##0"
PERCENT_FORMAT = "0.00"

# Columns holding amounts in the smallest currency unit; these get a totals row
AMOUNT_COLUMNS = {
    "funds_invested",
    "profit",
    "funds_secured",
    "required_funds",
    "revenue_received",
    "revenue_payed",
    "undistributed",
    "dust_retained",
    "amount",
}

SUMMARY_ROWS = [
    ("Total funds", "total_funds", "TotalFunds"),
    ("Free funds", "free_funds", "FreeFunds"),
    ("Committed funds", "committed_funds", "CommittedFunds"),
    ("Total revenue", "total_revenue", "TotalRevenue"),
    ("Revenue distributed", "revenue_distributed", "RevenueDistributed"),
    ("Undistributed revenue", "undistributed_revenue", "UndistributedRevenue"),
    ("Unclaimed dust", "undistributed_dust", "UnclaimedDust"),
    ("Investors", "investors", None),
    ("Managers", "managers", None),
    ("Proposals", "proposals", None),
    ("Secured proposals", "secured_proposals", None),
    ("Approval threshold (%)", "approve_share_threshold", "ApproveThreshold"),
]


class StatementRenderer:
    """Render a ledger snapshot into a statement workbook."""

    def __init__(self, config: Optional[StatementCFG] = None):
        self.config = config or StatementCFG()

        self.title_font = Font(bold=True, size=14)
        self.bold_font = Font(bold=True)
        self.italic_font = Font(italic=True, color="595959")

        # Header styling: white text on dark blue
        self.header_font = Font(bold=True, color="FFFFFF")
        self.header_fill = PatternFill(start_color="1F4E78", end_color="1F4E78", fill_type="solid")

        # Totals row styling
        self.totals_fill = PatternFill(start_color="E7E6E6", end_color="E7E6E6", fill_type="solid")
        self.top_border = Border(top=Side(style='medium'))

        self.center_align = Alignment(horizontal='center', vertical='center')

    def render(self, snapshot: LedgerState, output_path: str) -> str:
        wb = self.build_workbook(snapshot)
        wb.save(output_path)
        logger.info("Statement written to %s", output_path)
        return output_path

    def build_workbook(self, snapshot: LedgerState) -> Workbook:
        context = BlockExecutor(standard_blocks()).execute(BlockContext.for_snapshot(snapshot))

        wb = Workbook()
        wb.remove(wb.active)

        if self.config.include_summary_sheet:
            self._render_summary_sheet(wb, context.get("pool_summary"), snapshot)
        if self.config.include_investors_sheet:
            self._render_table_sheet(wb, "Investors", context.get("ledger_investors"))
        if self.config.include_managers_sheet:
            self._render_table_sheet(wb, "Managers", context.get("ledger_managers"))
        if self.config.include_proposals_sheet:
            self._render_table_sheet(wb, "Proposals", context.get("ledger_proposals"))
        if self.config.include_distributions_sheet:
            self._render_table_sheet(wb, "Distributions", context.get("ledger_distributions"))

        return wb

    # ------------------------------------------------------------------ #
    # Sheets
    # ------------------------------------------------------------------ #

    def _render_summary_sheet(self, wb: Workbook, summary_df: pd.DataFrame, snapshot: LedgerState) -> None:
        ws = wb.create_sheet("Summary")
        summary = summary_df.iloc[0]

        ws["A1"] = self.config.title
        ws["A1"].font = self.title_font
        ws["A2"] = f"Owner: {snapshot.owner_nickname} ({snapshot.owner_id})"
        ws["A3"] = f"Amounts in {self.config.currency_unit}"
        ws["A3"].font = self.italic_font

        row = 5
        for label, key, range_name in SUMMARY_ROWS:
            ws.cell(row=row, column=1, value=label).font = self.bold_font
            value_cell = ws.cell(row=row, column=2, value=self._plain(summary[key]))
            if key not in {"investors", "managers", "proposals", "secured_proposals", "approve_share_threshold"}:
                value_cell.number_format = AMOUNT_FORMAT
            if range_name:
                self._add_named_range(wb, ws.title, range_name, value_cell.coordinate)
            row += 1

        ws.column_dimensions["A"].width = 26
        ws.column_dimensions["B"].width = 18

    def _render_table_sheet(self, wb: Workbook, title: str, df: pd.DataFrame) -> Worksheet:
        """Write a DataFrame as a table with a header row and a totals row."""
        ws = wb.create_sheet(title)
        columns: List[str] = list(df.columns)

        for col_idx, column in enumerate(columns, start=1):
            cell = ws.cell(row=1, column=col_idx, value=column)
            cell.font = self.header_font
            cell.fill = self.header_fill
            cell.alignment = self.center_align
            ws.column_dimensions[get_column_letter(col_idx)].width = max(12, len(column) + 2)

        for row_offset, record in enumerate(df.itertuples(index=False), start=2):
            for col_idx, value in enumerate(record, start=1):
                cell = ws.cell(row=row_offset, column=col_idx, value=self._plain(value))
                column = columns[col_idx - 1]
                if column in AMOUNT_COLUMNS:
                    cell.number_format = AMOUNT_FORMAT
                elif column.endswith("_pct"):
                    cell.number_format = PERCENT_FORMAT

        ws.freeze_panes = "A2"

        if len(df) > 0:
            self._write_totals_row(ws, columns, first_row=2, last_row=len(df) + 1)

        return ws

    def _write_totals_row(self, ws: Worksheet, columns: List[str], first_row: int, last_row: int) -> None:
        totals_row = last_row + 1
        label_cell = ws.cell(row=totals_row, column=1, value="Total")
        label_cell.font = self.bold_font

        for col_idx in range(1, len(columns) + 1):
            cell = ws.cell(row=totals_row, column=col_idx)
            cell.fill = self.totals_fill
            cell.border = self.top_border

            if columns[col_idx - 1] in AMOUNT_COLUMNS:
                letter = get_column_letter(col_idx)
                cell.value = f"=SUM({letter}{first_row}:{letter}{last_row})"
                cell.number_format = AMOUNT_FORMAT
                cell.font = self.bold_font

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _add_named_range(self, workbook: Workbook, sheet_name: str, name: str, cell_ref: str) -> None:
        """Add a workbook-level name for a summary cell (e.g., TotalFunds)."""
        workbook.defined_names.add(
            DefinedName(
                name=name,
                attr_text=f"'{sheet_name}'!{absolute_coordinate(cell_ref)}"
            )
        )

    @staticmethod
    def _plain(value):
        """Convert numpy/pandas scalars to plain Python values openpyxl can write."""
        if value is None or value is pd.NA:
            return None
        if isinstance(value, float) and pd.isna(value):
            return None
        if hasattr(value, "item"):
            return value.item()
        return value

    def sheet_names(self) -> List[str]:
        """Sheets this renderer will produce, in order."""
        flags: Dict[str, bool] = {
            "Summary": self.config.include_summary_sheet,
            "Investors": self.config.include_investors_sheet,
            "Managers": self.config.include_managers_sheet,
            "Proposals": self.config.include_proposals_sheet,
            "Distributions": self.config.include_distributions_sheet,
        }
        return [name for name, enabled in flags.items() if enabled]


__all__ = ["StatementRenderer"]

"""Statement workbook configuration - entry point for Excel generation.

The StatementCFG says which ledger reports go into the statement workbook
and how they are labelled. It is what gets passed to the Excel renderer
together with a ledger snapshot.

The workbook is a read-only report of committed state. It is never read back
into a ledger.
"""

from pydantic import Field, field_validator, model_validator

from .base import DomainModel


class StatementCFG(DomainModel):
    """Top-level configuration for statement workbook generation.

    Typical workflows:

    Full statement:
        config = StatementCFG(title="Pool Statement")

    Investor-facing statement without manager fees:
        config = StatementCFG(
            title="Investor Statement",
            include_managers_sheet=False,
            include_distributions_sheet=False,
        )

    Generated sheets (depending on config):
        1. Summary - Pool totals, revenue, dust, counts
        2. Investors - Balances, rates, weights, pool share
        3. Managers - Funds secured, profit, fee rate
        4. Proposals - Status, approval share, revenue counters
        5. Distributions - One row per payee per revenue split
    """

    title: str = Field(
        default="Pool Statement",
        description="Title written at the top of the summary sheet"
    )

    currency_unit: str = Field(
        default="wei",
        description="Label for the smallest currency unit all amounts are expressed in"
    )

    include_summary_sheet: bool = Field(
        default=True,
        description="Include pool summary sheet"
    )

    include_investors_sheet: bool = Field(
        default=True,
        description="Include investors sheet"
    )

    include_managers_sheet: bool = Field(
        default=True,
        description="Include managers sheet"
    )

    include_proposals_sheet: bool = Field(
        default=True,
        description="Include proposals sheet"
    )

    include_distributions_sheet: bool = Field(
        default=True,
        description="Include revenue distributions sheet"
    )

    @field_validator('title')
    @classmethod
    def validate_title(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Statement title must not be blank")
        return v

    @model_validator(mode='after')
    def validate_some_sheet(self):
        """A workbook needs at least one sheet."""
        if not any((
            self.include_summary_sheet,
            self.include_investors_sheet,
            self.include_managers_sheet,
            self.include_proposals_sheet,
            self.include_distributions_sheet,
        )):
            raise ValueError("StatementCFG must include at least one sheet")
        return self

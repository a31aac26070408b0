"""Ledger configuration - fixed once the ledger is constructed."""

from pydantic import ConfigDict, Field

from .base import DomainModel, AccountId, ThresholdPercent


class LedgerCFG(DomainModel):
    """Construction parameters for a Ledger.

    Example:
        LedgerCFG(
            owner_id="0xa11",
            owner_nickname="Ali",
            approve_share_threshold=60,
        )

    The owner's implicit investor record always gets OWNER_PROFIT_RATE (110);
    it is a constant, not a configuration value.
    """

    model_config = ConfigDict(frozen=True)

    owner_id: AccountId = Field(
        description="Identity of the privileged owner (also an implicit investor)"
    )

    owner_nickname: str = Field(
        description="Display name of the owner"
    )

    approve_share_threshold: ThresholdPercent = Field(
        description="Percent of total_funds approvers must hold for a proposal to secure"
    )

    secure_on_deposit: bool = Field(
        default=False,
        description=(
            "Re-evaluate pending proposals after every deposit. When False a proposal "
            "stuck on insufficient free funds only secures on a fresh vote or an "
            "explicit reevaluate_proposal call."
        )
    )

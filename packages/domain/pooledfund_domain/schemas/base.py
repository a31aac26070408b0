"""Base classes and type system for ledger domain models.

This module provides the foundational types, validators, and base classes
used throughout the ledger schema system.

All money is held as integers in the smallest currency unit (wei-like). No
float or Decimal value ever takes part in ledger arithmetic.
"""

from typing import Annotated
from pydantic import BaseModel, Field, ConfigDict

# =============================================================================
# Base Model
# =============================================================================

class DomainModel(BaseModel):
    """Base class for all domain models.

    Provides common configuration for all Pydantic models in the domain layer:
    - Validation on assignment for runtime safety
    - Enum value serialization
    """

    model_config = ConfigDict(
        frozen=False,  # Ledger records are mutated in place by events
        validate_assignment=True,  # Validate on field assignment
        use_enum_values=True,  # Use enum values in JSON
    )


# =============================================================================
# Type Aliases - Numeric
# =============================================================================

Amount = Annotated[
    int,
    Field(ge=0, strict=True, description="Currency amount in smallest unit (non-negative integer)")
]

PositiveAmount = Annotated[
    int,
    Field(gt=0, strict=True, description="Currency amount in smallest unit (strictly positive integer)")
]

ProfitRate = Annotated[
    int,
    Field(
        ge=0,
        strict=True,
        description="Integer percentage weight (usually 0-100; the owner's rate exceeds 100)"
    )
]

ThresholdPercent = Annotated[
    int,
    Field(ge=0, le=100, strict=True, description="Integer percentage (0 to 100)")
]


# =============================================================================
# ID Conventions
# =============================================================================

AccountId = Annotated[
    str,
    Field(
        min_length=1,
        description="Opaque account identity (e.g., an address '0x70997970...')"
    )
]

ProposalIndex = Annotated[
    int,
    Field(ge=0, strict=True, description="0-based proposal index (never reused)")
]


# =============================================================================
# Constants
# =============================================================================

# Profit rate of the owner's implicit investor record. Externally registered
# investors get the rate supplied at registration (e.g., 95).
OWNER_PROFIT_RATE = 110

PERCENT = 100

"""Pooled Fund Domain Engine - Core ledger models and business logic.

This package provides the accounting and voting core of a pooled-capital
investment fund:
- Investors deposit capital into one shared pool
- Managers draw funds against investor-approved proposals
- Revenue returned by managers is split between the manager and all
  investors by configurable profit-sharing weights

The domain layer is designed to be:
- Framework-agnostic (no wallet, web or chain dependencies)
- Exact (integer arithmetic in the smallest currency unit, no floats)
- Auditable (every committed operation is journaled as an event)
"""

from .errors import *  # noqa: F403, F401
from .schemas import *  # noqa: F403, F401
from .ledger import Ledger  # noqa: F401

__version__ = "0.1.0"

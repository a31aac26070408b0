"""Excel statement rendering for the pooled fund ledger."""

from .statement_renderer import StatementRenderer

__all__ = ["StatementRenderer"]

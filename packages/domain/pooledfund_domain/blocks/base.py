"""Base classes for reporting blocks.

This module provides the foundation for the blocks architecture:
- Block abstract base class
- BlockContext for passing data between blocks
- BlockExecutor for dependency resolution and execution
- Topological sort for DAG execution order

Blocks only ever read a LedgerState snapshot; they never touch a live Ledger.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field

from ..schemas import LedgerState

SNAPSHOT_KEY = "ledger_snapshot"


# =============================================================================
# Block Context
# =============================================================================

@dataclass
class BlockContext:
    """Context object for passing data between blocks.

    Blocks read their inputs from context and write their outputs to context.

    Example:
        context = BlockContext.for_snapshot(ledger.snapshot())

        AccountsBlock().execute(context)
        investors_df = context.get("ledger_investors")
    """

    _data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def for_snapshot(cls, snapshot: LedgerState, key: str = SNAPSHOT_KEY) -> "BlockContext":
        """Context seeded with a ledger snapshot under the default key."""
        context = cls()
        context.set(key, snapshot)
        return context

    def get(self, key: str) -> Any:
        """Get value from context.

        Raises:
            KeyError: If key not found in context
        """
        if key not in self._data:
            raise KeyError(f"Key '{key}' not found in context. Available keys: {list(self._data.keys())}")
        return self._data[key]

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def has(self, key: str) -> bool:
        return key in self._data

    def keys(self) -> List[str]:
        return list(self._data.keys())


# =============================================================================
# Block Base Class
# =============================================================================

class Block(ABC):
    """Abstract base class for reporting blocks.

    A Block:
    1. Declares its input dependencies (what it reads from context)
    2. Declares its output keys (what it writes to context)
    3. Implements compute logic in execute()

    Subclass example:
        class AccountsBlock(Block):
            def inputs(self) -> List[str]:
                return ["ledger_snapshot"]

            def outputs(self) -> List[str]:
                return ["ledger_investors", "ledger_managers"]

            def execute(self, context: BlockContext) -> None:
                snapshot = context.get("ledger_snapshot")
                context.set("ledger_investors", investors_frame(snapshot))
                context.set("ledger_managers", managers_frame(snapshot))
    """

    @abstractmethod
    def inputs(self) -> List[str]:
        """Context keys this block reads."""
        pass

    @abstractmethod
    def outputs(self) -> List[str]:
        """Context keys this block writes."""
        pass

    @abstractmethod
    def execute(self, context: BlockContext) -> None:
        """Read inputs from context, compute, write outputs to context.

        Raises:
            KeyError: If required inputs not available in context
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(inputs={self.inputs()}, outputs={self.outputs()})"


# =============================================================================
# Dependency Resolution
# =============================================================================

class CircularDependencyError(Exception):
    """Raised when blocks have circular dependencies."""
    pass


def topological_sort(blocks: List[Block]) -> List[Block]:
    """Sort blocks so every block runs after the blocks producing its inputs.

    Kahn's algorithm. Inputs no block produces must come from the initial
    context (e.g. the ledger snapshot).

    Raises:
        ValueError: If two blocks produce the same output key
        CircularDependencyError: If blocks have circular dependencies

    Example:
        ProposalsBlock.outputs() = ["ledger_proposals", ...]
        PoolSummaryBlock.inputs() = ["ledger_snapshot", "ledger_proposals"]

        topological_sort([PoolSummaryBlock(), ProposalsBlock()])
        → [ProposalsBlock, PoolSummaryBlock]
    """
    producers: Dict[str, Block] = {}
    for block in blocks:
        for output_key in block.outputs():
            if output_key in producers:
                raise ValueError(
                    f"Multiple blocks produce '{output_key}': "
                    f"{producers[output_key]} and {block}"
                )
            producers[output_key] = block

    in_degree: Dict[Block, int] = {block: 0 for block in blocks}
    dependents: Dict[Block, List[Block]] = {block: [] for block in blocks}

    for block in blocks:
        for input_key in block.inputs():
            if input_key in producers:
                dependents[producers[input_key]].append(block)
                in_degree[block] += 1

    ready: List[Block] = [block for block in blocks if in_degree[block] == 0]
    ordered: List[Block] = []

    while ready:
        current = ready.pop(0)
        ordered.append(current)
        for dependent in dependents[current]:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                ready.append(dependent)

    if len(ordered) != len(blocks):
        remaining = [block for block in blocks if in_degree[block] > 0]
        raise CircularDependencyError(
            f"Circular dependency detected among blocks: {remaining}"
        )

    return ordered


# =============================================================================
# Block Executor
# =============================================================================

class BlockExecutor:
    """Executes blocks in dependency order.

    Example:
        executor = BlockExecutor([PoolSummaryBlock(), AccountsBlock(), ProposalsBlock()])
        context = executor.execute(BlockContext.for_snapshot(ledger.snapshot()))

        summary_df = context.get("pool_summary")
    """

    def __init__(self, blocks: List[Block]):
        self.blocks = blocks
        self._sorted_blocks: Optional[List[Block]] = None

    def execute(self, context: BlockContext) -> BlockContext:
        """Execute all blocks in dependency order.

        Raises:
            CircularDependencyError: If blocks have circular dependencies
            KeyError: If required inputs not available in context
            ValueError: If a block does not write a declared output
        """
        if self._sorted_blocks is None:
            self._sorted_blocks = topological_sort(self.blocks)

        for block in self._sorted_blocks:
            for input_key in block.inputs():
                if not context.has(input_key):
                    raise KeyError(
                        f"Block {block} requires input '{input_key}' but it's not in context. "
                        f"Available keys: {context.keys()}"
                    )

            block.execute(context)

            for output_key in block.outputs():
                if not context.has(output_key):
                    raise ValueError(
                        f"Block {block} declared output '{output_key}' but didn't write it to context"
                    )

        return context

"""Pure functions for computing statistics over generated programs."""

from __future__ import annotations

from collections import Counter

from .ir import ModuleOp


def count_operations(
    module: ModuleOp, include_terminators: bool = False
) -> dict[str, int]:
    """Return a frequency map of operation names in the given module.

    Args:
        module: A generated module.
        include_terminators: Whether to count ``func.return`` as well.

    Returns:
        A dict mapping operation names to their occurrence counts.
        Empty dict for a module with empty function bodies.
    """
    return dict(
        Counter(
            op.name
            for func in module.functions
            for op in func.body.operations
            if include_terminators or not op.is_terminator
        )
    )


def count_arguments(module: ModuleOp) -> int:
    """Total number of function parameters across the module."""
    return sum(func.num_arguments for func in module.functions)

"""Structural well-formedness checks for generated programs."""

from __future__ import annotations

import logging

from .catalog import Catalog
from .ir import BlockArgument, FuncOp, ModuleOp, OpResult, Value, value_names

logger = logging.getLogger(__name__)


class ProgramVerificationError(Exception):
    """Raised by ``check_module`` when a program is not well-formed."""

    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__("; ".join(problems))


def _describe(value: Value, names: dict[Value, str]) -> str:
    return names.get(value, f"<{type(value).__name__}:{value.type}>")


def verify_function(
    func: FuncOp,
    max_operations: int | None = None,
    catalog: Catalog | None = None,
) -> list[str]:
    """Return the problems found in ``func``; empty when well-formed.

    Walks the body forward keeping the set of defined values, the same
    way a def-use pass tracks local definitions within a block.
    """
    problems: list[str] = []
    names = value_names(func)
    defined: set[Value] = set(func.arguments)
    operations = func.body.operations
    signatures = {kind.name: kind for kind in catalog.operations} if catalog else {}

    for arg in func.arguments:
        if arg.owner is not func:
            problems.append(f"@{func.name}: argument {names[arg]} has foreign owner")

    for position, op in enumerate(operations):
        for operand in op.operands:
            if operand in defined:
                continue
            if isinstance(operand, BlockArgument):
                problems.append(
                    f"@{func.name}: {op.name} at {position} uses an argument "
                    f"of another function"
                )
            elif isinstance(operand, OpResult) and operand in names:
                problems.append(
                    f"@{func.name}: {op.name} at {position} uses "
                    f"{_describe(operand, names)} before its definition"
                )
            else:
                problems.append(
                    f"@{func.name}: {op.name} at {position} uses out-of-scope "
                    f"value {_describe(operand, names)}"
                )
        kind = signatures.get(op.name)
        if kind is not None:
            operand_types = [str(v.type) for v in op.operands]
            result_types = [str(r.type) for r in op.results]
            if (operand_types, result_types) != (
                kind.operand_types,
                kind.result_types,
            ):
                problems.append(
                    f"@{func.name}: {op.name} at {position} has signature "
                    f"{operand_types} -> {result_types}, expected {kind}"
                )
        for result in op.results:
            if result.owner is not op:
                problems.append(
                    f"@{func.name}: result {names[result]} of {op.name} "
                    f"has foreign owner"
                )
        defined.update(op.results)
        if op.is_terminator and position != len(operations) - 1:
            problems.append(f"@{func.name}: terminator at {position} is not last")

    if func.body.terminator is None:
        problems.append(f"@{func.name}: body is not terminated")

    body_ops = sum(1 for op in operations if not op.is_terminator)
    if max_operations is not None and body_ops > max_operations:
        problems.append(
            f"@{func.name}: {body_ops} operations exceed the bound {max_operations}"
        )
    return problems


def verify_module(
    module: ModuleOp,
    max_operations: int | None = None,
    catalog: Catalog | None = None,
) -> list[str]:
    problems: list[str] = []
    for func in module.functions:
        problems.extend(verify_function(func, max_operations, catalog))
    return problems


def check_module(
    module: ModuleOp,
    max_operations: int | None = None,
    catalog: Catalog | None = None,
) -> None:
    problems = verify_module(module, max_operations, catalog)
    if problems:
        logger.error("Program failed verification:\n%s", module)
        raise ProgramVerificationError(problems)

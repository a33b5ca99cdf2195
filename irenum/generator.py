"""Program builder — turns one chooser's decisions into one candidate program."""

from __future__ import annotations

import logging
from enum import Enum

from .catalog import Catalog, OperationKind, default_catalog
from .errors import ConfigurationError
from .guide import Chooser
from .ir import FuncOp, IRContext, IRType, ModuleOp, Operation, Value
from .scope import SYNTHESIZE, DominatingValues
from . import constants

logger = logging.getLogger(__name__)


class ParameterPlacement(Enum):
    """Where a synthesized function parameter is inserted."""

    ANY_POSITION = "any"
    APPEND = "append"


class ProgramGenerator:
    """Builds a single function, consulting the chooser at every branch point.

    Init creates ``@foo`` with no parameters; Grow picks an operation count
    once and then each operation kind and its operands; Finish appends the
    terminator.
    """

    def __init__(
        self,
        ctx: IRContext,
        chooser: Chooser,
        catalog: Catalog,
        placement: ParameterPlacement = ParameterPlacement.ANY_POSITION,
        types: dict[str, IRType] | None = None,
    ):
        self.ctx = ctx
        self.chooser = chooser
        self.catalog = catalog
        self.placement = placement
        self._types = types if types is not None else catalog.resolve(ctx)
        self.dominating = DominatingValues()
        self.module: ModuleOp | None = None
        self.func: FuncOp | None = None

    def _init(self) -> None:
        self.module = self.ctx.create_module()
        self.func = self.module.add_function(
            FuncOp(name=constants.ENTRY_FUNCTION_NAME, private=True)
        )

    def get_value(self, value_type: IRType, operation: str | None = None) -> Value:
        """Return an operand of ``value_type``, adding a parameter if chosen."""
        sampled = self.dominating.sample(value_type, self.chooser, operation)
        if sampled is not SYNTHESIZE:
            return sampled

        if self.placement == ParameterPlacement.APPEND:
            index = self.func.num_arguments
        else:
            # Costly when enumerating: multiplies every synthesis by its positions.
            index = self.chooser.choose(self.func.num_arguments + 1)
        arg = self.func.insert_argument(index, value_type)
        self.dominating.record(arg)
        return arg

    def add_operation(self) -> Operation:
        kind: OperationKind = self.catalog[self.chooser.choose(self.catalog.size)]
        operands = [
            self.get_value(self._types[name], kind.name) for name in kind.operand_types
        ]
        op = Operation.create(
            kind.name, operands, [self._types[name] for name in kind.result_types]
        )
        self.func.body.append(op)
        for result in op.results:
            self.dominating.record(result)
        return op

    def create_program(self, fuel: int) -> ModuleOp:
        """Build a module whose function has at most ``fuel`` operations."""
        if fuel < 0:
            raise ConfigurationError(f"Operation budget must be >= 0, got {fuel}")
        if self.catalog.size == 0:
            raise ConfigurationError("Catalog has no operation kinds")
        self._init()
        num_ops = self.chooser.choose(fuel + 1)
        for _ in range(num_ops):
            self.add_operation()
        self.func.body.append(Operation.create(constants.RETURN_OP, [], []))
        logger.debug(
            "Built program: %d operations, %d arguments, decisions=%s",
            num_ops,
            self.func.num_arguments,
            self.chooser.decisions,
        )
        return self.module


def create_program(
    ctx: IRContext,
    chooser: Chooser,
    fuel: int = constants.DEFAULT_MAX_OPERATIONS,
    catalog: Catalog | None = None,
    placement: ParameterPlacement = ParameterPlacement.ANY_POSITION,
) -> ModuleOp:
    """Create one program from the decisions ``chooser`` hands out."""
    catalog = catalog if catalog is not None else default_catalog()
    return ProgramGenerator(ctx, chooser, catalog, placement).create_program(fuel)

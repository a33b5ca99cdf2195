"""IR Design — functions, blocks, operations and the values they define."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict

from .errors import ConfigurationError
from . import constants

logger = logging.getLogger(__name__)


class IRType(BaseModel):
    """A primitive type; interned per ``IRContext``.

    ``synthesizable`` types may be introduced as new function parameters.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    synthesizable: bool = True

    def __str__(self) -> str:
        return self.name


# ── Values ───────────────────────────────────────────────────────


@dataclass(eq=False)
class Value:
    type: IRType


@dataclass(eq=False)
class BlockArgument(Value):
    owner: FuncOp | None = field(default=None, repr=False)


@dataclass(eq=False)
class OpResult(Value):
    owner: Operation | None = field(default=None, repr=False)
    index: int = 0


# ── Operations & structure ───────────────────────────────────────


@dataclass(eq=False)
class Operation:
    name: str
    operands: list[Value] = field(default_factory=list)
    results: list[OpResult] = field(default_factory=list)

    @classmethod
    def create(
        cls, name: str, operands: list[Value], result_types: list[IRType]
    ) -> Operation:
        op = cls(name=name, operands=list(operands))
        op.results = [
            OpResult(type=t, owner=op, index=i) for i, t in enumerate(result_types)
        ]
        return op

    @property
    def is_terminator(self) -> bool:
        return self.name == constants.RETURN_OP


@dataclass(eq=False)
class Block:
    operations: list[Operation] = field(default_factory=list)

    def append(self, op: Operation) -> Operation:
        """Insert at the cursor, which always sits after the last operation."""
        self.operations.append(op)
        return op

    @property
    def terminator(self) -> Operation | None:
        if self.operations and self.operations[-1].is_terminator:
            return self.operations[-1]
        return None

    def __len__(self) -> int:
        return len(self.operations)


@dataclass(eq=False)
class FuncOp:
    name: str
    private: bool = True
    arguments: list[BlockArgument] = field(default_factory=list)
    body: Block = field(default_factory=Block)

    @property
    def num_arguments(self) -> int:
        return len(self.arguments)

    def insert_argument(self, index: int, arg_type: IRType) -> BlockArgument:
        """Insert a new parameter at ``index`` (``0 <= index <= num_arguments``)."""
        if not 0 <= index <= len(self.arguments):
            raise IndexError(
                f"Argument index {index} out of range for '{self.name}' "
                f"with {len(self.arguments)} arguments"
            )
        if not arg_type.synthesizable:
            raise ValueError(f"Type '{arg_type}' cannot be a function argument")
        arg = BlockArgument(type=arg_type, owner=self)
        self.arguments.insert(index, arg)
        return arg

    def argument_types(self) -> list[IRType]:
        return [arg.type for arg in self.arguments]


@dataclass(eq=False)
class ModuleOp:
    functions: list[FuncOp] = field(default_factory=list)

    def add_function(self, func: FuncOp) -> FuncOp:
        self.functions.append(func)
        return func

    def lookup(self, name: str) -> FuncOp | None:
        for func in self.functions:
            if func.name == name:
                return func
        return None

    def __str__(self) -> str:
        return print_module(self)


# ── Context ──────────────────────────────────────────────────────


class IRContext:
    """Process-wide handle owning interned types; passed explicitly."""

    def __init__(self):
        self._types: dict[str, IRType] = {}
        self._closed = False
        self.modules_created = 0

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("IRContext used after close()")

    def get_type(self, name: str, synthesizable: bool = True) -> IRType:
        self._check_open()
        existing = self._types.get(name)
        if existing is None:
            existing = IRType(name=name, synthesizable=synthesizable)
            self._types[name] = existing
        elif existing.synthesizable != synthesizable:
            raise ConfigurationError(
                "Conflicting type declarations", type_name=name
            )
        return existing

    def lookup_type(self, name: str) -> IRType | None:
        return self._types.get(name)

    def integer_type(self, width: int) -> IRType:
        return self.get_type(constants.INTEGER_TYPE_TEMPLATE.format(width=width))

    def none_type(self) -> IRType:
        return self.get_type(constants.NONE_TYPE, synthesizable=False)

    @property
    def types(self) -> list[IRType]:
        return list(self._types.values())

    def create_module(self) -> ModuleOp:
        self._check_open()
        self.modules_created += 1
        return ModuleOp()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if not self._closed:
            logger.debug(
                "Closing IR context (%d types, %d modules)",
                len(self._types),
                self.modules_created,
            )
            self._types.clear()
            self._closed = True

    def __enter__(self) -> IRContext:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


# ── Printing ─────────────────────────────────────────────────────


def value_names(func: FuncOp) -> dict[Value, str]:
    """Name arguments by current position and results in body order."""
    names: dict[Value, str] = {
        arg: f"{constants.ARG_PREFIX}{i}" for i, arg in enumerate(func.arguments)
    }
    counter = 0
    for op in func.body.operations:
        for result in op.results:
            names[result] = f"{constants.RESULT_PREFIX}{counter}"
            counter += 1
    return names


def _print_operation(op: Operation, names: dict[Value, str]) -> str:
    operands = ", ".join(
        names.get(v, constants.UNKNOWN_VALUE) for v in op.operands
    )
    operand_types = ", ".join(str(v.type) for v in op.operands)
    result_types = ", ".join(str(r.type) for r in op.results)
    if len(op.results) != 1:
        result_types = f"({result_types})"
    text = f'"{op.name}"({operands}) : ({operand_types}) -> {result_types}'
    if op.results:
        lhs = ", ".join(names[r] for r in op.results)
        text = f"{lhs} = {text}"
    return text


def print_function(func: FuncOp) -> str:
    names = value_names(func)
    params = ", ".join(f"{names[a]}: {a.type}" for a in func.arguments)
    visibility = "private " if func.private else ""
    lines = [f"func.func {visibility}@{func.name}({params}) {{"]
    for op in func.body.operations:
        lines.append(f"  {_print_operation(op, names)}")
    lines.append("}")
    return "\n".join(lines)


def print_module(module: ModuleOp) -> str:
    lines = ["module {"]
    for func in module.functions:
        lines.extend(f"  {line}" for line in print_function(func).splitlines())
    lines.append("}")
    return "\n".join(lines)


def module_to_dict(module: ModuleOp) -> dict[str, Any]:
    """JSON-friendly dump of a module."""
    functions = []
    for func in module.functions:
        names = value_names(func)
        functions.append(
            {
                "name": func.name,
                "private": func.private,
                "arguments": [str(a.type) for a in func.arguments],
                "operations": [
                    {
                        "name": op.name,
                        "operands": [
                            names.get(v, constants.UNKNOWN_VALUE)
                            for v in op.operands
                        ],
                        "results": [
                            {"name": names[r], "type": str(r.type)}
                            for r in op.results
                        ],
                    }
                    for op in func.body.operations
                ],
            }
        )
    return {"functions": functions}

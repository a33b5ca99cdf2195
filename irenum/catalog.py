"""Operation catalog — the operation kinds a generation session may emit."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from .errors import CatalogLoadError, ConfigurationError
from .ir import IRContext, IRType
from . import constants

logger = logging.getLogger(__name__)


class TypeSpec(BaseModel):
    name: str
    synthesizable: bool = True


class OperationKind(BaseModel):
    """Signature descriptor: fixed operand and result types."""

    name: str
    operand_types: list[str] = Field(default_factory=list)
    result_types: list[str] = Field(default_factory=list)

    @property
    def arity(self) -> int:
        return len(self.operand_types)

    def __str__(self) -> str:
        operands = ", ".join(self.operand_types)
        results = ", ".join(self.result_types)
        return f"{self.name} : ({operands}) -> ({results})"


class Catalog(BaseModel):
    """Ordered operation kinds; the order is the decision index space."""

    operations: list[OperationKind] = Field(default_factory=list)
    types: list[TypeSpec] = Field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.operations)

    def __len__(self) -> int:
        return len(self.operations)

    def __getitem__(self, index: int) -> OperationKind:
        return self.operations[index]

    def names(self) -> list[str]:
        return [op.name for op in self.operations]

    def resolve(self, ctx: IRContext) -> dict[str, IRType]:
        """Intern every declared type in ``ctx`` and check each signature."""
        if not self.operations:
            raise ConfigurationError("Catalog has no operation kinds")
        resolved = {
            spec.name: ctx.get_type(spec.name, synthesizable=spec.synthesizable)
            for spec in self.types
        }
        for op in self.operations:
            for type_name in [*op.operand_types, *op.result_types]:
                if type_name not in resolved:
                    raise ConfigurationError(
                        "Operation references an undeclared type",
                        operation=op.name,
                        type_name=type_name,
                    )
        logger.info(
            "Resolved catalog: %d operation kinds over %d types",
            len(self.operations),
            len(resolved),
        )
        return resolved


def default_catalog() -> Catalog:
    """Two binary integer operations, both ``(i32, i32) -> i32``."""
    binary = dict(
        operand_types=[constants.I32_TYPE, constants.I32_TYPE],
        result_types=[constants.I32_TYPE],
    )
    return Catalog(
        operations=[
            OperationKind(name=constants.ADDI_OP, **binary),
            OperationKind(name=constants.MULI_OP, **binary),
        ],
        types=[TypeSpec(name=constants.I32_TYPE)],
    )


def load_catalog(path: str | Path) -> Catalog:
    """Load a catalog from a JSON file."""
    path = Path(path)
    try:
        text = path.read_text()
    except OSError as exc:
        raise CatalogLoadError(f"Cannot read catalog file {path}: {exc}") from exc
    try:
        catalog = Catalog.model_validate_json(text)
    except ValidationError as exc:
        raise CatalogLoadError(f"Invalid catalog file {path}: {exc}") from exc
    logger.info("Loaded catalog from %s: %s", path, ", ".join(catalog.names()))
    return catalog

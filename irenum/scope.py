"""Dominating values — what may be used as an operand at the insertion point."""

from __future__ import annotations

import logging

from .errors import ConfigurationError
from .guide import Chooser
from .ir import IRType, Value

logger = logging.getLogger(__name__)


class _Synthesize:
    """Sentinel: the caller must introduce a new value of the requested type."""

    def __repr__(self) -> str:
        return "SYNTHESIZE"


SYNTHESIZE = _Synthesize()


class DominatingValues:
    """Values dominating the insertion point, grouped by type.

    Construction proceeds strictly forward through a single block, so values
    are only ever added. Per-type lists keep recording order, which is the
    index space of the "which existing value" decision.
    """

    def __init__(self):
        self._by_type: dict[IRType, list[Value]] = {}
        self._members: set[Value] = set()

    def record(self, value: Value) -> None:
        self._by_type.setdefault(value.type, []).append(value)
        self._members.add(value)

    def count(self, value_type: IRType) -> int:
        return len(self._by_type.get(value_type, ()))

    def values(self, value_type: IRType) -> list[Value]:
        return list(self._by_type.get(value_type, ()))

    def types(self) -> list[IRType]:
        return list(self._by_type)

    def __contains__(self, value: Value) -> bool:
        return value in self._members

    def __len__(self) -> int:
        return len(self._members)

    def sample(
        self, value_type: IRType, chooser: Chooser, operation: str | None = None
    ) -> Value | _Synthesize:
        """Pick an existing value of ``value_type`` or signal ``SYNTHESIZE``.

        Synthesizable types offer ``count + 1`` options, the last meaning a
        new value; other types offer only the ``count`` existing values.
        """
        existing = self._by_type.get(value_type, [])
        if not value_type.synthesizable:
            if not existing:
                raise ConfigurationError(
                    "No value in scope and type cannot be synthesized",
                    operation=operation,
                    type_name=value_type.name,
                )
            return existing[chooser.choose(len(existing))]
        choice = chooser.choose(len(existing) + 1)
        if choice < len(existing):
            return existing[choice]
        return SYNTHESIZE

"""Tests for DominatingValues — the per-type scope model."""

import pytest

from irenum.errors import ConfigurationError
from irenum.guide import ReplayChooser
from irenum.ir import BlockArgument, IRContext, Operation
from irenum.scope import SYNTHESIZE, DominatingValues


def _i32():
    return IRContext().integer_type(32)


class TestRecord:
    def test_count_starts_at_zero(self):
        scope = DominatingValues()
        assert scope.count(_i32()) == 0
        assert len(scope) == 0

    def test_record_preserves_order(self):
        i32 = _i32()
        scope = DominatingValues()
        values = [BlockArgument(type=i32) for _ in range(3)]
        for value in values:
            scope.record(value)
        assert scope.values(i32) == values
        assert scope.count(i32) == 3
        assert values[1] in scope

    def test_values_grouped_by_type(self):
        ctx = IRContext()
        i32, i64 = ctx.integer_type(32), ctx.integer_type(64)
        scope = DominatingValues()
        scope.record(BlockArgument(type=i32))
        scope.record(BlockArgument(type=i64))
        scope.record(Operation.create("arith.addi", [], [i32]).results[0])
        assert scope.count(i32) == 2
        assert scope.count(i64) == 1
        assert scope.types() == [i32, i64]


class TestSample:
    def test_empty_synthesizable_type_offers_only_synthesis(self):
        chooser = ReplayChooser([])
        assert DominatingValues().sample(_i32(), chooser) is SYNTHESIZE
        assert chooser.bounds == (1,)

    def test_index_names_recorded_value(self):
        i32 = _i32()
        scope = DominatingValues()
        first, second = BlockArgument(type=i32), BlockArgument(type=i32)
        scope.record(first)
        scope.record(second)
        assert scope.sample(i32, ReplayChooser([0])) is first
        assert scope.sample(i32, ReplayChooser([1])) is second

    def test_last_index_means_synthesize(self):
        i32 = _i32()
        scope = DominatingValues()
        scope.record(BlockArgument(type=i32))
        scope.record(BlockArgument(type=i32))
        chooser = ReplayChooser([2])
        assert scope.sample(i32, chooser) is SYNTHESIZE
        assert chooser.bounds == (3,)

    def test_repeated_sampling_offers_same_count(self):
        i32 = _i32()
        scope = DominatingValues()
        scope.record(BlockArgument(type=i32))
        chooser = ReplayChooser([0, 1])
        scope.sample(i32, chooser)
        scope.sample(i32, chooser)
        assert chooser.bounds == (2, 2)

    def test_unsynthesizable_type_uses_existing_values_only(self):
        none = IRContext().none_type()
        scope = DominatingValues()
        value = Operation.create("test.make", [], [none]).results[0]
        scope.record(value)
        chooser = ReplayChooser([])
        assert scope.sample(none, chooser) is value
        assert chooser.bounds == (1,)

    def test_unsynthesizable_empty_type_is_configuration_error(self):
        none = IRContext().none_type()
        with pytest.raises(ConfigurationError) as exc_info:
            DominatingValues().sample(none, ReplayChooser([]), operation="test.use")
        assert exc_info.value.operation == "test.use"
        assert exc_info.value.type_name == "none"
        assert "test.use" in str(exc_info.value)

"""Tests for program statistics: count_operations and count_arguments."""

from irenum.driver import EnumerationConfig, replay_program
from irenum.ir import FuncOp, IRContext, ModuleOp, Operation
from irenum.ir_stats import count_arguments, count_operations


def _module(*names):
    i32 = IRContext().integer_type(32)
    func = FuncOp(name="foo")
    arg = func.insert_argument(0, i32)
    for name in names:
        func.body.append(Operation.create(name, [arg, arg], [i32]))
    func.body.append(Operation.create("func.return", [], []))
    return ModuleOp(functions=[func])


class TestCountOperations:
    def test_empty_body_returns_empty_dict(self):
        assert count_operations(_module()) == {}

    def test_terminator_counted_on_request(self):
        result = count_operations(_module(), include_terminators=True)
        assert result == {"func.return": 1}

    def test_repeated_operations_are_summed(self):
        result = count_operations(_module("arith.addi", "arith.muli", "arith.addi"))
        assert result == {"arith.addi": 2, "arith.muli": 1}

    def test_returns_dict_of_str_to_int(self):
        result = count_operations(_module("arith.addi"))
        assert all(isinstance(k, str) for k in result)
        assert all(isinstance(v, int) for v in result.values())

    def test_generated_program(self):
        decisions = [2, 0, 0, 0, 0, 1, 1, 0]
        module = replay_program(decisions, EnumerationConfig(max_operations=2))
        assert count_operations(module) == {"arith.addi": 1, "arith.muli": 1}


class TestCountArguments:
    def test_single_argument(self):
        assert count_arguments(_module("arith.addi")) == 1

    def test_empty_module(self):
        assert count_arguments(ModuleOp()) == 0

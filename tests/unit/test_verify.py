"""Tests for structural verification of generated programs."""

import pytest

from irenum.catalog import default_catalog
from irenum.ir import FuncOp, IRContext, ModuleOp, Operation
from irenum.verify import ProgramVerificationError, check_module, verify_module


def _func_with_argument():
    i32 = IRContext().integer_type(32)
    func = FuncOp(name="foo")
    arg = func.insert_argument(0, i32)
    return func, arg, i32


def _ret():
    return Operation.create("func.return", [], [])


class TestVerifyModule:
    def test_well_formed_program(self):
        func, arg, i32 = _func_with_argument()
        add = func.body.append(Operation.create("arith.addi", [arg, arg], [i32]))
        func.body.append(
            Operation.create("arith.muli", [add.results[0], arg], [i32])
        )
        func.body.append(_ret())
        module = ModuleOp(functions=[func])
        problems = verify_module(module, max_operations=2, catalog=default_catalog())
        assert problems == []

    def test_use_before_definition(self):
        func, arg, i32 = _func_with_argument()
        later = Operation.create("arith.addi", [arg, arg], [i32])
        func.body.append(Operation.create("arith.muli", [later.results[0], arg], [i32]))
        func.body.append(later)
        func.body.append(_ret())
        problems = verify_module(ModuleOp(functions=[func]))
        assert len(problems) == 1
        assert "before its definition" in problems[0]

    def test_foreign_argument(self):
        func, arg, i32 = _func_with_argument()
        _, other_arg, _ = _func_with_argument()
        func.body.append(Operation.create("arith.addi", [arg, other_arg], [i32]))
        func.body.append(_ret())
        problems = verify_module(ModuleOp(functions=[func]))
        assert problems == ["@foo: arith.addi at 0 uses an argument of another function"]

    def test_out_of_scope_result(self):
        func, arg, i32 = _func_with_argument()
        detached = Operation.create("arith.addi", [arg, arg], [i32])
        func.body.append(
            Operation.create("arith.muli", [detached.results[0], arg], [i32])
        )
        func.body.append(_ret())
        problems = verify_module(ModuleOp(functions=[func]))
        assert "out-of-scope" in problems[0]

    def test_missing_terminator(self):
        func, _, _ = _func_with_argument()
        assert verify_module(ModuleOp(functions=[func])) == [
            "@foo: body is not terminated"
        ]

    def test_terminator_not_last(self):
        func, arg, i32 = _func_with_argument()
        func.body.append(_ret())
        func.body.append(Operation.create("arith.addi", [arg, arg], [i32]))
        func.body.append(_ret())
        problems = verify_module(ModuleOp(functions=[func]))
        assert problems == ["@foo: terminator at 0 is not last"]

    def test_operation_bound(self):
        func, arg, i32 = _func_with_argument()
        for _ in range(3):
            func.body.append(Operation.create("arith.addi", [arg, arg], [i32]))
        func.body.append(_ret())
        problems = verify_module(ModuleOp(functions=[func]), max_operations=2)
        assert problems == ["@foo: 3 operations exceed the bound 2"]

    def test_signature_mismatch(self):
        func, arg, i32 = _func_with_argument()
        func.body.append(Operation.create("arith.addi", [arg], [i32]))
        func.body.append(_ret())
        problems = verify_module(ModuleOp(functions=[func]), catalog=default_catalog())
        assert len(problems) == 1
        assert "expected arith.addi" in problems[0]


class TestCheckModule:
    def test_raises_with_problems(self):
        func, _, _ = _func_with_argument()
        with pytest.raises(ProgramVerificationError) as exc_info:
            check_module(ModuleOp(functions=[func]))
        assert exc_info.value.problems == ["@foo: body is not terminated"]

    def test_passes_silently(self):
        func, _, _ = _func_with_argument()
        func.body.append(_ret())
        check_module(ModuleOp(functions=[func]))

"""
Tests for the term model: construction, sorts, depth, evaluation, printing.
"""

import dataclasses

import pytest

from typefuzz.errors import TermSortError
from typefuzz.term import (
    BoolLiteral,
    IntLiteral,
    OperatorKind,
    Operation,
    Sort,
    Variable,
    check_well_sorted,
    evaluate,
    free_variables,
    sort_of,
    term_depth,
    term_size,
    to_smtlib,
)


def add(a, b):
    return Operation(OperatorKind.ADD, (a, b))


def test_operator_table():
    assert OperatorKind.ADD.symbol == "+"
    assert OperatorKind.EQ.symbol == "="
    assert OperatorKind.XOR.symbol == "xor"
    for kind in OperatorKind:
        assert kind.arity == 2
    assert OperatorKind.GT.arg_sort is Sort.INT
    assert OperatorKind.GT.result_sort is Sort.BOOL
    assert OperatorKind.AND.arg_sort is Sort.BOOL


def test_operation_rejects_wrong_arity():
    with pytest.raises(TermSortError):
        Operation(OperatorKind.ADD, (IntLiteral(1),))
    with pytest.raises(TermSortError):
        Operation(OperatorKind.AND, (BoolLiteral(True),) * 3)


def test_children_are_stored_as_tuple():
    op = Operation(OperatorKind.SUB, [IntLiteral(1), IntLiteral(2)])
    assert op.children == (IntLiteral(1), IntLiteral(2))
    assert op == Operation(OperatorKind.SUB, (IntLiteral(1), IntLiteral(2)))
    assert hash(op) == hash(Operation(OperatorKind.SUB, (IntLiteral(1), IntLiteral(2))))


def test_terms_are_immutable():
    lit = IntLiteral(3)
    with pytest.raises(dataclasses.FrozenInstanceError):
        lit.value = 4
    op = add(IntLiteral(1), IntLiteral(2))
    with pytest.raises(dataclasses.FrozenInstanceError):
        op.kind = OperatorKind.MULT


def test_sort_of():
    assert sort_of(IntLiteral(0)) is Sort.INT
    assert sort_of(BoolLiteral(False)) is Sort.BOOL
    assert sort_of(Variable("x")) is Sort.INT
    assert sort_of(Variable("p", Sort.BOOL)) is Sort.BOOL
    assert sort_of(Operation(OperatorKind.LT, (IntLiteral(1), IntLiteral(2)))) is Sort.BOOL


def test_check_well_sorted_accepts_valid_tree():
    cmp = Operation(OperatorKind.GT, (add(IntLiteral(1), Variable("x")), IntLiteral(2)))
    formula = Operation(OperatorKind.OR, (cmp, BoolLiteral(True)))
    assert check_well_sorted(formula) is Sort.BOOL
    assert check_well_sorted(add(IntLiteral(1), IntLiteral(2))) is Sort.INT


@pytest.mark.parametrize("bad", [
    Operation(OperatorKind.AND, (IntLiteral(1), BoolLiteral(True))),
    Operation(OperatorKind.ADD, (IntLiteral(1), BoolLiteral(True))),
    Operation(OperatorKind.EQ, (BoolLiteral(True), BoolLiteral(True))),
    Operation(OperatorKind.XOR, (BoolLiteral(True), Operation(OperatorKind.MULT, (IntLiteral(2), IntLiteral(3))))),
])
def test_check_well_sorted_rejects_mixed_sorts(bad):
    with pytest.raises(TermSortError):
        check_well_sorted(bad)


def test_depth_and_size():
    assert term_depth(IntLiteral(5)) == 0
    assert term_depth(BoolLiteral(True)) == 0
    nested = add(add(IntLiteral(1), IntLiteral(2)), IntLiteral(3))
    assert term_depth(nested) == 2
    assert term_size(nested) == 5


def test_evaluate():
    env = {"x": 7}
    expr = Operation(OperatorKind.MULT, (Operation(OperatorKind.SUB, (Variable("x"), IntLiteral(2))), IntLiteral(-3)))
    assert evaluate(expr, env) == -15
    assert evaluate(Operation(OperatorKind.EQ, (IntLiteral(4), IntLiteral(4)))) is True
    assert evaluate(Operation(OperatorKind.XOR, (BoolLiteral(True), BoolLiteral(True)))) is False
    assert evaluate(Operation(OperatorKind.XOR, (BoolLiteral(True), BoolLiteral(False)))) is True
    assert evaluate(Operation(OperatorKind.AND, (BoolLiteral(True), BoolLiteral(False)))) is False
    assert evaluate(Operation(OperatorKind.OR, (BoolLiteral(True), BoolLiteral(False)))) is True


def test_evaluate_unbound_variable():
    with pytest.raises(KeyError):
        evaluate(Variable("y"))


def test_free_variables_in_order_without_duplicates():
    x, y = Variable("x"), Variable("y")
    expr = add(add(x, y), add(x, IntLiteral(1)))
    assert free_variables(expr) == [x, y]
    assert free_variables(IntLiteral(1)) == []


def test_to_smtlib():
    assert to_smtlib(IntLiteral(3)) == "3"
    assert to_smtlib(IntLiteral(-4)) == "(- 4)"
    assert to_smtlib(BoolLiteral(False)) == "false"
    assert to_smtlib(add(IntLiteral(3), IntLiteral(-4))) == "(+ 3 (- 4))"
    formula = Operation(OperatorKind.AND, (
        Operation(OperatorKind.GT, (Variable("x"), IntLiteral(0))),
        BoolLiteral(True),
    ))
    assert to_smtlib(formula) == "(and (> x 0) true)"
    assert str(formula) == to_smtlib(formula)

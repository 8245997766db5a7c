"""
Tests for the in-process solver adapters and the solver registry.
"""

import pytest

from typefuzz.errors import AdapterError, ConfigurationError
from typefuzz.solver.base import Outcome, SatResult, SolverAdapter
from typefuzz.solver.evaluating_solver import EvaluatingSolver
from typefuzz.solver.process_solver import ProcessSolver
from typefuzz.solver.registry import get_available_solvers, make_solver
from typefuzz.solver.stub_solver import StubSolver
from typefuzz.solver.z3_solver import Z3Solver
from typefuzz.term import BoolLiteral, IntLiteral, OperatorKind, Operation, Sort, Variable


def op(kind, a, b):
    return Operation(kind, (a, b))


TRUE_CMP = op(OperatorKind.GT, IntLiteral(3), IntLiteral(2))
FALSE_CMP = op(OperatorKind.LT, IntLiteral(3), IntLiteral(2))
X = Variable("x")


# -- Outcome ------------------------------------------------------------------

def test_outcome_constructors_and_text():
    assert Outcome.sat().result is SatResult.SAT
    assert Outcome.error("timeout") == Outcome(SatResult.ERROR, "timeout")
    assert str(Outcome.unsat()) == "unsat"
    assert str(Outcome.error("timeout")) == "error(timeout)"
    assert Outcome.sat().is_definitive and Outcome.unsat().is_definitive
    assert not Outcome.unknown().is_definitive
    assert Outcome.error("x").is_error


@pytest.mark.parametrize("adapter", [StubSolver(), EvaluatingSolver(), Z3Solver(timeout=5)])
def test_adapters_satisfy_protocol(adapter):
    assert isinstance(adapter, SolverAdapter)


# -- StubSolver ---------------------------------------------------------------

def test_stub_default_and_script():
    stub = StubSolver(script={2: Outcome.error("timeout")})
    assert [stub.check_sat() for _ in range(3)] == [Outcome.sat(), Outcome.error("timeout"), Outcome.sat()]
    assert stub.calls == 3


def test_stub_scripted_failure_raises():
    stub = StubSolver(script={1: None})
    with pytest.raises(AdapterError):
        stub.check_sat()


def test_stub_rule_sees_assertions():
    stub = StubSolver(rule=lambda call, assertions: Outcome.unsat() if len(assertions) > 1 else Outcome.sat())
    stub.assert_formula(TRUE_CMP)
    assert stub.check_sat() == Outcome.sat()
    stub.assert_formula(TRUE_CMP)
    assert stub.check_sat() == Outcome.unsat()
    stub.reset()
    assert stub.assertions == [] and stub.resets == 1


# -- EvaluatingSolver ---------------------------------------------------------

def test_evaluating_solver():
    solver = EvaluatingSolver()
    assert solver.check_sat() == Outcome.sat()
    solver.assert_formula(TRUE_CMP)
    assert solver.check_sat() == Outcome.sat()
    solver.assert_formula(FALSE_CMP)
    assert solver.check_sat() == Outcome.unsat()
    solver.reset()
    solver.assert_formula(op(OperatorKind.EQ, X, IntLiteral(1)))
    assert solver.check_sat().result is SatResult.UNKNOWN


# -- Z3Solver -----------------------------------------------------------------

def test_z3_ground_formulas():
    solver = Z3Solver(timeout=5)
    solver.assert_formula(TRUE_CMP)
    assert solver.check_sat() == Outcome.sat()
    # repeated checks need no re-assertion
    assert solver.check_sat() == Outcome.sat()
    solver.assert_formula(FALSE_CMP)
    assert solver.check_sat() == Outcome.unsat()
    solver.reset()
    assert solver.assertions == []
    assert solver.check_sat() == Outcome.sat()


def test_z3_connectives_and_arithmetic():
    solver = Z3Solver(timeout=5)
    # (xor true (= (* 2 3) 6)) is false
    solver.assert_formula(op(OperatorKind.XOR, BoolLiteral(True),
                             op(OperatorKind.EQ, op(OperatorKind.MULT, IntLiteral(2), IntLiteral(3)), IntLiteral(6))))
    assert solver.check_sat() == Outcome.unsat()
    solver.reset()
    solver.assert_formula(op(OperatorKind.OR, FALSE_CMP,
                             op(OperatorKind.EQ, op(OperatorKind.SUB, IntLiteral(1), IntLiteral(-4)), IntLiteral(5))))
    assert solver.check_sat() == Outcome.sat()


def test_z3_variables_and_model():
    solver = Z3Solver(timeout=5)
    solver.assert_formula(op(OperatorKind.EQ, op(OperatorKind.ADD, X, IntLiteral(3)), IntLiteral(10)))
    assert solver.check_sat() == Outcome.sat()
    assert solver.model() == {"x": 7}
    solver.assert_formula(op(OperatorKind.GT, X, IntLiteral(7)))
    assert solver.check_sat() == Outcome.unsat()


def test_z3_boolean_variable():
    solver = Z3Solver(timeout=5)
    p = Variable("p", Sort.BOOL)
    solver.assert_formula(op(OperatorKind.AND, p, op(OperatorKind.XOR, p, BoolLiteral(True))))
    assert solver.check_sat() == Outcome.unsat()


# -- Registry -----------------------------------------------------------------

def test_registry_builds_adapters():
    assert get_available_solvers() == ["eval", "process", "stub", "z3"]
    assert isinstance(make_solver("stub"), StubSolver)
    assert isinstance(make_solver("eval"), EvaluatingSolver)
    assert isinstance(make_solver("z3", timeout=3), Z3Solver)
    proc = make_solver("process", solver_path="/usr/bin/cvc5", solver_name="cvc5", timeout=3)
    assert isinstance(proc, ProcessSolver)
    assert proc.name == "cvc5"


def test_registry_rejects_bad_requests():
    with pytest.raises(ConfigurationError):
        make_solver("minisat")
    with pytest.raises(ConfigurationError):
        make_solver("process")
    with pytest.raises(ConfigurationError):
        make_solver("process", solver_path="/bin/true", solver_name="bitwuzla")

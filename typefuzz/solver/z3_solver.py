"""
Z3 backend through the native ``z3`` Python API.

Terms are translated node by node into Z3 expressions living in a
private :class:`z3.Context`, so several adapters can run side by side.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Union

import z3

from typefuzz.constants import DEFAULT_TIMEOUT
from typefuzz.errors import AdapterError
from typefuzz.solver.base import Outcome
from typefuzz.term import BoolLiteral, IntLiteral, OperatorKind, Operation, Sort, Term, Variable

_logger = logging.getLogger("typefuzz.solver.z3")


class Z3Solver:
    """Adapter around :class:`z3.Solver`.

    Args:
        timeout: per ``check_sat`` limit in seconds; ``0`` disables it.
        logic: optional SMT-LIB logic passed to :func:`z3.SolverFor`.
    """

    name = "z3"

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, logic: Optional[str] = None) -> None:
        self.ctx = z3.Context()
        if logic and logic != "ALL":
            self._solver = z3.SolverFor(logic, ctx=self.ctx)
        else:
            self._solver = z3.Solver(ctx=self.ctx)
        self._timeout_ms = int(timeout * 1000)
        self._apply_params()
        self._symbols: Dict[str, z3.ExprRef] = {}
        self.assertions: List[Term] = []

    def _apply_params(self) -> None:
        if self._timeout_ms:
            self._solver.set("timeout", self._timeout_ms)

    # -- Translation ------------------------------------------------------------

    def _symbol(self, var: Variable) -> z3.ExprRef:
        if var.name not in self._symbols:
            if var.sort is Sort.INT:
                self._symbols[var.name] = z3.Int(var.name, self.ctx)
            else:
                self._symbols[var.name] = z3.Bool(var.name, self.ctx)
        return self._symbols[var.name]

    def translate(self, term: Term) -> z3.ExprRef:
        """Convert ``term`` into an expression of this adapter's context."""
        if isinstance(term, IntLiteral):
            return z3.IntVal(term.value, self.ctx)
        if isinstance(term, BoolLiteral):
            return z3.BoolVal(term.value, self.ctx)
        if isinstance(term, Variable):
            return self._symbol(term)
        if not isinstance(term, Operation):
            raise AdapterError(f"cannot translate {term!r}")

        left, right = (self.translate(child) for child in term.children)
        kind = term.kind
        if kind is OperatorKind.ADD:
            return left + right
        if kind is OperatorKind.SUB:
            return left - right
        if kind is OperatorKind.MULT:
            return left * right
        if kind is OperatorKind.GT:
            return left > right
        if kind is OperatorKind.LT:
            return left < right
        if kind is OperatorKind.EQ:
            return left == right
        if kind is OperatorKind.AND:
            return z3.And(left, right)
        if kind is OperatorKind.OR:
            return z3.Or(left, right)
        return z3.Xor(left, right)

    # -- SolverAdapter ----------------------------------------------------------

    def assert_formula(self, formula: Term) -> None:
        try:
            self._solver.add(self.translate(formula))
        except z3.Z3Exception as e:
            raise AdapterError(f"z3 rejected formula: {e}") from e
        self.assertions.append(formula)

    def check_sat(self) -> Outcome:
        try:
            result = self._solver.check()
        except z3.Z3Exception as e:
            _logger.debug("z3 check failed: %s", e)
            return Outcome.error(str(e))
        if result == z3.sat:
            return Outcome.sat()
        if result == z3.unsat:
            return Outcome.unsat()
        reason = self._solver.reason_unknown()
        _logger.debug("z3 returned unknown: %s", reason)
        return Outcome.unknown(reason or None)

    def model(self) -> Optional[Dict[str, Union[int, bool]]]:
        """Integer model of the last ``sat`` answer, keyed by variable name."""
        try:
            m = self._solver.model()
        except z3.Z3Exception:
            return None
        values: Dict[str, Union[int, bool]] = {}
        for name, symbol in self._symbols.items():
            value = m.eval(symbol, model_completion=True)
            if z3.is_int_value(value):
                values[name] = value.as_long()
            elif z3.is_true(value) or z3.is_false(value):
                values[name] = z3.is_true(value)
        return values

    def reset(self) -> None:
        self._solver.reset()
        self._apply_params()
        self._symbols.clear()
        self.assertions.clear()

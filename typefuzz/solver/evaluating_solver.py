"""Reference oracle that decides ground constraint sets by evaluation."""

from __future__ import annotations

from typing import List

from typefuzz.solver.base import Outcome
from typefuzz.term import Term, evaluate, free_variables


class EvaluatingSolver:
    """Exact on variable-free formulas, ``unknown`` otherwise.

    A conjunction of ground boolean terms is satisfiable iff every term
    evaluates to ``true``, so this is a cheap differential reference for
    the default grammar.
    """

    name = "eval"

    def __init__(self) -> None:
        self.assertions: List[Term] = []

    def assert_formula(self, formula: Term) -> None:
        self.assertions.append(formula)

    def check_sat(self) -> Outcome:
        for formula in self.assertions:
            if free_variables(formula):
                return Outcome.unknown("free variables")
        if all(evaluate(formula) for formula in self.assertions):
            return Outcome.sat()
        return Outcome.unsat()

    def reset(self) -> None:
        self.assertions.clear()

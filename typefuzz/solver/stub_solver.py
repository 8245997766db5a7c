"""Deterministic solver stand-in for exercising the fuzz driver."""

from __future__ import annotations

from typing import Callable, Dict, List, Mapping, Optional, Sequence

from typefuzz.errors import AdapterError
from typefuzz.solver.base import Outcome
from typefuzz.term import Term

Rule = Callable[[int, Sequence[Term]], Outcome]


class StubSolver:
    """Answers from a script instead of solving.

    The answer to the n-th ``check_sat`` call (1-based, counted across
    resets) is, in order of precedence: ``script[n]``, ``rule(n, assertions)``,
    ``default``. A scripted value of ``None`` raises :class:`AdapterError`,
    which simulates a backend crash.
    """

    name = "stub"

    def __init__(
        self,
        default: Optional[Outcome] = None,
        script: Optional[Mapping[int, Optional[Outcome]]] = None,
        rule: Optional[Rule] = None,
    ) -> None:
        self.default = default if default is not None else Outcome.sat()
        self.script: Dict[int, Optional[Outcome]] = dict(script or {})
        self.rule = rule
        self.assertions: List[Term] = []
        self.calls = 0
        self.resets = 0

    def assert_formula(self, formula: Term) -> None:
        self.assertions.append(formula)

    def check_sat(self) -> Outcome:
        self.calls += 1
        if self.calls in self.script:
            outcome = self.script[self.calls]
            if outcome is None:
                raise AdapterError(f"scripted failure on call {self.calls}")
            return outcome
        if self.rule is not None:
            return self.rule(self.calls, tuple(self.assertions))
        return self.default

    def reset(self) -> None:
        self.assertions.clear()
        self.resets += 1

"""
Solver registry.

Maps the backend names accepted on the command line to adapter factories,
so worker processes can rebuild their own adapter from a picklable name.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List

from typefuzz.constants import TEMP_DIRECTORY
from typefuzz.errors import ConfigurationError
from typefuzz.solver.base import SolverAdapter
from typefuzz.solver.evaluating_solver import EvaluatingSolver
from typefuzz.solver.process_solver import ProcessSolver
from typefuzz.solver.stub_solver import StubSolver


def _make_z3(**options: Any) -> SolverAdapter:
    # imported lazily so stub-only runs do not load libz3
    from typefuzz.solver.z3_solver import Z3Solver

    return Z3Solver(timeout=options.get("timeout", 0) or 0, logic=options.get("logic"))


def _make_process(**options: Any) -> SolverAdapter:
    return ProcessSolver(
        solver_path=options.get("solver_path") or "",
        solver=options.get("solver_name") or "z3",
        timeout=options.get("timeout") or 0,
        temp=options.get("temp") or TEMP_DIRECTORY,
        logic=options.get("logic"),
    )


SOLVERS: Dict[str, Callable[..., SolverAdapter]] = {
    "stub": lambda **options: StubSolver(),
    "eval": lambda **options: EvaluatingSolver(),
    "z3": _make_z3,
    "process": _make_process,
}


def get_available_solvers() -> List[str]:
    return sorted(SOLVERS)


def make_solver(name: str, **options: Any) -> SolverAdapter:
    """Build the adapter registered under *name*.

    Raises:
        ConfigurationError: if *name* is unknown or its options are invalid.
    """
    factory = SOLVERS.get(name)
    if factory is None:
        raise ConfigurationError(f"unknown solver {name!r}; available: {', '.join(get_available_solvers())}")
    return factory(**options)

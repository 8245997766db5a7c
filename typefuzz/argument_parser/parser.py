"""
Command-line argument parsing for typefuzz.

Uses a dataclass to hold parsed values (instead of a mutable dict),
making the contract between the CLI and the rest of the system explicit.
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from typefuzz.constants import (
    DEFAULT_CONSTRAINTS_PER_TEST,
    DEFAULT_MAX_ARITH_DEPTH,
    DEFAULT_MAX_BOOL_DEPTH,
    DEFAULT_NUM_TESTS,
    DEFAULT_TIMEOUT,
    SOLVER_BIN,
    TEMP_DIRECTORY,
)
from typefuzz.solver.registry import get_available_solvers


@dataclass
class TypeFuzzArgs:
    """Container for parsed CLI arguments."""

    tests: int = DEFAULT_NUM_TESTS
    constraints: int = DEFAULT_CONSTRAINTS_PER_TEST
    max_depth: int = DEFAULT_MAX_ARITH_DEPTH
    bool_depth: int = DEFAULT_MAX_BOOL_DEPTH
    seed: Optional[int] = None
    vars: int = 0
    solver: str = "stub"
    solverbin: Optional[str] = None
    solver_name: str = "z3"
    reference: Optional[str] = None
    timeout: int = DEFAULT_TIMEOUT
    processes: int = 1
    temp: str = TEMP_DIRECTORY
    debug: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def solver_options(self) -> Dict[str, Any]:
        """Keyword arguments for :func:`typefuzz.solver.registry.make_solver`."""
        return {
            "solver_path": self.solverbin,
            "solver_name": self.solver_name,
            "timeout": self.timeout,
            "temp": self.temp,
        }


def _build_parser() -> argparse.ArgumentParser:
    """Construct the ``ArgumentParser`` (no side-effects)."""
    solvers = get_available_solvers()
    parser = argparse.ArgumentParser(
        description="typefuzz – type-directed random term fuzzer for SMT solvers",
    )
    parser.add_argument(
        "--tests", "-n", type=int, default=DEFAULT_NUM_TESTS,
        help="number of test cases (default: %(default)s)",
    )
    parser.add_argument(
        "--constraints", "-k", type=int, default=DEFAULT_CONSTRAINTS_PER_TEST,
        help="boolean constraints asserted per test case (default: %(default)s)",
    )
    parser.add_argument(
        "--max-depth", "-d", type=int, default=DEFAULT_MAX_ARITH_DEPTH,
        help="depth cap for arithmetic terms (default: %(default)s)",
    )
    parser.add_argument(
        "--bool-depth", type=int, default=DEFAULT_MAX_BOOL_DEPTH,
        help="depth cap for boolean connectives (default: %(default)s)",
    )
    parser.add_argument("--seed", "-s", type=int, default=None, help="random seed (default: from system entropy)")
    parser.add_argument("--vars", type=int, default=0, help="number of integer variables to declare")
    parser.add_argument(
        "--solver", choices=solvers, default="stub",
        help="solver backend under test (default: %(default)s)",
    )
    parser.add_argument(
        "--solverbin", default=SOLVER_BIN or None,
        help="solver binary for the 'process' backend (default: $TYPEFUZZ_SOLVER_BIN)",
    )
    parser.add_argument(
        "--solver-name", choices=["z3", "cvc5", "yices2"], default="z3",
        help="dialect of the solver binary (default: %(default)s)",
    )
    parser.add_argument("--reference", choices=solvers, default=None, help="reference backend for differential runs")
    parser.add_argument(
        "--timeout", "-t", type=int, default=DEFAULT_TIMEOUT,
        help="solver timeout in seconds (default: %(default)s)",
    )
    parser.add_argument(
        "--processes", "-p", type=int, default=1,
        help="number of parallel campaigns (default: %(default)s)",
    )
    parser.add_argument("--temp", type=str, default=TEMP_DIRECTORY, help="directory for temporary files and bugs")
    parser.add_argument("--debug", action="store_true", help="enable verbose debug logging for diagnostics")
    return parser


def parse_args(argv=None) -> TypeFuzzArgs:
    """Parse *argv* (or ``sys.argv``) and return a :class:`TypeFuzzArgs`."""
    ns = _build_parser().parse_args(argv)
    return TypeFuzzArgs(
        tests=ns.tests,
        constraints=ns.constraints,
        max_depth=ns.max_depth,
        bool_depth=ns.bool_depth,
        seed=ns.seed,
        vars=ns.vars,
        solver=ns.solver,
        solverbin=ns.solverbin,
        solver_name=ns.solver_name,
        reference=ns.reference,
        timeout=ns.timeout,
        processes=ns.processes,
        temp=ns.temp,
        debug=ns.debug,
    )

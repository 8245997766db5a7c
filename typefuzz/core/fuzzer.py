"""
Fuzz driver.

A campaign runs ``num_tests`` independent test cases. Each one generates
``constraints_per_test`` boolean terms, asserts them on the solver adapter,
asks for satisfiability, records the outcome and resets the adapter.
Solver failures become ``error`` outcomes; they never end a campaign.
"""

import logging
import multiprocessing
import os
from dataclasses import dataclass, replace
from multiprocessing import Pool
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from typefuzz.classify.bug_classifier import BugKind, classify
from typefuzz.constants import (
    DEFAULT_CONSTRAINTS_PER_TEST,
    DEFAULT_MAX_ARITH_DEPTH,
    DEFAULT_MAX_BOOL_DEPTH,
    DEFAULT_NUM_TESTS,
)
from typefuzz.errors import AdapterError, ConfigurationError
from typefuzz.generator.term_generator import GeneratorConfig, TermGenerator
from typefuzz.solver.base import Outcome, SolverAdapter
from typefuzz.solver.registry import make_solver
from typefuzz.solver.stub_solver import StubSolver
from typefuzz.term import Term, Variable, to_smtlib
from typefuzz.utils.random_source import RandomSource, fresh_seed

# ---------------------------------------------------------------------------
# Debug infrastructure – activated by ``--debug`` on the CLI.
# ---------------------------------------------------------------------------
_FUZZER_DEBUG = False
_fuzzer_logger = logging.getLogger("typefuzz.fuzzer")


def enable_fuzzer_debug() -> None:
    """Turn on verbose debug logging for the fuzzer and its collaborators."""
    global _FUZZER_DEBUG
    _FUZZER_DEBUG = True
    root = logging.getLogger("typefuzz")
    root.setLevel(logging.DEBUG)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s [DEBUG] %(message)s"))
        root.addHandler(handler)


def _debug_log(msg: str, *args) -> None:
    if _FUZZER_DEBUG:
        _fuzzer_logger.debug(msg, *args)


@dataclass(frozen=True)
class CampaignConfig:
    """Parameters of one campaign; checked by :meth:`validate` before any generation."""

    num_tests: int = DEFAULT_NUM_TESTS
    constraints_per_test: int = DEFAULT_CONSTRAINTS_PER_TEST
    max_depth: int = DEFAULT_MAX_ARITH_DEPTH
    bool_depth: int = DEFAULT_MAX_BOOL_DEPTH
    seed: Optional[int] = None
    num_vars: int = 0

    def validate(self) -> None:
        if self.num_tests <= 0:
            raise ConfigurationError(f"num_tests must be positive, got {self.num_tests}")
        if self.constraints_per_test <= 0:
            raise ConfigurationError(f"constraints_per_test must be positive, got {self.constraints_per_test}")
        if self.max_depth < 0:
            raise ConfigurationError(f"max_depth must be >= 0, got {self.max_depth}")
        self.generator_config().validate()

    def generator_config(self) -> GeneratorConfig:
        return GeneratorConfig(
            max_arith_depth=self.max_depth,
            max_bool_depth=self.bool_depth,
            num_vars=self.num_vars,
        )


@dataclass(frozen=True)
class FuzzResult:
    """One test case: what was asserted and how the solver(s) answered."""

    index: int
    assertions: Tuple[Term, ...]
    outcome: Outcome
    declarations: Tuple[Variable, ...] = ()
    reference_outcome: Optional[Outcome] = None
    bug: Optional[BugKind] = None
    worker: int = 0
    model: Optional[Dict[str, Any]] = None

    @property
    def formulas(self) -> List[str]:
        """SMT-LIB text of the asserted terms."""
        return [to_smtlib(term) for term in self.assertions]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "worker": self.worker,
            "formulas": self.formulas,
            "outcome": str(self.outcome),
            "reference_outcome": str(self.reference_outcome) if self.reference_outcome else None,
            "bug": self.bug.value if self.bug else None,
            "model": self.model,
        }


def _solve(
    solver: SolverAdapter, constraints: Sequence[Term], declarations: Sequence[Variable]
) -> Tuple[Outcome, Optional[Dict[str, Any]]]:
    """Assert, check and reset; adapter failures come back as ``error`` outcomes.

    Returns the outcome and, for ``sat`` answers from backends that can
    produce one, the satisfying assignment.
    """
    try:
        if declarations and hasattr(solver, "declare"):
            solver.declare(declarations)
        for constraint in constraints:
            solver.assert_formula(constraint)
        outcome = solver.check_sat()
        model = None
        if outcome == Outcome.sat() and hasattr(solver, "model"):
            model = solver.model()
        return outcome, model
    except AdapterError as e:
        _debug_log("%s failed: %s", getattr(solver, "name", solver), e.reason)
        return Outcome.error(e.reason), None
    finally:
        try:
            solver.reset()
        except AdapterError as e:
            _fuzzer_logger.warning("%s could not reset: %s", getattr(solver, "name", solver), e.reason)


class FuzzDriver:
    """Owns the random source, the generator and the adapter(s) of one campaign."""

    def __init__(
        self,
        config: CampaignConfig,
        solver: SolverAdapter,
        reference: Optional[SolverAdapter] = None,
    ) -> None:
        config.validate()
        self.config = config
        self.solver = solver
        self.reference = reference
        self.rng = RandomSource(config.seed)
        self.generator = TermGenerator(self.rng, config.generator_config())
        self._started = False

    @property
    def seed(self) -> int:
        return self.rng.seed

    def run(self) -> Iterator[FuzzResult]:
        """Lazy sequence of ``num_tests`` results; a driver runs only once."""
        if self._started:
            raise ConfigurationError("campaign already started; create a new driver to run again")
        self._started = True
        _debug_log("campaign seed=%d tests=%d constraints=%d max_depth=%d",
                   self.seed, self.config.num_tests, self.config.constraints_per_test, self.config.max_depth)
        return self._iterate()

    def _iterate(self) -> Iterator[FuzzResult]:
        for index in range(self.config.num_tests):
            yield self.run_test(index)

    def run_test(self, index: int) -> FuzzResult:
        constraints = tuple(self.generator.generate_constraints(self.config.constraints_per_test))
        declarations = tuple(self.generator.declarations())
        outcome, model = _solve(self.solver, constraints, declarations)
        reference_outcome = None
        if self.reference is not None:
            reference_outcome, _ = _solve(self.reference, constraints, declarations)
        bug = classify(outcome, reference_outcome)
        _debug_log("test %d: %s%s", index, outcome,
                   f" (bug: {bug.value})" if bug else "")
        return FuzzResult(
            index=index,
            assertions=constraints,
            outcome=outcome,
            declarations=declarations,
            reference_outcome=reference_outcome,
            bug=bug,
            model=model,
        )


def run_fuzz_campaign(
    num_tests: int = DEFAULT_NUM_TESTS,
    constraints_per_test: int = DEFAULT_CONSTRAINTS_PER_TEST,
    max_depth: int = DEFAULT_MAX_ARITH_DEPTH,
    seed: Optional[int] = None,
    solver: Optional[SolverAdapter] = None,
    reference: Optional[SolverAdapter] = None,
    bool_depth: int = DEFAULT_MAX_BOOL_DEPTH,
    num_vars: int = 0,
) -> Iterator[FuzzResult]:
    """Validate the parameters, then return the lazy result sequence.

    Raises:
        ConfigurationError: immediately, before any term is generated.
    """
    config = CampaignConfig(
        num_tests=num_tests,
        constraints_per_test=constraints_per_test,
        max_depth=max_depth,
        bool_depth=bool_depth,
        seed=seed,
        num_vars=num_vars,
    )
    driver = FuzzDriver(config, solver if solver is not None else StubSolver(), reference)
    return driver.run()


# ---------------------------------------------------------------------------
# Parallel campaigns: one adapter and one random source per worker
# ---------------------------------------------------------------------------

def split_count(total: int, parts: int) -> List[int]:
    """Split *total* into *parts* near-equal non-negative shares."""
    if parts <= 0:
        raise ValueError("parts must be positive")
    share, remainder = divmod(total, parts)
    return [share + (1 if i < remainder else 0) for i in range(parts)]


def process_campaign(args) -> List[FuzzResult]:
    """Worker function that runs one campaign with its own adapter(s)."""
    (config, worker_id, solver_name, solver_options, reference_name, debug) = args
    # spawned workers start with a fresh module state
    if debug:
        enable_fuzzer_debug()
    process_id = multiprocessing.current_process().pid
    _debug_log("worker %d (pid %s): seed=%s tests=%d", worker_id, process_id, config.seed, config.num_tests)

    solver = make_solver(solver_name, **solver_options)
    reference = make_solver(reference_name, **solver_options) if reference_name else None
    driver = FuzzDriver(config, solver, reference)
    return [replace(result, worker=worker_id) for result in driver.run()]


def run_parallel_campaigns(
    config: CampaignConfig,
    solver_name: str = "stub",
    processes: Optional[int] = None,
    solver_options: Optional[Dict[str, Any]] = None,
    reference_name: Optional[str] = None,
) -> List[FuzzResult]:
    """Spread ``config.num_tests`` over worker processes.

    Worker ``i`` uses seed ``base_seed + i``, so a run is reproducible from
    the base seed and the worker count.
    """
    config.validate()
    num_processes = processes or os.cpu_count() or 4
    if num_processes <= 0:
        raise ConfigurationError(f"processes must be positive, got {num_processes}")
    num_processes = min(num_processes, config.num_tests)
    base_seed = config.seed if config.seed is not None else fresh_seed()

    tasks = []
    for worker_id, count in enumerate(split_count(config.num_tests, num_processes)):
        worker_config = replace(config, num_tests=count, seed=base_seed + worker_id)
        tasks.append((worker_config, worker_id, solver_name, dict(solver_options or {}), reference_name,
                      _FUZZER_DEBUG))

    if num_processes == 1:
        return process_campaign(tasks[0])
    with Pool(processes=num_processes) as pool:
        per_worker = pool.map(process_campaign, tasks)
    return [result for results in per_worker for result in results]


def summarize(results: Sequence[FuzzResult]) -> Dict[str, int]:
    """Count results per outcome and per bug kind."""
    stats: Dict[str, int] = {"total": len(results)}
    for result in results:
        key = result.outcome.result.value
        stats[key] = stats.get(key, 0) + 1
        if result.bug is not None:
            bug_key = f"bug:{result.bug.value}"
            stats[bug_key] = stats.get(bug_key, 0) + 1
    return stats

"""
External solver binaries driven over SMT-LIB script files.

Each ``check_sat`` renders the accumulated assertions into a script in the
temp directory, runs the solver on it without a shell, and classifies
stdout/stderr. Wall-clock timeouts kill the whole process tree.
"""

from __future__ import annotations

import logging
import os
import subprocess
import tempfile
import time
from typing import List, Optional, Sequence, Tuple

import psutil

from typefuzz.constants import (
    CRASH_SIGNATURES,
    DEFAULT_LOGIC,
    DEFAULT_TIMEOUT,
    PROCESS_SOLVERS,
    SOLVER_LOGICS,
    TEMP_DIRECTORY,
)
from typefuzz.errors import ConfigurationError
from typefuzz.solver.base import Outcome
from typefuzz.term import Term, Variable
from typefuzz.utils.smt_handlers import build_script

_logger = logging.getLogger("typefuzz.solver.process")

# Map of error substrings to result labels
_ERROR_MAP = [
    ("Parse Error", "parseerror"),
    ("Segmentation fault", "segfault"),
    ("NullPointerException", "nullpointer"),
    ("invalid model", "invalid model"),
    ("ERRORS SATISFYING", "invalid model"),
    ("model doesn't satisfy", "invalid model"),
    ("ASSERTION VIOLATION", "assertviolation"),
    ("AssertionError", "assertviolation"),
    ("option parsing", "option error"),
    ("failure", "failure"),
    ("error", "error"),
    ("unsupported reserved word", "error"),
]

# labels that point at a solver defect rather than a rejected input
_CRASH_LABELS = frozenset({"segfault", "nullpointer", "assertviolation", "invalid model"})


def command_line(solver_path: str, solver: str, smt_file: str, options: Sequence[str] = ()) -> List[str]:
    """Build a solver command as a **list** of arguments (no shell needed)."""
    cmd = [solver_path]
    if solver == "z3":
        cmd.append("model_validate=true")
    elif solver == "cvc5":
        cmd += ["-q", "--check-models"]
    cmd.extend(options)
    cmd.append(str(smt_file))
    return cmd


def check_crash(output: str) -> Optional[str]:
    """Return the first line of *output* carrying a crash signature, if any."""
    for line in output.splitlines():
        for signature in CRASH_SIGNATURES:
            if signature in line:
                return line.strip()
    return None


def _kill_process_tree(pid: int) -> None:
    try:
        parent = psutil.Process(pid)
    except psutil.NoSuchProcess:
        return
    for proc in parent.children(recursive=True) + [parent]:
        try:
            proc.kill()
        except psutil.NoSuchProcess:
            pass


def run_process(command: Sequence[str], timeout: Optional[float]) -> Tuple[Optional[str], str, float, Optional[int]]:
    """Run *command* and return ``(stdout, stderr, elapsed_seconds, returncode)``.

    ``stdout`` is ``None`` when the wall-clock *timeout* expired.

    Raises:
        FileNotFoundError: if the solver binary does not exist.
    """
    start_time = time.time()
    p = subprocess.Popen(
        list(command),
        shell=False,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )
    try:
        stdout_bytes, stderr_bytes = p.communicate(timeout=timeout or None)
    except subprocess.TimeoutExpired:
        _kill_process_tree(p.pid)
        _, stderr_bytes = p.communicate()
        return None, stderr_bytes.decode(errors="replace"), time.time() - start_time, None
    exe_time = time.time() - start_time
    return (stdout_bytes.decode(errors="replace"), stderr_bytes.decode(errors="replace"),
            exe_time, p.returncode)


def parse_solver_output(stdout: str, stderr: str, returncode: Optional[int] = 0) -> Outcome:
    """Classify one solver run into an :class:`Outcome`."""
    crash_line = check_crash(stderr)
    if crash_line is not None:
        return Outcome.error(f"crash: {crash_line}")
    if returncode is not None and returncode < 0:
        return Outcome.error(f"crash: killed by signal {-returncode}")

    lines = [line.strip() for line in stdout.splitlines() if line.strip()]
    for line in lines + stderr.splitlines():
        for needle, label in _ERROR_MAP:
            if needle in line:
                if label in _CRASH_LABELS:
                    return Outcome.error(f"crash: {label}")
                return Outcome.error(label)

    if not lines:
        return Outcome.error("no output")
    first = lines[0]
    if first == "sat":
        return Outcome.sat()
    if first == "unsat":
        return Outcome.unsat()
    if first == "unknown":
        return Outcome.unknown()
    return Outcome.error(f"unexpected output: {first}")


class ProcessSolver:
    """Adapter that shells out to a z3, cvc5 or yices2 binary."""

    def __init__(
        self,
        solver_path: str,
        solver: str = "z3",
        timeout: float = DEFAULT_TIMEOUT,
        temp: str = TEMP_DIRECTORY,
        logic: Optional[str] = None,
        options: Sequence[str] = (),
    ) -> None:
        if solver not in PROCESS_SOLVERS:
            raise ConfigurationError(f"unsupported solver {solver!r}; choose from {sorted(PROCESS_SOLVERS)}")
        if not solver_path:
            raise ConfigurationError("a solver binary path is required")
        self.name = solver
        self.solver_path = solver_path
        self.timeout = timeout
        self.temp = temp
        self.logic = logic or SOLVER_LOGICS.get(solver, DEFAULT_LOGIC)
        self.options = list(options)
        self.assertions: List[Term] = []
        self.declarations: List[Variable] = []
        self.last_script: Optional[str] = None

    def assert_formula(self, formula: Term) -> None:
        self.assertions.append(formula)

    def declare(self, variables: Sequence[Variable]) -> None:
        """Declare *variables* even when no assertion mentions them."""
        self.declarations.extend(variables)

    def check_sat(self) -> Outcome:
        script = build_script(self.assertions, self.declarations, logic=self.logic)
        self.last_script = script
        os.makedirs(self.temp, exist_ok=True)
        fd, smt_file = tempfile.mkstemp(suffix=".smt2", dir=self.temp)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(script)
            command = command_line(self.solver_path, self.name, smt_file, self.options)
            _logger.debug("running %s", " ".join(command))
            try:
                stdout, stderr, exe_time, returncode = run_process(command, self.timeout)
            except FileNotFoundError:
                return Outcome.error("solver binary not found")
            except OSError as e:
                return Outcome.error(f"cannot start solver: {e}")
        finally:
            if os.path.exists(smt_file):
                os.remove(smt_file)

        if stdout is None:
            _logger.debug("%s timed out after %.2fs", self.name, exe_time)
            return Outcome.error("timeout")
        outcome = parse_solver_output(stdout, stderr, returncode)
        _logger.debug("%s answered %s in %.2fs", self.name, outcome, exe_time)
        return outcome

    def reset(self) -> None:
        self.assertions.clear()
        self.declarations.clear()

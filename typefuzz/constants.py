"""
Global constants used across typefuzz.

Guidelines
----------
* Every constant is typed and immutable (``Final`` / ``frozenset``).
* No hard-coded absolute paths – use environment variables or ``Path`` helpers.
"""

from __future__ import annotations

import os
from typing import Final, FrozenSet

# -- Generation --------------------------------------------------------------

DEFAULT_MAX_ARITH_DEPTH: Final[int] = 2
DEFAULT_MAX_BOOL_DEPTH: Final[int] = 1
DEFAULT_INT_MIN: Final[int] = -100
DEFAULT_INT_MAX: Final[int] = 100
# 1-in-N chance of an early leaf below the root
ARITH_LEAF_ODDS: Final[int] = 3
BOOL_LEAF_ODDS: Final[int] = 2
DEFAULT_NUM_VARS: Final[int] = 0
DEFAULT_VAR_PROBABILITY: Final[float] = 0.3

# -- Campaign ----------------------------------------------------------------

DEFAULT_NUM_TESTS: Final[int] = 5
DEFAULT_CONSTRAINTS_PER_TEST: Final[int] = 3
DEFAULT_TIMEOUT: Final[int] = 10
TEMP_DIRECTORY: Final[str] = "./temp/"
DEFAULT_LOGIC: Final[str] = "ALL"

# Solver binary read from environment so nothing is hard-coded.
SOLVER_BIN: Final[str] = os.environ.get("TYPEFUZZ_SOLVER_BIN", "")

# -- Solvers -----------------------------------------------------------------

PROCESS_SOLVERS: FrozenSet[str] = frozenset({"z3", "cvc5", "yices2"})

# yices2 rejects ALL, and the grammar multiplies terms
SOLVER_LOGICS: Final[dict] = {"z3": "ALL", "cvc5": "ALL", "yices2": "QF_NIA"}

CRASH_SIGNATURES: Final[tuple] = (
    "Exception", "lang.AssertionError", "lang.Error", "runtime error", "LEAKED", "Leaked",
    "Segmentation fault", "segmentation fault", "segfault", "ASSERTION", "Assertion",
    "Fatal failure", "Internal error detected", "an invalid model was generated",
    "Failed to verify", "failed to verify", "ERROR: AddressSanitizer:", "Aborted",
    "AddressSanitizer", "NULL pointer was dereferenced",
)

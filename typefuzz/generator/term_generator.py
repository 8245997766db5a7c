"""
Type-directed random term generator.

Builds arithmetic (``Int``) and boolean (``Bool``) terms by plain recursion
with an explicit depth parameter. Two independent hard caps bound the
recursion; below the root an additional coin flip may end a branch early,
which keeps the average tree small:

* arithmetic: leaf when ``depth > max_arith_depth`` or, for ``depth > 0``,
  with probability ``1/arith_leaf_odds``
* boolean: atom when ``depth > max_bool_depth`` or, for ``depth > 0``,
  with probability ``1/bool_leaf_odds``

Comparison atoms restart the arithmetic depth counter at 0.
"""

from __future__ import annotations

import logging
import string
from dataclasses import dataclass
from typing import List, Optional

from typefuzz.constants import (
    ARITH_LEAF_ODDS,
    BOOL_LEAF_ODDS,
    DEFAULT_INT_MAX,
    DEFAULT_INT_MIN,
    DEFAULT_MAX_ARITH_DEPTH,
    DEFAULT_MAX_BOOL_DEPTH,
    DEFAULT_NUM_VARS,
    DEFAULT_VAR_PROBABILITY,
)
from typefuzz.errors import ConfigurationError
from typefuzz.term import (
    ARITHMETIC_OPERATORS,
    COMPARISON_OPERATORS,
    CONNECTIVE_OPERATORS,
    BoolLiteral,
    IntLiteral,
    Operation,
    Sort,
    Term,
    Variable,
)
from typefuzz.utils.random_source import RandomSource

_logger = logging.getLogger("typefuzz.generator")

# Reserved SMT-LIB words that must not be used as variable names
RESERVED_KEYWORDS = frozenset({
    "true", "false", "not", "and", "or", "xor", "=>", "=", "distinct",
    "ite", "let", "forall", "exists", "assert", "check-sat", "get-model",
    "declare-const", "declare-fun", "declare-sort", "set-logic", "exit",
})


@dataclass(frozen=True)
class GeneratorConfig:
    """Shape parameters for :class:`TermGenerator`."""

    max_arith_depth: int = DEFAULT_MAX_ARITH_DEPTH
    max_bool_depth: int = DEFAULT_MAX_BOOL_DEPTH
    int_min: int = DEFAULT_INT_MIN
    int_max: int = DEFAULT_INT_MAX
    arith_leaf_odds: int = ARITH_LEAF_ODDS
    bool_leaf_odds: int = BOOL_LEAF_ODDS
    num_vars: int = DEFAULT_NUM_VARS
    var_probability: float = DEFAULT_VAR_PROBABILITY

    def validate(self) -> None:
        """Raise :class:`ConfigurationError` on the first bad field."""
        if self.max_arith_depth < 0:
            raise ConfigurationError(f"max_arith_depth must be >= 0, got {self.max_arith_depth}")
        if self.max_bool_depth < 0:
            raise ConfigurationError(f"max_bool_depth must be >= 0, got {self.max_bool_depth}")
        if self.int_min > self.int_max:
            raise ConfigurationError(f"empty literal range [{self.int_min}, {self.int_max}]")
        if self.arith_leaf_odds < 1 or self.bool_leaf_odds < 1:
            raise ConfigurationError("leaf odds must be >= 1")
        if self.num_vars < 0:
            raise ConfigurationError(f"num_vars must be >= 0, got {self.num_vars}")
        if not 0.0 <= self.var_probability <= 1.0:
            raise ConfigurationError(f"var_probability must be in [0, 1], got {self.var_probability}")


class TermGenerator:
    """Random, well-sorted term generator over one :class:`RandomSource`."""

    def __init__(self, rng: Optional[RandomSource] = None, config: Optional[GeneratorConfig] = None) -> None:
        self.rng = rng if rng is not None else RandomSource()
        self.config = config if config is not None else GeneratorConfig()
        self.config.validate()
        self.variables: List[Variable] = []
        self._ensure_variables(self.config.num_vars)

    # -- Symbols ----------------------------------------------------------------

    def _generate_symbol_name(self, prefix: str = "") -> str:
        """Random lowercase name of 5 to 10 letters that is not a keyword."""
        while True:
            length = self.rng.next_int_in_range(5, 10)
            name = prefix + "".join(self.rng.choice(string.ascii_lowercase) for _ in range(length))
            if name not in RESERVED_KEYWORDS and all(v.name != name for v in self.variables):
                return name

    def _ensure_variables(self, count: int) -> None:
        while len(self.variables) < count:
            self.variables.append(Variable(self._generate_symbol_name("var"), Sort.INT))

    def declarations(self) -> List[Variable]:
        """Variables that generated terms may refer to."""
        return list(self.variables)

    # -- Leaves -----------------------------------------------------------------

    def generate_integer(self) -> IntLiteral:
        return IntLiteral(self.rng.next_int_in_range(self.config.int_min, self.config.int_max))

    def generate_boolean(self) -> BoolLiteral:
        return BoolLiteral(self.rng.next_bool())

    def _arith_leaf(self) -> Term:
        if self.variables and self.rng.next_float() < self.config.var_probability:
            return self.rng.choice(self.variables)
        return self.generate_integer()

    # -- Recursive rules --------------------------------------------------------

    def generate_arithmetic(self, depth: int = 0) -> Term:
        """Return an ``Int``-sorted term rooted at ``depth``."""
        if depth > self.config.max_arith_depth or (
            depth > 0 and self.rng.one_in(self.config.arith_leaf_odds)
        ):
            return self._arith_leaf()

        left = self.generate_arithmetic(depth + 1)
        right = self.generate_arithmetic(depth + 1)
        kind = self.rng.choice(ARITHMETIC_OPERATORS)
        return Operation(kind, (left, right))

    def generate_comparison(self) -> Operation:
        left = self.generate_arithmetic()
        right = self.generate_arithmetic()
        kind = self.rng.choice(COMPARISON_OPERATORS)
        return Operation(kind, (left, right))

    def generate_boolean_expr(self, depth: int = 0) -> Term:
        """Return a ``Bool``-sorted term rooted at ``depth``."""
        if depth > self.config.max_bool_depth or (
            depth > 0 and self.rng.one_in(self.config.bool_leaf_odds)
        ):
            if self.rng.next_bool():
                return self.generate_boolean()
            return self.generate_comparison()

        left = self.generate_boolean_expr(depth + 1)
        right = self.generate_boolean_expr(depth + 1)
        kind = self.rng.choice(CONNECTIVE_OPERATORS)
        return Operation(kind, (left, right))

    def generate_constraints(self, count: int) -> List[Term]:
        """``count`` independent boolean terms."""
        constraints = [self.generate_boolean_expr() for _ in range(count)]
        _logger.debug("generated %d constraints", len(constraints))
        return constraints

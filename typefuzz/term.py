"""
Term model for the generated constraint language.

A term is one of four immutable node types:

* :class:`IntLiteral` – a signed integer constant
* :class:`BoolLiteral` – ``true`` / ``false``
* :class:`Variable` – a declared constant of sort ``Int`` or ``Bool``
* :class:`Operation` – an operator applied to an ordered tuple of children

Operators carry their SMT-LIB symbol, arity and argument/result sorts, so
sort checking and printing are table driven.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Mapping, Optional, Tuple, Union

from typefuzz.errors import TermSortError


class Sort(Enum):
    INT = "Int"
    BOOL = "Bool"


class OperatorKind(Enum):
    """Closed set of operators: ``(symbol, arity, argument sort, result sort)``."""

    ADD = ("+", 2, Sort.INT, Sort.INT)
    SUB = ("-", 2, Sort.INT, Sort.INT)
    MULT = ("*", 2, Sort.INT, Sort.INT)
    GT = (">", 2, Sort.INT, Sort.BOOL)
    LT = ("<", 2, Sort.INT, Sort.BOOL)
    EQ = ("=", 2, Sort.INT, Sort.BOOL)
    AND = ("and", 2, Sort.BOOL, Sort.BOOL)
    OR = ("or", 2, Sort.BOOL, Sort.BOOL)
    XOR = ("xor", 2, Sort.BOOL, Sort.BOOL)

    def __init__(self, symbol: str, arity: int, arg_sort: Sort, result_sort: Sort) -> None:
        self.symbol = symbol
        self.arity = arity
        self.arg_sort = arg_sort
        self.result_sort = result_sort


ARITHMETIC_OPERATORS: Tuple[OperatorKind, ...] = (OperatorKind.ADD, OperatorKind.SUB, OperatorKind.MULT)
COMPARISON_OPERATORS: Tuple[OperatorKind, ...] = (OperatorKind.GT, OperatorKind.LT, OperatorKind.EQ)
CONNECTIVE_OPERATORS: Tuple[OperatorKind, ...] = (OperatorKind.AND, OperatorKind.OR, OperatorKind.XOR)


@dataclass(frozen=True)
class IntLiteral:
    value: int

    def __str__(self) -> str:
        return to_smtlib(self)


@dataclass(frozen=True)
class BoolLiteral:
    value: bool

    def __str__(self) -> str:
        return to_smtlib(self)


@dataclass(frozen=True)
class Variable:
    name: str
    sort: Sort = Sort.INT

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Operation:
    kind: OperatorKind
    children: Tuple["Term", ...]

    def __post_init__(self) -> None:
        # accept any sequence but store a tuple so the node stays hashable
        object.__setattr__(self, "children", tuple(self.children))
        if len(self.children) != self.kind.arity:
            raise TermSortError(
                f"{self.kind.name} expects {self.kind.arity} children, got {len(self.children)}"
            )

    def __str__(self) -> str:
        return to_smtlib(self)


Term = Union[IntLiteral, BoolLiteral, Variable, Operation]


# ---------------------------------------------------------------------------
# Structural helpers
# ---------------------------------------------------------------------------

def sort_of(term: Term) -> Sort:
    """Return the sort a term evaluates to (no check of the children)."""
    if isinstance(term, IntLiteral):
        return Sort.INT
    if isinstance(term, BoolLiteral):
        return Sort.BOOL
    if isinstance(term, Variable):
        return term.sort
    return term.kind.result_sort


def term_depth(term: Term) -> int:
    """Height of the tree; literals and variables have depth 0."""
    if isinstance(term, Operation):
        return 1 + max(term_depth(child) for child in term.children)
    return 0


def term_size(term: Term) -> int:
    """Number of nodes in the tree."""
    if isinstance(term, Operation):
        return 1 + sum(term_size(child) for child in term.children)
    return 1


def iter_subterms(term: Term) -> Iterator[Term]:
    """Pre-order walk over ``term`` and all of its descendants."""
    yield term
    if isinstance(term, Operation):
        for child in term.children:
            yield from iter_subterms(child)


def check_well_sorted(term: Term) -> Sort:
    """Recursively verify operator sorts and return the sort of ``term``.

    Raises:
        TermSortError: if any operator receives a child of the wrong sort.
    """
    if not isinstance(term, Operation):
        if isinstance(term, IntLiteral) and isinstance(term.value, bool):
            raise TermSortError(f"integer literal holds a boolean: {term.value!r}")
        return sort_of(term)
    for position, child in enumerate(term.children):
        child_sort = check_well_sorted(child)
        if child_sort is not term.kind.arg_sort:
            raise TermSortError(
                f"{term.kind.name} argument {position} has sort {child_sort.value}, "
                f"expected {term.kind.arg_sort.value}"
            )
    return term.kind.result_sort


def free_variables(term: Term) -> List[Variable]:
    """Variables occurring in ``term``, in first-occurrence order, without duplicates."""
    seen: Dict[str, Variable] = {}
    for sub in iter_subterms(term):
        if isinstance(sub, Variable) and sub.name not in seen:
            seen[sub.name] = sub
    return list(seen.values())


def evaluate(term: Term, env: Optional[Mapping[str, Union[int, bool]]] = None) -> Union[int, bool]:
    """Evaluate ``term`` under the variable assignment ``env``.

    Integer arithmetic is unbounded, as in the SMT-LIB ``Ints`` theory.

    Raises:
        KeyError: if a variable has no value in ``env``.
    """
    if isinstance(term, (IntLiteral, BoolLiteral)):
        return term.value
    if isinstance(term, Variable):
        if env is None or term.name not in env:
            raise KeyError(term.name)
        return env[term.name]

    left, right = (evaluate(child, env) for child in term.children)
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
        return left and right
    if kind is OperatorKind.OR:
        return left or right
    return left != right  # XOR


def to_smtlib(term: Term) -> str:
    """Render ``term`` as an SMT-LIB 2 expression.

    Negative integers use the unary minus form ``(- 5)`` required by the
    standard.
    """
    if isinstance(term, IntLiteral):
        return str(term.value) if term.value >= 0 else f"(- {-term.value})"
    if isinstance(term, BoolLiteral):
        return "true" if term.value else "false"
    if isinstance(term, Variable):
        return term.name
    args = " ".join(to_smtlib(child) for child in term.children)
    return f"({term.kind.symbol} {args})"

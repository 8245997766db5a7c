"""
Solver adapter interface and satisfiability outcomes.

Backends are structural: anything with ``assert_formula``, ``check_sat``
and ``reset`` is a :class:`SolverAdapter`. No base class is required.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol, runtime_checkable

from typefuzz.term import Term


class SatResult(Enum):
    SAT = "sat"
    UNSAT = "unsat"
    UNKNOWN = "unknown"
    ERROR = "error"


@dataclass(frozen=True)
class Outcome:
    """Classified result of one ``check_sat`` call.

    ``reason`` explains ``unknown`` and ``error`` results (e.g. ``"timeout"``).
    """

    result: SatResult
    reason: Optional[str] = None

    @classmethod
    def sat(cls) -> "Outcome":
        return cls(SatResult.SAT)

    @classmethod
    def unsat(cls) -> "Outcome":
        return cls(SatResult.UNSAT)

    @classmethod
    def unknown(cls, reason: Optional[str] = None) -> "Outcome":
        return cls(SatResult.UNKNOWN, reason)

    @classmethod
    def error(cls, reason: str) -> "Outcome":
        return cls(SatResult.ERROR, reason)

    @property
    def is_definitive(self) -> bool:
        return self.result in (SatResult.SAT, SatResult.UNSAT)

    @property
    def is_error(self) -> bool:
        return self.result is SatResult.ERROR

    def __str__(self) -> str:
        if self.reason:
            return f"{self.result.value}({self.reason})"
        return self.result.value


@runtime_checkable
class SolverAdapter(Protocol):
    """Narrow capability set every backend provides."""

    name: str

    def assert_formula(self, formula: Term) -> None:
        """Add ``formula`` to the accumulated constraint set."""
        ...

    def check_sat(self) -> Outcome:
        """Decide the accumulated constraints; callable repeatedly."""
        ...

    def reset(self) -> None:
        """Drop all accumulated constraints."""
        ...

"""
Differential classification of solver outcomes.

Only a crash or a definitive disagreement between two backends is a bug;
``unknown`` never is, and an ``error`` that is not a crash means the
backend rejected the input.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from typefuzz.constants import CRASH_SIGNATURES
from typefuzz.solver.base import Outcome


class BugKind(Enum):
    SOUNDNESS = "soundness"
    CRASH = "crash"
    INVALID = "invalid"


# resource limits, not defects
NON_BUG_REASONS = frozenset({"timeout"})


def is_crash(outcome: Outcome) -> bool:
    if not outcome.is_error or not outcome.reason:
        return False
    if outcome.reason.startswith("crash"):
        return True
    return any(signature in outcome.reason for signature in CRASH_SIGNATURES)


def _classify_single(outcome: Outcome) -> Optional[BugKind]:
    if is_crash(outcome):
        return BugKind.CRASH
    if outcome.is_error and outcome.reason not in NON_BUG_REASONS:
        return BugKind.INVALID
    return None


def classify(primary: Outcome, reference: Optional[Outcome] = None) -> Optional[BugKind]:
    """Return the bug kind exposed by *primary* (optionally against *reference*).

    Crashes on either side win over everything else; a soundness bug needs
    both answers to be ``sat``/``unsat`` and to differ.
    """
    kinds = [_classify_single(primary)]
    if reference is not None:
        kinds.append(_classify_single(reference))
    if BugKind.CRASH in kinds:
        return BugKind.CRASH
    if reference is not None and primary.is_definitive and reference.is_definitive:
        if primary.result is not reference.result:
            return BugKind.SOUNDNESS
    if BugKind.INVALID in kinds:
        return BugKind.INVALID
    return None

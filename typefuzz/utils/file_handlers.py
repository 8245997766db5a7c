"""
Bug recording on disk.

Each bug gets a numbered directory ``<temp>/<bug kind>/<n>/`` holding the
SMT-LIB script that triggered it and an ``error_logs.txt`` summary.
"""

from __future__ import annotations

import os
from typing import Optional

from typefuzz.utils.smt_handlers import build_script


def _next_bug_dir(path_to_bug_folder: str) -> str:
    os.makedirs(path_to_bug_folder, exist_ok=True)
    # Count existing sub-directories to derive the next index
    try:
        existing = next(os.walk(path_to_bug_folder))[1]
    except StopIteration:
        existing = []
    path_to_bug_dir = os.path.join(path_to_bug_folder, str(len(existing)))
    os.makedirs(path_to_bug_dir, exist_ok=True)
    return path_to_bug_dir


def record_bug(temp: str, result, solver: str, reference: Optional[str] = None,
               seed: Optional[int] = None) -> Optional[str]:
    """Write the script and log for a bug-carrying ``FuzzResult``.

    Returns the bug directory, or *None* when *result* carries no bug.
    """
    if result.bug is None:
        return None
    path_to_bug_dir = _next_bug_dir(os.path.join(temp, result.bug.value))

    script = build_script(result.assertions, result.declarations)
    with open(os.path.join(path_to_bug_dir, "case.smt2"), "w", encoding="utf-8") as fh:
        fh.write(script)

    lines = [f"Bug type: {result.bug.value}\n"]
    lines.append(f"{solver} returned {result.outcome}\n")
    if reference and result.reference_outcome is not None:
        lines.append(f"{reference} returned {result.reference_outcome}\n")
    if seed is not None:
        lines.append(f"\nSeed: {seed} (worker {result.worker}, test {result.index})\n")
    with open(os.path.join(path_to_bug_dir, "error_logs.txt"), "w", encoding="utf-8") as fh:
        fh.writelines(lines)
    return path_to_bug_dir

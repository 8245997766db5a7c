from typing import Iterable, Optional, Sequence

from typefuzz.term import Term, Variable, free_variables, to_smtlib


def format_smt_string(smt_string):
    """Cleans up an SMT-LIB string by removing redundant whitespace and empty lines."""
    lines = smt_string.split('\n')
    # Strip whitespace from each line and remove empty lines
    stripped_lines = [line.strip() for line in lines if line.strip()]
    # Join lines with a single newline, which is standard
    return '\n'.join(stripped_lines)


def collect_declarations(assertions: Iterable[Term], extra: Sequence[Variable] = ()) -> list:
    """Variables to declare for *assertions*, *extra* first, without duplicates."""
    seen = {}
    for var in extra:
        seen.setdefault(var.name, var)
    for formula in assertions:
        for var in free_variables(formula):
            seen.setdefault(var.name, var)
    return list(seen.values())


def build_script(assertions: Sequence[Term], declarations: Sequence[Variable] = (),
                 logic: Optional[str] = None) -> str:
    """Render a complete SMT-LIB 2 script: logic, declarations, asserts, check-sat."""
    parts = []
    if logic:
        parts.append(f"(set-logic {logic})")
    for var in collect_declarations(assertions, declarations):
        parts.append(f"(declare-fun {var.name} () {var.sort.value})")
    for formula in assertions:
        parts.append(f"(assert {to_smtlib(formula)})")
    parts.append("(check-sat)")
    return format_smt_string("\n".join(parts)) + "\n"

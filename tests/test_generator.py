"""
Property tests for the term generator: depth bounds, sort correctness,
determinism and termination.
"""

import pytest

from typefuzz.errors import ConfigurationError
from typefuzz.generator.term_generator import RESERVED_KEYWORDS, GeneratorConfig, TermGenerator
from typefuzz.term import (
    ARITHMETIC_OPERATORS,
    COMPARISON_OPERATORS,
    CONNECTIVE_OPERATORS,
    BoolLiteral,
    IntLiteral,
    Operation,
    Sort,
    Variable,
    check_well_sorted,
    iter_subterms,
    sort_of,
    term_depth,
)
from typefuzz.utils.random_source import RandomSource

SEEDS = range(40)


def make_generator(seed, **config):
    return TermGenerator(RandomSource(seed), GeneratorConfig(**config))


def assert_typed(term):
    """Connectives take booleans, comparisons and arithmetic take integers."""
    if not isinstance(term, Operation):
        return
    if term.kind in CONNECTIVE_OPERATORS:
        assert all(sort_of(child) is Sort.BOOL for child in term.children)
    else:
        assert term.kind in ARITHMETIC_OPERATORS + COMPARISON_OPERATORS
        assert all(sort_of(child) is Sort.INT for child in term.children)
    for child in term.children:
        assert_typed(child)


@pytest.mark.parametrize("max_depth", [0, 1, 2, 3, 5])
def test_arithmetic_depth_bound(max_depth):
    for seed in SEEDS:
        gen = make_generator(seed, max_arith_depth=max_depth)
        for _ in range(10):
            term = gen.generate_arithmetic()
            assert term_depth(term) <= max_depth + 1
            assert check_well_sorted(term) is Sort.INT


def test_arithmetic_depth_zero_is_one_operation_over_literals():
    for seed in SEEDS:
        term = make_generator(seed, max_arith_depth=0).generate_arithmetic()
        assert isinstance(term, Operation)
        assert term.kind in ARITHMETIC_OPERATORS
        assert all(isinstance(child, IntLiteral) for child in term.children)


def test_arithmetic_below_cap_returns_literal():
    gen = make_generator(0, max_arith_depth=2)
    assert isinstance(gen.generate_arithmetic(3), IntLiteral)


@pytest.mark.parametrize("max_depth,bool_depth", [(0, 0), (2, 1), (3, 2)])
def test_boolean_terms_are_well_sorted(max_depth, bool_depth):
    for seed in SEEDS:
        gen = make_generator(seed, max_arith_depth=max_depth, max_bool_depth=bool_depth)
        for _ in range(10):
            term = gen.generate_boolean_expr()
            assert check_well_sorted(term) is Sort.BOOL
            assert_typed(term)
            assert term_depth(term) <= bool_depth + max_depth + 3


def test_boolean_depth_zero_is_one_connective_over_atoms():
    for seed in SEEDS:
        term = make_generator(seed, max_bool_depth=0).generate_boolean_expr()
        assert isinstance(term, Operation)
        assert term.kind in CONNECTIVE_OPERATORS
        for child in term.children:
            assert isinstance(child, BoolLiteral) or child.kind in COMPARISON_OPERATORS


def test_literals_respect_range():
    gen = make_generator(3, int_min=-3, int_max=3)
    for _ in range(50):
        for sub in iter_subterms(gen.generate_boolean_expr()):
            if isinstance(sub, IntLiteral):
                assert -3 <= sub.value <= 3


def test_same_seed_same_terms():
    first = make_generator(42).generate_constraints(20)
    second = make_generator(42).generate_constraints(20)
    assert first == second


def test_different_seeds_differ():
    assert make_generator(1).generate_constraints(10) != make_generator(2).generate_constraints(10)


def test_deep_caps_terminate():
    gen = make_generator(11, max_arith_depth=10, max_bool_depth=3)
    for _ in range(5):
        term = gen.generate_boolean_expr()
        assert term_depth(term) <= 3 + 10 + 3


def test_all_operators_are_reachable():
    gen = make_generator(7)
    kinds = set()
    for _ in range(200):
        for sub in iter_subterms(gen.generate_boolean_expr()):
            if isinstance(sub, Operation):
                kinds.add(sub.kind)
    assert kinds == set(ARITHMETIC_OPERATORS + COMPARISON_OPERATORS + CONNECTIVE_OPERATORS)


def test_no_variables_by_default():
    gen = make_generator(5)
    assert gen.declarations() == []
    for term in gen.generate_constraints(30):
        assert not any(isinstance(sub, Variable) for sub in iter_subterms(term))


def test_variables_when_requested():
    gen = make_generator(5, num_vars=3, var_probability=1.0)
    decls = gen.declarations()
    assert len(decls) == 3
    assert len({v.name for v in decls}) == 3
    assert all(v.sort is Sort.INT and v.name not in RESERVED_KEYWORDS for v in decls)
    for _ in range(20):
        term = gen.generate_arithmetic()
        leaves = [sub for sub in iter_subterms(term) if not isinstance(sub, Operation)]
        assert leaves and all(leaf in decls for leaf in leaves)


@pytest.mark.parametrize("fields", [
    {"max_arith_depth": -1},
    {"max_bool_depth": -1},
    {"int_min": 5, "int_max": 4},
    {"arith_leaf_odds": 0},
    {"num_vars": -2},
    {"var_probability": 1.5},
])
def test_invalid_config_rejected(fields):
    with pytest.raises(ConfigurationError):
        TermGenerator(RandomSource(0), GeneratorConfig(**fields))

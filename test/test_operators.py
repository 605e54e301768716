import pytest

from fuzzy_engine.defuzzifier import center_of_mass
from fuzzy_engine.fuzzy_set import FuzzySet
from fuzzy_engine.operators import (
    LOGIC_OPS, InferenceOptions, LukasiewiczLogic, MaxUnion, ProductLogic, ZadehLogic,
)


@pytest.mark.parametrize(
    "ops,a,b,expected_and,expected_or",
    [
        (ZadehLogic(), 0.3, 0.8, 0.3, 0.8),
        (ProductLogic(), 0.5, 0.5, 0.25, 0.75),
        (LukasiewiczLogic(), 0.7, 0.6, 0.3, 1.0),
        (LukasiewiczLogic(), 0.2, 0.3, 0.0, 0.5),
    ],
)
def test_logic_operators(ops, a, b, expected_and, expected_or):
    assert ops.and_(a, b) == pytest.approx(expected_and)
    assert ops.or_(a, b) == pytest.approx(expected_or)
    assert ops.not_(a) == pytest.approx(1.0 - a)


def test_logic_registry():
    assert LOGIC_OPS["zadeh"] is ZadehLogic
    assert LOGIC_OPS["product"] is ProductLogic
    assert LOGIC_OPS["lukasiewicz"] is LukasiewiczLogic


def test_max_union_takes_keywise_maximum():
    left = FuzzySet.snapshot("action: low", {0.0: 0.8, 10.0: 0.6})
    right = FuzzySet.snapshot("action: high", {10.0: 0.7, 90.0: 0.9})
    result = MaxUnion().union(left, right)
    assert result.is_snapshot
    assert result.cached_items() == [(0.0, 0.8), (10.0, 0.7), (90.0, 0.9)]


def test_max_union_does_not_modify_operands():
    left = FuzzySet.snapshot("a", {0.0: 0.2})
    right = FuzzySet.snapshot("b", {0.0: 0.9})
    MaxUnion().union(left, right)
    assert left.cache == {0.0: 0.2}
    assert right.cache == {0.0: 0.9}


def test_max_union_name_follows_highest_peak():
    low = FuzzySet.snapshot("action: low", {0.0: 0.4})
    high = FuzzySet.snapshot("action: high", {90.0: 0.9})
    assert MaxUnion().union(low, high).name == "action: high"
    assert MaxUnion().union(high, low).name == "action: high"


def test_max_union_name_tie_goes_to_smaller_name():
    a = FuzzySet.snapshot("action: b", {0.0: 0.5})
    b = FuzzySet.snapshot("action: a", {1.0: 0.5})
    assert MaxUnion().union(a, b).name == "action: a"
    assert MaxUnion().union(b, a).name == "action: a"


def test_max_union_with_empty_operand():
    empty = FuzzySet.snapshot("action: high", {})
    low = FuzzySet.snapshot("action: low", {0.0: 0.4})
    result = MaxUnion().union(empty, low)
    assert result.name == "action: low"
    assert result.cached_items() == [(0.0, 0.4)]


def test_max_union_is_associative():
    sets = [
        FuzzySet.snapshot("x", {0.0: 0.1, 1.0: 0.9}),
        FuzzySet.snapshot("y", {1.0: 0.3, 2.0: 0.5}),
        FuzzySet.snapshot("z", {0.0: 0.7, 2.0: 0.2}),
    ]
    union = MaxUnion().union
    left_first = union(union(sets[0], sets[1]), sets[2])
    right_first = union(sets[0], union(sets[1], sets[2]))
    assert left_first.cached_items() == right_first.cached_items()
    assert left_first.name == right_first.name == "x"


def test_default_options():
    options = InferenceOptions.default()
    assert isinstance(options.logic_ops, ZadehLogic)
    assert isinstance(options.set_ops, MaxUnion)
    assert options.defuzz_func is center_of_mass


def test_options_are_frozen():
    options = InferenceOptions.default()
    with pytest.raises(AttributeError):
        options.logic_ops = ProductLogic()

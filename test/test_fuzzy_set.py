import logging
import threading

import pytest

from fuzzy_engine.errors import InvalidDomainValue, InvalidMembershipUse, UnknownSet
from fuzzy_engine.fuzzy_set import FuzzySet, Universe
from fuzzy_engine.membership import triangular


class CountingMembership:
    """Wraps a membership function and counts evaluations."""

    def __init__(self, fn):
        self.fn = fn
        self.calls = 0

    def __call__(self, x):
        self.calls += 1
        return self.fn(x)


@pytest.fixture
def counting():
    return CountingMembership(triangular(0.0, 5.0, 10.0))


def test_check_twice_returns_same_degree_and_evaluates_once(counting):
    fuzzy_set = FuzzySet("mid", counting)
    first = fuzzy_set.check(2.5)
    second = fuzzy_set.check(2.5)
    assert first == second == pytest.approx(0.5)
    assert counting.calls == 1
    assert fuzzy_set.cache == {2.5: first}


def test_zero_degree_is_not_retained(counting):
    fuzzy_set = FuzzySet("mid", counting)
    assert fuzzy_set.check(20.0) == 0.0
    assert fuzzy_set.check(20.0) == 0.0
    assert 20.0 not in fuzzy_set.cache
    assert len(fuzzy_set) == 0
    # nothing cached, so the function runs again
    assert counting.calls == 2


def test_negative_degree_is_returned_but_pruned():
    fuzzy_set = FuzzySet("odd", lambda x: -0.25)
    assert fuzzy_set.check(1.0) == -0.25
    assert fuzzy_set.cache == {}


def test_cache_only_holds_positive_degrees(counting):
    fuzzy_set = FuzzySet("mid", counting)
    for x in range(-5, 16):
        fuzzy_set.check(float(x))
    assert fuzzy_set.cache
    assert all(degree > 0.0 for degree in fuzzy_set.cache.values())
    assert sorted(fuzzy_set.cache) == [float(x) for x in range(1, 10)]


def test_int_and_float_keys_share_an_entry(counting):
    fuzzy_set = FuzzySet("mid", counting)
    fuzzy_set.check(5)
    fuzzy_set.check(5.0)
    assert counting.calls == 1


@pytest.mark.parametrize("bad", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_value_is_rejected(counting, bad):
    fuzzy_set = FuzzySet("mid", counting)
    with pytest.raises(InvalidDomainValue):
        fuzzy_set.check(bad)
    assert counting.calls == 0


def test_snapshot_cannot_be_checked():
    snapshot = FuzzySet.snapshot("action: low", {1.0: 0.5})
    assert snapshot.is_snapshot
    with pytest.raises(InvalidMembershipUse, match="action: low"):
        snapshot.check(1.0)


def test_snapshot_drops_non_positive_entries():
    snapshot = FuzzySet.snapshot("s", {1.0: 0.5, 2.0: 0.0, 3.0: -1.0})
    assert snapshot.cached_items() == [(1.0, 0.5)]


def test_cached_items_is_sorted_copy():
    snapshot = FuzzySet.snapshot("s", {3.0: 0.1, 1.0: 0.2, 2.0: 0.3})
    items = snapshot.cached_items()
    assert items == [(1.0, 0.2), (2.0, 0.3), (3.0, 0.1)]
    items.clear()
    assert len(snapshot) == 3


def test_concurrent_checks_evaluate_each_key_once(counting):
    fuzzy_set = FuzzySet("mid", counting)
    barrier = threading.Barrier(8)

    def worker():
        barrier.wait()
        for x in range(1, 10):
            fuzzy_set.check(float(x))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert counting.calls == 9
    assert len(fuzzy_set) == 9


def test_universe_register_first_wins(caplog):
    universe = Universe("temp")
    first = universe.register("cold", triangular(-20, -20, 10))
    with caplog.at_level(logging.WARNING, logger="fuzzy_set"):
        second = universe.register("cold", triangular(0, 0, 1))
    assert second is first
    assert universe.get("cold").check(-20.0) == 1.0
    assert "duplicate ignored" in caplog.text


def test_universe_get_unknown_set():
    universe = Universe("temp")
    with pytest.raises(UnknownSet) as excinfo:
        universe.get("warm")
    assert excinfo.value.universe == "temp"
    assert excinfo.value.set_name == "warm"
    # UnknownSet is a KeyError too
    assert isinstance(excinfo.value, KeyError)


def test_memberships_at(temp_universe):
    degrees = temp_universe.memberships_at(-15.0)
    assert set(degrees) == {"cold", "hot"}
    assert degrees["cold"] == pytest.approx(25.0 / 30.0)
    assert degrees["hot"] == 0.0
    assert -15.0 in temp_universe.get("cold").cache
    assert -15.0 not in temp_universe.get("hot").cache


def test_scan_primes_caches_over_domain():
    universe = Universe("action", [0.0, 10.0, 20.0, 60.0])
    universe.register("low", triangular(0, 0, 50))
    assert universe.scan() == 4
    assert [k for k, _ in universe.get("low").cached_items()] == [0.0, 10.0, 20.0]


def test_scan_with_explicit_points():
    universe = Universe("action")
    universe.register("low", triangular(0, 0, 50))
    assert universe.scan([5.0, 25.0]) == 2
    assert len(universe.get("low")) == 2


def test_universe_introspection(temp_universe):
    assert temp_universe.set_names() == ["cold", "hot"]
    assert "cold" in temp_universe
    assert "warm" not in temp_universe
    assert len(temp_universe.domain) == 61
    assert "temp" in repr(temp_universe)

# test/conftest.py
import numpy as np
import pytest

from fuzzy_engine.controller import InferenceContext, InferenceMachine
from fuzzy_engine.expressions import Is
from fuzzy_engine.fuzzy_set import Universe
from fuzzy_engine.membership import triangular
from fuzzy_engine.operators import InferenceOptions
from fuzzy_engine.rule_engine import Rule, RuleSet


@pytest.fixture
def options():
    return InferenceOptions.default()


@pytest.fixture
def temp_universe():
    temp = Universe("temp", np.linspace(-20.0, 40.0, 61))
    temp.register("cold", triangular(-20, -20, 10))
    temp.register("hot", triangular(10, 40, 40))
    return temp


@pytest.fixture
def action_universe():
    """Output universe, primed over its domain so rules have points to select."""
    action = Universe("action", np.linspace(0.0, 100.0, 101))
    action.register("low", triangular(0, 0, 50))
    action.register("high", triangular(50, 100, 100))
    action.scan()
    return action


@pytest.fixture
def universes(temp_universe, action_universe):
    return {"temp": temp_universe, "action": action_universe}


@pytest.fixture
def make_context(universes, options):
    """
    Build an InferenceContext over the shared universes.
    Usage:
        ctx = make_context({"temp": -15.0})
    """
    def _builder(values, opts=None):
        return InferenceContext(values=dict(values), universes=universes, options=opts or options)

    return _builder


@pytest.fixture
def cold_low_rule():
    return Rule(Is("temp", "cold"), "action", "low")


@pytest.fixture
def hot_high_rule():
    return Rule(Is("temp", "hot"), "action", "high")


@pytest.fixture
def machine(cold_low_rule, hot_high_rule, universes, options):
    return InferenceMachine(RuleSet([cold_low_rule, hot_high_rule]), universes, options)


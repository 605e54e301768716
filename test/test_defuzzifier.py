import pytest

from fuzzy_engine.defuzzifier import DEFUZZIFIERS, center_of_mass, mean_of_maximum
from fuzzy_engine.fuzzy_set import FuzzySet


def test_center_of_mass_normal_case():
    # Sum(mu*x) = (0.8 * 0.5) + (0.2 * -0.3) = 0.4 - 0.06 = 0.34
    # Sum(mu) = 0.8 + 0.2 = 1.0
    # Result = 0.34 / 1.0 = 0.34
    fuzzy_set = FuzzySet.snapshot("out", {0.5: 0.8, -0.3: 0.2})
    assert center_of_mass(fuzzy_set) == pytest.approx(0.34, abs=1e-9)


def test_center_of_mass_symmetric_set():
    fuzzy_set = FuzzySet.snapshot("out", {10.0: 0.5, 20.0: 1.0, 30.0: 0.5})
    assert center_of_mass(fuzzy_set) == pytest.approx(20.0)


def test_center_of_mass_empty_set_outputs_zero(caplog):
    result = center_of_mass(FuzzySet.snapshot("action: low", {}))
    assert result == 0.0
    assert "no support" in caplog.text


def test_mean_of_maximum():
    fuzzy_set = FuzzySet.snapshot("out", {10.0: 0.5, 20.0: 0.9, 30.0: 0.9, 40.0: 0.1})
    assert mean_of_maximum(fuzzy_set) == pytest.approx(25.0)


def test_mean_of_maximum_empty_set_outputs_zero():
    assert mean_of_maximum(FuzzySet.snapshot("out", {})) == 0.0


def test_defuzzifiers_return_python_floats():
    fuzzy_set = FuzzySet.snapshot("out", {1.0: 0.5})
    for fn in DEFUZZIFIERS.values():
        assert type(fn(fuzzy_set)) is float

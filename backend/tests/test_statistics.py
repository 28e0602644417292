import math

import pytest

from biopeak.analytics.statistics import categorize, coefficient_of_variation
from biopeak.core.errors import InsufficientData


def test_population_std_and_cv():
    stats = coefficient_of_variation([2, 4, 4, 4, 5, 5, 7, 9])
    assert stats.mean == 5
    assert stats.std_dev == pytest.approx(2.0)
    assert stats.cv == pytest.approx(40.0)


def test_constant_series_has_zero_cv():
    assert coefficient_of_variation([150, 150, 150]).cv == 0


def test_cv_grows_with_spread_around_same_mean():
    base = [140, 150, 160]
    wider = [130, 150, 170]
    widest = [110, 150, 190]
    cvs = [coefficient_of_variation(s).cv for s in (base, wider, widest)]
    assert cvs == sorted(cvs)
    assert len(set(cvs)) == 3


def test_cv_is_scale_invariant():
    a = coefficient_of_variation([5.0, 5.5, 6.0, 4.5])
    b = coefficient_of_variation([50.0, 55.0, 60.0, 45.0])
    assert math.isclose(a.cv, b.cv)


def test_needs_two_values():
    with pytest.raises(InsufficientData):
        coefficient_of_variation([150])
    with pytest.raises(InsufficientData):
        coefficient_of_variation([])


def test_zero_mean_is_rejected():
    with pytest.raises(InsufficientData):
        coefficient_of_variation([-1, 1])


def test_category_boundary_is_high():
    assert categorize(9.999, 10) == "Baixo"
    assert categorize(10.0, 10) == "Alto"
    assert categorize(14.9, 15) == "Baixo"
    assert categorize(15.0, 15) == "Alto"

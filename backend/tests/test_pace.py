import pytest

from biopeak.analytics.pace import aggregate_by_category, average_for, compare_pace
from biopeak.core.errors import InvalidInput


def test_aggregate_and_units():
    rows = [
        ("RUNNING", 10000, 3000),       # 50 min
        ("trail_running", 5000, 1800),  # 30 min
        ("Ride", 40000, 4800),          # 80 min
        ("LAP_SWIMMING", 2000, 2400),   # 40 min
        ("YOGA", 0, 3600),
        ("RUNNING", None, 1200),
    ]
    totals = {t.category: t for t in aggregate_by_category(rows)}
    assert set(totals) == {"RUNNING", "CYCLING", "SWIMMING"}
    assert totals["RUNNING"].activity_count == 2

    running = average_for(totals["RUNNING"])
    assert running.pace_unit == "min/km"
    assert running.average_pace_value == pytest.approx(80 / 15)

    cycling = average_for(totals["CYCLING"])
    assert cycling.pace_unit == "km/h"
    assert cycling.average_pace_value == pytest.approx(30.0)

    swimming = average_for(totals["SWIMMING"])
    assert swimming.pace_unit == "min/100m"
    assert swimming.average_pace_value == pytest.approx(2.0)


def test_running_lower_is_faster():
    cmp = compare_pace("RUNNING", 5.0, 5.5)
    assert cmp.is_faster
    assert cmp.difference == pytest.approx(0.5)
    assert cmp.percent_difference == pytest.approx(9.1)


def test_running_slower():
    cmp = compare_pace("running", 6.0, 5.0)
    assert not cmp.is_faster
    assert cmp.percent_difference == pytest.approx(20.0)


def test_cycling_pace_is_converted_to_speed():
    # 2 min/km is 30 km/h, faster than a 25 km/h average
    cmp = compare_pace("CYCLING", 2.0, 25.0)
    assert cmp.user_pace == pytest.approx(30.0)
    assert cmp.is_faster
    assert cmp.pace_unit == "km/h"
    assert cmp.percent_difference == pytest.approx(20.0)


def test_invalid_inputs():
    with pytest.raises(InvalidInput):
        compare_pace("ROWING", 5.0, 5.0)
    with pytest.raises(InvalidInput):
        compare_pace("RUNNING", 0, 5.0)

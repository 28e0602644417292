import pytest

from biopeak.analytics.samples import Sample
from biopeak.analytics.zones import bucket_heart_rate_zones, resolve_max_heart_rate, zone_index
from biopeak.core.errors import InsufficientData


def samples_from(heart_rates, interval=1):
    return [Sample(timestamp=1000 + i * interval, heart_rate=hr) for i, hr in enumerate(heart_rates)]


def test_percentages_sum_to_100():
    hrs = [105, 115, 125, 135, 145, 155, 165, 175, 185, 195] * 7
    breakdown = bucket_heart_rate_zones(samples_from(hrs), 200)
    total_pct = sum(z.percentage for z in breakdown.zones)
    assert total_pct == pytest.approx(100.0, abs=0.5)
    assert [z.zone for z in breakdown.zones] == [1, 2, 3, 4, 5]


def test_zone_boundaries():
    # Lower bound belongs to the zone, the last zone is closed at max
    assert zone_index(120, 200) == 1
    assert zone_index(119.9, 200) == 0
    assert zone_index(100, 200) == 0
    assert zone_index(200, 200) == 4
    assert zone_index(99, 200) is None
    assert zone_index(201, 200) is None


def test_out_of_range_seconds_are_excluded():
    hrs = [80, 150, 150, None, 210]
    breakdown = bucket_heart_rate_zones(samples_from(hrs), 200)
    assert breakdown.total_valid_seconds == 2
    assert breakdown.out_of_range_seconds == 3
    z3 = breakdown.zones[2]
    assert z3.time_in_zone_seconds == 2
    assert z3.percentage == 100.0


def test_sample_weight_is_gap_to_next_sample():
    samples = [
        Sample(timestamp=0, heart_rate=110),   # covers 10 s
        Sample(timestamp=10, heart_rate=190),  # covers 0.5 s -> clamped to 1 s
        Sample(timestamp=10.5, heart_rate=190),  # last sample covers 1 s
    ]
    breakdown = bucket_heart_rate_zones(samples, 200)
    assert breakdown.zones[0].time_in_zone_seconds == 10
    assert breakdown.zones[4].time_in_zone_seconds == 2
    assert breakdown.total_valid_seconds == 12


def test_bpm_bounds_follow_max():
    breakdown = bucket_heart_rate_zones(samples_from([150] * 5), 190)
    assert [(z.min_bpm, z.max_bpm) for z in breakdown.zones] == [
        (95, 114), (114, 133), (133, 152), (152, 171), (171, 190)
    ]
    assert breakdown.zones[0].label == "Recuperação"


def test_no_heart_rate_is_insufficient():
    with pytest.raises(InsufficientData):
        bucket_heart_rate_zones(samples_from([None, None, 0]), 190)


def test_max_heart_rate_resolution_order():
    samples = samples_from([150, 172, 160])
    assert resolve_max_heart_rate(samples, requested=185, configured=190) == 185
    assert resolve_max_heart_rate(samples, requested=None, configured=190) == 190
    assert resolve_max_heart_rate(samples) == 172


def test_max_heart_rate_needs_some_data():
    with pytest.raises(InsufficientData):
        resolve_max_heart_rate(samples_from([None, None]))


def test_all_samples_above_max_is_insufficient():
    # A max below everything observed leaves no time inside the zone table
    with pytest.raises(InsufficientData):
        bucket_heart_rate_zones(samples_from([150] * 30), 120)

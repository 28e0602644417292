import pytest

from biopeak.analytics.segments import fastest_segment


def constant_pace(total_m=2000, step_m=10, sec_per_step=3):
    n = int(total_m / step_m) + 1
    return [(i * step_m, i * sec_per_step) for i in range(n)]


def test_constant_pace_returns_first_window():
    best = fastest_segment(constant_pace())
    assert best is not None
    assert best.start_distance_m == 0
    assert best.end_distance_m == 1000
    assert best.duration_s == pytest.approx(300.0)
    assert best.avg_pace_min_km == pytest.approx(5.0)


def test_constant_pace_over_5km_keeps_earliest_window():
    # Every 1 km window takes 300 s; the first one wins the tie
    best = fastest_segment(constant_pace(total_m=5000))
    assert best.start_distance_m == 0
    assert best.end_distance_m == 1000
    assert best.duration_s == pytest.approx(300.0)
    assert best.avg_pace_min_km == pytest.approx(5.0)


def test_short_activity_has_no_segment():
    assert fastest_segment(constant_pace(total_m=900)) is None


def test_exactly_one_km():
    best = fastest_segment(constant_pace(total_m=1000))
    assert best is not None
    assert best.duration_s == pytest.approx(300.0)


def test_finds_fast_middle_section():
    # 0-1000 m at 5:00/km, 1000-2000 m at 4:00/km, 2000-3000 m at 5:00/km
    points = [(0, 0), (1000, 300), (2000, 540), (3000, 840)]
    best = fastest_segment(points)
    assert best.start_distance_m == pytest.approx(1000)
    assert best.duration_s == pytest.approx(240.0)
    assert best.avg_pace_min_km == pytest.approx(4.0)


def test_end_time_is_interpolated():
    # Sparse samples: the 1000 m mark falls between 900 m and 1200 m
    points = [(0, 0), (900, 270), (1200, 390)]
    best = fastest_segment(points)
    # Window starting at 0: 270 + (390 - 270) * 100 / 300 = 310 s
    # Window starting at 900: would need 1900 m, beyond the data
    assert best.start_distance_m == 0
    assert best.duration_s == pytest.approx(310.0)


def test_ties_keep_earliest_start():
    points = [(0, 0), (500, 150), (1000, 300), (1500, 450)]
    best = fastest_segment(points)
    assert best.start_distance_m == 0


def test_invalid_points_are_dropped():
    points = [
        (0, 0),
        (None, 10),
        (float("nan"), 20),
        (400, 120),
        (300, 130),  # distance going backwards
        (700, 110),  # time going backwards
        (1000, 300),
        (1100, 330),
    ]
    best = fastest_segment(points)
    assert best is not None
    assert best.duration_s == pytest.approx(300.0)


def test_no_positive_duration_window():
    # A GPS jump: 1 km with no elapsed time
    assert fastest_segment([(0, 10), (1000, 10)]) is None


def test_custom_segment_length():
    best = fastest_segment(constant_pace(), segment_m=500)
    assert best.duration_s == pytest.approx(150.0)
    assert best.avg_pace_min_km == pytest.approx(5.0)

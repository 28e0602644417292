from biopeak.analytics.samples import Sample
from biopeak.analytics.variation import DIAGNOSES, analyze_variation


def run(heart_rates, speeds):
    return [
        Sample(timestamp=i, heart_rate=hr, speed_m_s=sp)
        for i, (hr, sp) in enumerate(zip(heart_rates, speeds))
    ]


def test_steady_effort_is_low_low():
    hrs = [148, 150, 152, 150] * 5
    speeds = [3.3, 3.35, 3.3, 3.35] * 5
    result = analyze_variation(run(hrs, speeds))
    assert result.has_valid_data
    assert result.heart_rate_category == "Baixo"
    assert result.pace_category == "Baixo"
    assert result.diagnosis == DIAGNOSES[("Baixo", "Baixo")]
    assert result.data_points_count == 20
    assert result.has_pace_data and result.has_heart_rate_data


def test_intervals_are_high_high():
    hrs = [120, 180] * 10
    speeds = [2.0, 5.0] * 10
    result = analyze_variation(run(hrs, speeds))
    assert result.heart_rate_category == "Alto"
    assert result.pace_category == "Alto"
    assert "intervalado" in result.diagnosis


def test_paced_by_heart_rate_is_low_high():
    hrs = [150, 152] * 10
    speeds = [2.5, 4.5] * 10
    result = analyze_variation(run(hrs, speeds))
    assert (result.heart_rate_category, result.pace_category) == ("Baixo", "Alto")
    assert result.diagnosis == DIAGNOSES[("Baixo", "Alto")]


def test_too_few_points():
    result = analyze_variation(run([150] * 9, [3.0] * 9))
    assert not result.has_valid_data
    assert result.data_points_count == 9
    assert result.diagnosis == "Dados insuficientes para análise (mínimo 10 pontos, encontrados 9)"
    assert result.heart_rate_cv is None


def test_missing_heart_rate_does_not_count():
    hrs = [150] * 9 + [None, 0]
    result = analyze_variation(run(hrs, [3.0] * 11))
    assert not result.has_valid_data
    assert result.data_points_count == 9


def test_heart_rate_only_when_no_speed():
    result = analyze_variation(run([150, 151] * 6, [None] * 12))
    assert result.has_valid_data
    assert result.pace_cv is None
    assert result.pace_category is None
    assert not result.has_pace_data
    assert "sem dados de ritmo" in result.diagnosis


def test_thresholds_are_configurable():
    hrs = [140, 160] * 10  # CV ~ 6.7%
    speeds = [3.0] * 20
    assert analyze_variation(run(hrs, speeds)).heart_rate_category == "Baixo"
    assert analyze_variation(run(hrs, speeds), hr_threshold=5.0).heart_rate_category == "Alto"


def test_steady_pace_with_drifting_heart_rate_is_high_low():
    hrs = [120, 180] * 10  # CV 20%
    speeds = [3.0] * 20
    result = analyze_variation(run(hrs, speeds))
    assert (result.heart_rate_category, result.pace_category) == ("Alto", "Baixo")
    assert result.pace_cv == 0.0
    assert result.diagnosis == DIAGNOSES[("Alto", "Baixo")]
    assert "fadiga" in result.diagnosis

"""Heart-rate and pace variability diagnosis for a single activity."""
from dataclasses import dataclass

from biopeak.analytics.samples import Sample, is_finite, valid_heart_rates, valid_paces
from biopeak.analytics.statistics import categorize, coefficient_of_variation
from biopeak.core.constants import CV_HIGH, CV_LOW
from biopeak.core.errors import InsufficientData
from biopeak.core.logger import get_logger

logger = get_logger(__name__)

DIAGNOSES = {
    (CV_LOW, CV_LOW): "Ritmo e esforço constantes → treino contínuo e controlado",
    (CV_LOW, CV_HIGH): (
        "Ritmo variando mas esforço cardiovascular constante → você ajustou o pace "
        "para manter FC estável (estratégia eficiente em provas longas)"
    ),
    (CV_HIGH, CV_LOW): (
        "Ritmo constante mas FC variando → possível fadiga, desidratação, "
        "temperatura alta ou pouca adaptação ao esforço"
    ),
    (CV_HIGH, CV_HIGH): (
        "Ritmo e esforço muito variáveis → treino intervalado, fartlek, "
        "ou atividade desorganizada"
    ),
}

# Used when the activity carries no usable speed (indoor, strength...)
HR_ONLY_DIAGNOSES = {
    CV_LOW: "Esforço cardiovascular constante → sessão controlada (sem dados de ritmo)",
    CV_HIGH: "FC variando ao longo da sessão → esforço irregular (sem dados de ritmo)",
}


@dataclass(frozen=True)
class VariationResult:
    heart_rate_cv: float | None
    heart_rate_category: str | None
    pace_cv: float | None
    pace_category: str | None
    diagnosis: str
    data_points_count: int
    has_valid_data: bool
    has_heart_rate_data: bool
    has_pace_data: bool


def insufficient_message(found: int, minimum: int) -> str:
    return f"Dados insuficientes para análise (mínimo {minimum} pontos, encontrados {found})"


def diagnose(hr_category: str, pace_category: str | None) -> str:
    if pace_category is None:
        return HR_ONLY_DIAGNOSES[hr_category]
    return DIAGNOSES[(hr_category, pace_category)]


def analyze_variation(
    samples: list[Sample],
    hr_threshold: float = 10.0,
    pace_threshold: float = 15.0,
    min_points: int = 10,
) -> VariationResult:
    """CV of heart rate and pace with a four-way diagnosis.

    Too few heart-rate points is a valid (cacheable) outcome, reported with
    has_valid_data=False rather than raised.
    """
    heart_rates = valid_heart_rates(samples)
    hr_samples = [s for s in samples if is_finite(s.heart_rate) and s.heart_rate > 0]
    paces = valid_paces(hr_samples)
    n = len(heart_rates)

    if n < min_points:
        logger.info(f"Variation analysis skipped: {n} heart rate points (< {min_points})")
        return VariationResult(
            heart_rate_cv=None,
            heart_rate_category=None,
            pace_cv=None,
            pace_category=None,
            diagnosis=insufficient_message(n, min_points),
            data_points_count=n,
            has_valid_data=False,
            has_heart_rate_data=n > 0,
            has_pace_data=len(paces) > 0,
        )

    hr_stats = coefficient_of_variation(heart_rates)
    hr_cv = round(hr_stats.cv, 2)
    hr_category = categorize(hr_stats.cv, hr_threshold)

    pace_cv = None
    pace_category = None
    try:
        pace_stats = coefficient_of_variation(paces)
        pace_cv = round(pace_stats.cv, 2)
        pace_category = categorize(pace_stats.cv, pace_threshold)
    except InsufficientData:
        logger.debug("No usable pace series; diagnosing from heart rate only")

    return VariationResult(
        heart_rate_cv=hr_cv,
        heart_rate_category=hr_category,
        pace_cv=pace_cv,
        pace_category=pace_category,
        diagnosis=diagnose(hr_category, pace_category),
        data_points_count=n,
        has_valid_data=True,
        has_heart_rate_data=True,
        has_pace_data=pace_cv is not None,
    )

"""Descriptive statistics over physiological series."""
import math
from dataclasses import dataclass

from biopeak.core.constants import CV_HIGH, CV_LOW
from biopeak.core.errors import InsufficientData


@dataclass(frozen=True)
class CVStats:
    mean: float
    std_dev: float
    cv: float  # percent


def coefficient_of_variation(values: list[float]) -> CVStats:
    """Mean, population standard deviation and CV (std / mean * 100).

    Raises InsufficientData for fewer than two values or a zero mean.
    """
    n = len(values)
    if n < 2:
        raise InsufficientData(f"Need at least 2 values for a coefficient of variation, got {n}")
    mean = sum(values) / n
    if mean == 0:
        raise InsufficientData("Coefficient of variation is undefined for a zero mean")
    variance = sum((v - mean) ** 2 for v in values) / n
    std_dev = math.sqrt(variance)
    return CVStats(mean=mean, std_dev=std_dev, cv=std_dev / abs(mean) * 100.0)


def categorize(cv: float, low_threshold: float) -> str:
    # Strictly below the threshold is "low"; the boundary itself is "high"
    return CV_LOW if cv < low_threshold else CV_HIGH

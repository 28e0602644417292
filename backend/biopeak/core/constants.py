"""Shared application constants.

Centralizes repeat values used across the metric calculators so we can
document and adjust them in one place.
"""

# Heart rate zone bounds as fractions of HR max.
# Z1: [0.50, 0.60), Z2: [0.60, 0.70), ..., Z5: [0.90, 1.00]
HR_ZONE_BOUNDS = [0.5, 0.6, 0.7, 0.8, 0.9, 1.0]

HR_ZONE_LABELS = ["Recuperação", "Aeróbica", "Limiar", "Anaeróbica", "Máxima"]

# Variation analysis categories
CV_LOW = "Baixo"
CV_HIGH = "Alto"

# Effort distribution needs three segments with at least 3 points each
EFFORT_MIN_POINTS = 9
# Start vs end change below this percentage counts as stable
EFFORT_STABLE_BAND_PCT = 2.0
# Pace values above this (min/km) are treated as standing still
EFFORT_MAX_VALID_PACE = 30.0

# Two windows whose durations differ by less than this are a tie (seconds)
SEGMENT_TIE_TOLERANCE_S = 1e-6

# Community pace categories and their units
PACE_UNITS = {
    "RUNNING": "min/km",
    "CYCLING": "km/h",
    "SWIMMING": "min/100m",
}

# Unit conversions
MS_TO_KMH = 3.6
EARTH_RADIUS_M = 6371000.0

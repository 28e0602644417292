"""Activity-type classification.

Vendors disagree on type names (Garmin sends `TRAIL_RUNNING`, Strava sends
`Run`, Polar sends `RUNNING`...), so matching is a case-insensitive substring
check against a small vocabulary per sport.
"""

RUNNING_TYPES = ["run", "running", "trail_running", "treadmill_running", "track_running", "virtualrun"]
CYCLING_TYPES = ["ride", "cycling", "road_biking", "mountain_biking", "gravel", "virtualride", "biking"]
SWIMMING_TYPES = ["swim", "swimming", "lap_swimming", "open_water_swimming"]
WALKING_TYPES = ["walk", "walking", "hike", "hiking"]

RUNNING = "running"
CYCLING = "cycling"
SWIMMING = "swimming"
WALKING = "walking"
OTHER = "other"


def _matches(activity_type: str, vocabulary: list[str]) -> bool:
    return any(token in activity_type for token in vocabulary)


def classify_activity_type(activity_type: str | None) -> str:
    """Map a vendor type string to running | cycling | swimming | walking | other."""
    if not activity_type:
        return OTHER
    t = activity_type.strip().lower()
    if _matches(t, WALKING_TYPES):
        return WALKING
    if _matches(t, SWIMMING_TYPES):
        return SWIMMING
    if _matches(t, CYCLING_TYPES):
        return CYCLING
    if _matches(t, RUNNING_TYPES):
        return RUNNING
    return OTHER


def is_running_like(activity_type: str | None) -> bool:
    return classify_activity_type(activity_type) == RUNNING


def pace_category(activity_type: str | None) -> str | None:
    """Community pace category (RUNNING, CYCLING, SWIMMING) or None."""
    kind = classify_activity_type(activity_type)
    return {RUNNING: "RUNNING", CYCLING: "CYCLING", SWIMMING: "SWIMMING"}.get(kind)

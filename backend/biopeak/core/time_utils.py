from datetime import datetime, timezone


def format_pace(pace_min_km: float | None) -> str:
    """
    Format a pace in decimal minutes per km as 'M:SS/km'.
    Example: 5.25 -> '5:15/km'
    """
    if pace_min_km is None or pace_min_km <= 0:
        return "0:00/km"

    pace_sec = int(round(pace_min_km * 60))
    minutes = pace_sec // 60
    seconds = pace_sec % 60
    return f"{minutes}:{seconds:02d}/km"


def speed_to_pace(speed_m_s: float | None) -> float | None:
    """Convert a speed in m/s into pace in decimal min/km (None when not moving)."""
    if speed_m_s is None or speed_m_s <= 0:
        return None
    return 1000.0 / (speed_m_s * 60.0)


def epoch_to_iso(ts: int | float | None) -> str | None:
    """Format epoch seconds as an ISO-8601 UTC string with a 'Z' suffix."""
    if ts is None:
        return None
    dt = datetime.fromtimestamp(ts, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


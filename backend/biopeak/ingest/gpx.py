"""GPX import for sources that deliver activities as files (Strava and Zepp exports).

Heart rate and cadence come from the Garmin TrackPointExtension block that
both exporters write:

    <extensions><gpxtpx:TrackPointExtension>
        <gpxtpx:hr>142</gpxtpx:hr><gpxtpx:cad>84</gpxtpx:cad>
    </gpxtpx:TrackPointExtension></extensions>
"""
import math
from dataclasses import dataclass, field
from datetime import date, datetime, timezone

import gpxpy
import gpxpy.gpx

from biopeak.analytics.samples import Sample
from biopeak.core.constants import EARTH_RADIUS_M
from biopeak.core.errors import InvalidInput


def _haversine(lat1, lon1, lat2, lon2):
    """Return great-circle distance in meters between two WGS84 points."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1].lower()


def _extension_values(point: gpxpy.gpx.GPXTrackPoint) -> tuple[float | None, float | None]:
    hr = cad = None
    for ext in point.extensions or []:
        for el in ext.iter():
            name = _local_name(el.tag)
            text = (el.text or "").strip()
            if not text:
                continue
            try:
                value = float(text)
            except ValueError:
                continue
            if name.endswith("hr") and hr is None:
                hr = value
            elif name.endswith("cad") and cad is None:
                cad = value
    return hr, cad


@dataclass
class ParsedGpx:
    name: str | None
    activity_type: str | None
    samples: list[Sample] = field(default_factory=list)
    elevation_gain_m: float = 0.0

    @property
    def start_time(self) -> datetime | None:
        if not self.samples:
            return None
        return datetime.fromtimestamp(self.samples[0].timestamp, tz=timezone.utc)

    @property
    def activity_date(self) -> date | None:
        start = self.start_time
        return start.date() if start else None

    @property
    def total_distance_m(self) -> float:
        return self.samples[-1].distance_m if self.samples else 0.0

    @property
    def total_time_s(self) -> float:
        if len(self.samples) < 2:
            return 0.0
        return self.samples[-1].timestamp - self.samples[0].timestamp

    def heart_rates(self) -> list[float]:
        return [s.heart_rate for s in self.samples if s.heart_rate]


def parse_gpx(text: str) -> ParsedGpx:
    try:
        gpx = gpxpy.parse(text)
    except gpxpy.gpx.GPXException as exc:
        raise InvalidInput(f"Invalid GPX file: {exc}") from exc

    name = None
    activity_type = None
    samples: list[Sample] = []
    total_m = 0.0
    elev_gain = 0.0
    prev = None
    prev_ts = None
    t0 = None

    for track in gpx.tracks:
        name = name or track.name
        activity_type = activity_type or track.type
        for segment in track.segments:
            for p in segment.points:
                if p.time is None:
                    continue
                ts = p.time.replace(tzinfo=p.time.tzinfo or timezone.utc).timestamp()
                if t0 is None:
                    t0 = ts
                speed = None
                if prev is not None:
                    step = _haversine(prev.latitude, prev.longitude, p.latitude, p.longitude)
                    total_m += step
                    dt = ts - prev_ts
                    speed = step / dt if dt > 0 else None
                    if p.elevation is not None and prev.elevation is not None and p.elevation > prev.elevation:
                        elev_gain += p.elevation - prev.elevation
                hr, cad = _extension_values(p)
                samples.append(
                    Sample(
                        timestamp=ts,
                        heart_rate=hr,
                        speed_m_s=speed,
                        distance_m=round(total_m, 2),
                        latitude=p.latitude,
                        longitude=p.longitude,
                        elevation_m=p.elevation,
                        cadence=cad,
                        clock_s=ts - t0,
                    )
                )
                prev, prev_ts = p, ts

    if not samples:
        raise InvalidInput("GPX file has no timestamped track points")
    return ParsedGpx(name=name, activity_type=activity_type, samples=samples, elevation_gain_m=round(elev_gain, 1))

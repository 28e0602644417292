from dataclasses import dataclass
from enum import Enum

from biopeak.core.errors import InvalidInput
from biopeak.models.activity_sample import (
    GarminActivityDetail,
    HealthkitActivitySample,
    PolarActivityDetail,
    StravaActivityStream,
    StravaGpxSample,
    ZeppGpxSample,
)


class ActivitySource(str, Enum):
    garmin = "garmin"
    polar = "polar"
    strava = "strava"
    strava_gpx = "strava_gpx"
    zepp_gpx = "zepp_gpx"
    healthkit = "healthkit"

    @classmethod
    def parse(cls, value: "str | ActivitySource") -> "ActivitySource":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(s.value for s in cls)
            raise InvalidInput(f"Unknown activity source '{value}' (expected one of: {valid})")


@dataclass(frozen=True)
class SourceProfile:
    sample_model: type
    label: str
    import_format: str | None  # "gpx" when activities can be uploaded as files


SOURCE_PROFILES: dict[ActivitySource, SourceProfile] = {
    ActivitySource.garmin: SourceProfile(GarminActivityDetail, "Garmin", None),
    ActivitySource.polar: SourceProfile(PolarActivityDetail, "Polar", None),
    ActivitySource.strava: SourceProfile(StravaActivityStream, "Strava", None),
    ActivitySource.strava_gpx: SourceProfile(StravaGpxSample, "Strava (GPX)", "gpx"),
    ActivitySource.zepp_gpx: SourceProfile(ZeppGpxSample, "Zepp (GPX)", "gpx"),
    ActivitySource.healthkit: SourceProfile(HealthkitActivitySample, "Apple Health", None),
}


def profile_for(source: "str | ActivitySource") -> SourceProfile:
    return SOURCE_PROFILES[ActivitySource.parse(source)]

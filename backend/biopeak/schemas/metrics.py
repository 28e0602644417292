from datetime import date, datetime
from typing import Generic, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class MetricResponse(BaseModel, Generic[T]):
    """Envelope shared by the metric endpoints."""

    success: bool
    source: Optional[Literal["cache", "calculated"]] = None
    data: Optional[T] = None
    message: Optional[str] = None


# --- Requests ---------------------------------------------------------------

class ActivityMetricRequest(BaseModel):
    activity_id: str
    activity_source: str = "garmin"
    user_id: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class HeartRateZonesRequest(ActivityMetricRequest):
    max_heart_rate: Optional[int] = Field(default=None, gt=0)


class BestSegmentRequest(BaseModel):
    activity_id: str
    user_id: str
    activity_source: Optional[str] = None  # only needed when there is no activity row


class FitnessScoreRequest(BaseModel):
    user_id: str
    target_date: Optional[date] = None


class Vo2MaxRequest(BaseModel):
    user_id: str
    today: Optional[date] = None


class AveragePaceRequest(BaseModel):
    period_days: Optional[int] = Field(default=None, gt=0)
    today: Optional[date] = None


class RecomputeRequest(ActivityMetricRequest):
    kind: Literal["variation_analysis", "heart_rate_zones", "best_segment"]
    max_heart_rate: Optional[int] = Field(default=None, gt=0)


# --- Reads ------------------------------------------------------------------

class VariationAnalysisRead(BaseModel):
    user_id: str
    activity_id: str
    activity_source: str
    heart_rate_cv: Optional[float] = None
    heart_rate_category: Optional[str] = None
    pace_cv: Optional[float] = None
    pace_category: Optional[str] = None
    diagnosis: Optional[str] = None
    data_points_count: int
    has_valid_data: bool
    has_heart_rate_data: bool
    has_pace_data: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ZoneRead(BaseModel):
    zone: int
    label: str
    min_bpm: int
    max_bpm: int
    time_in_zone_seconds: float
    percentage: float


class HeartRateZonesRead(BaseModel):
    user_id: str
    activity_id: str
    activity_source: str
    max_heart_rate: int
    zones: list[ZoneRead]
    total_valid_seconds: float
    out_of_range_seconds: float
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class BestSegmentRead(BaseModel):
    user_id: str
    activity_id: str
    activity_source: str
    activity_date: Optional[date] = None
    segment_start_distance_meters: float
    segment_end_distance_meters: float
    segment_duration_seconds: float
    best_1km_pace_min_km: float
    best_1km_pace: Optional[str] = None  # 'M:SS/km'
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class FitnessScoreRead(BaseModel):
    user_id: str
    calendar_date: date
    fitness: float
    fatigue: float
    performance: float
    daily_strain: float
    load_model: str
    activities_count: int
    fitness_score: float
    capacity_score: float
    consistency_score: float
    recovery_balance_score: float

    model_config = ConfigDict(from_attributes=True)


class Vo2MaxActivityRead(BaseModel):
    activity_id: str
    activity_date: date
    distance_m: float
    time_s: float
    vo2max: float

    model_config = ConfigDict(from_attributes=True)


class Vo2MaxRead(BaseModel):
    current_vo2max: Optional[float] = None
    best_vo2max: Optional[float] = None
    trend: Optional[Literal["up", "down", "stable"]] = None
    change: Optional[float] = None
    best_activity: Optional[Vo2MaxActivityRead] = None
    estimates_count: int = 0

    model_config = ConfigDict(from_attributes=True)


class EffortDistributionRead(BaseModel):
    start_effort: float
    middle_effort: float
    end_effort: float
    start_pace: Optional[float] = None
    middle_pace: Optional[float] = None
    end_pace: Optional[float] = None
    pattern: Literal["negative_split", "positive_split", "even_pace", "cardiac_drift", "economy"]
    has_cardiac_drift: bool
    pace_change: Literal["faster", "slower", "stable"]
    hr_change: Literal["higher", "lower", "stable"]

    model_config = ConfigDict(from_attributes=True)


class AveragePaceRead(BaseModel):
    category: str
    average_pace_value: float
    pace_unit: str
    total_activities: int
    calculated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PaceComparisonRead(BaseModel):
    category: str
    user_pace: float
    average_pace: float
    pace_unit: str
    difference: float
    percent_difference: float
    is_faster: bool

    model_config = ConfigDict(from_attributes=True)


class ActivityRead(BaseModel):
    user_id: str
    activity_id: str
    activity_source: str
    activity_type: Optional[str] = None
    activity_date: Optional[date] = None
    start_time: Optional[datetime] = None
    total_distance_meters: Optional[float] = None
    total_time_seconds: Optional[float] = None
    average_heart_rate: Optional[int] = None
    max_heart_rate: Optional[int] = None
    elevation_gain_meters: Optional[float] = None

    model_config = ConfigDict(from_attributes=True)


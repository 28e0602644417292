from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, Field


class VariationBackfillRequest(BaseModel):
    source: str = "garmin"  # or "all"
    limit: int = 100
    offset: int = Field(default=0, ge=0)
    dry_run: bool = False
    user_id: Optional[str] = None


class BackfillFailure(BaseModel):
    user_id: str
    activity_id: str
    step: str
    error: Optional[str] = None


class SourceBackfillRead(BaseModel):
    source: str
    fetched: int
    processed: int
    ok: int
    failures: list[BackfillFailure]
    next_offset: int
    error: Optional[str] = None


class VariationBackfillResponse(BaseModel):
    ok: bool
    limit: int
    offset: int
    results: dict[str, SourceBackfillRead]


class FitnessBackfillRequest(BaseModel):
    limit: Optional[int] = None
    offset: int = Field(default=0, ge=0)
    user_id: Optional[str] = None
    target_date: Optional[date] = None
    concurrency: Optional[int] = Field(default=None, ge=1, le=16)
    only_missing_today: bool = True


class FitnessBackfillResponse(BaseModel):
    target_date: date
    users_scanned: int
    users_to_process: int
    users_updated: int
    users_failed: int
    errors: list[str]
    next_offset: Optional[int] = None


class RecomputeResponse(BaseModel):
    success: bool
    kind: str
    state: str
    data: Optional[Any] = None
    message: Optional[str] = None

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import Response
from sqlalchemy.orm import Session

from biopeak.core.errors import InvalidInput
from biopeak.db import get_db
from biopeak.ingest.gpx import parse_gpx
from biopeak.schemas.metrics import ActivityRead
from biopeak.services.export import export_activity_csv, export_filename
from biopeak.services.imports import store_gpx_activity
from biopeak.services.samples import load_samples
from biopeak.services.sources import ActivitySource


router = APIRouter(prefix="/activities", tags=["activities"])


@router.get("/{activity_id}/export.csv")
def export_activity(
    activity_id: str,
    activity_source: str = Query("garmin"),
    user_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    samples = load_samples(db, ActivitySource.parse(activity_source), activity_id, user_id)
    if not samples:
        raise InvalidInput(f"No samples found for activity {activity_id}", status_code=404)
    return Response(
        content=export_activity_csv(samples),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(activity_id)}"'},
    )


@router.post("/import/gpx", response_model=ActivityRead, status_code=201)
def import_gpx(
    user_id: str = Form(...),
    activity_source: str = Form("strava_gpx"),
    activity_id: Optional[str] = Form(None),
    activity_type: Optional[str] = Form(None),
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
):
    filename = (file.filename or "").lower()
    if filename and not filename.endswith(".gpx"):
        raise InvalidInput("Unsupported file type; only .gpx is accepted")
    raw = file.file.read()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidInput("GPX file must be UTF-8 encoded") from exc
    parsed = parse_gpx(text)
    return store_gpx_activity(
        db,
        user_id=user_id,
        source=ActivitySource.parse(activity_source),
        parsed=parsed,
        activity_id=activity_id,
        activity_type=activity_type,
    )

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from biopeak.api.metrics import router as metrics_router
from biopeak.api.admin import router as admin_router
from biopeak.api.backfill import router as backfill_router
from biopeak.api.activities import router as activities_router
from biopeak.core.cache import build_cache_store
from biopeak.core.config import settings
from biopeak.core.errors import BioPeakError
from biopeak.core.handlers import (
    biopeak_exception_handler,
    generic_exception_handler,
    http_exception_handler,
)
from biopeak.core.logger import get_logger
from biopeak.db import Base, engine
from biopeak.models.activity import Activity  # noqa: F401  (import ensures table is registered)
from biopeak.models.activity_sample import GarminActivityDetail  # noqa: F401  (registers every vendor table)
from biopeak.models.variation_analysis import ActivityVariationAnalysis  # noqa: F401
from biopeak.models.heart_rate_zones import ActivityHeartRateZones  # noqa: F401
from biopeak.models.best_segment import ActivityBestSegment  # noqa: F401
from biopeak.models.fitness_score import FitnessScoreDaily  # noqa: F401
from biopeak.models.average_pace import AveragePace  # noqa: F401
from biopeak.services.etl import build_orchestrator

logger = get_logger("biopeak")

app = FastAPI(title="BioPeak Metrics")

# Allow CORS for the web and mobile clients
origins = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(BioPeakError, biopeak_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Create DB tables on startup (migrations own production schemas)
Base.metadata.create_all(bind=engine)

# Shared per-process services
app.state.orchestrator = build_orchestrator(settings)
app.state.pace_cache = build_cache_store(settings.redis_url, settings.pace_cache_ttl_seconds)

app.include_router(metrics_router)
app.include_router(admin_router)
app.include_router(backfill_router)
app.include_router(activities_router)

logger.info("BioPeak metrics API ready")


@app.get("/")
def root():
    return {"message": "BioPeak metrics backend is running"}

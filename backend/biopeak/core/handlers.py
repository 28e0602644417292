from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from biopeak.core.errors import BioPeakError
from biopeak.core.logger import get_logger

logger = get_logger(__name__)


async def biopeak_exception_handler(request: Request, exc: BioPeakError):
    logger.warning(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    return exc.to_response()


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
    )


async def generic_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.url.path}: {repr(exc)}")
    return JSONResponse(
        status_code=500,
        content={"error": "An unexpected error occurred", "retryable": True},
    )

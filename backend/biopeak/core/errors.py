from typing import Any

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


class BioPeakError(Exception):
    """Base class for errors the API turns into a JSON error response."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    retryable: bool = False

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def payload(self) -> dict[str, Any]:
        return {"error": self.message, "retryable": self.retryable}

    def to_response(self) -> JSONResponse:
        return JSONResponse(
            status_code=self.status_code,
            content=jsonable_encoder(self.payload()),
        )


class InsufficientData(BioPeakError):
    """Not enough samples or data points to compute a metric."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class UpstreamFetchFailed(BioPeakError):
    """The sample store (or another upstream read) failed."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    retryable = True


class PersistFailed(BioPeakError):
    """Writing a cache row failed. `data` holds the unpersisted result, if any."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    retryable = True

    def __init__(self, message: str, data: dict[str, Any] | None = None):
        super().__init__(message)
        self.data = data

    def payload(self) -> dict[str, Any]:
        body = super().payload()
        if self.data is not None:
            body["data"] = self.data
        return body


class InvalidInput(BioPeakError):
    """Malformed identifiers or out-of-range parameters."""

    status_code = status.HTTP_400_BAD_REQUEST

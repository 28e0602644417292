from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

import backoff

from biopeak.core.config import Settings
from biopeak.core.errors import PersistFailed, UpstreamFetchFailed
from biopeak.core.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff applied to one unit of batch work.

    Waits `factor * 2**n` seconds between tries (capped at `max_value`),
    giving up after `max_tries` attempts. Only retryable pipeline errors are
    retried; anything else propagates on the first failure.
    """

    max_tries: int = 3
    factor: float = 0.5
    max_value: float | None = 8.0
    retry_on: tuple[type[Exception], ...] = field(
        default=(UpstreamFetchFailed, PersistFailed)
    )

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetryPolicy":
        return cls(
            max_tries=max(1, settings.retry_max_tries),
            factor=settings.retry_backoff_factor,
            max_value=settings.retry_backoff_max_seconds,
        )

    def call(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        wrapped = backoff.on_exception(
            backoff.expo,
            self.retry_on,
            max_tries=self.max_tries,
            factor=self.factor,
            max_value=self.max_value,
            logger=logger,
        )(fn)
        return wrapped(*args, **kwargs)

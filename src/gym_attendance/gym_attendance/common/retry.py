from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, TypeVar

from ..core.exceptions import TransientStorageError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Retry storage calls that fail with TransientStorageError.

    attempts=2 means "retry once". Backoff doubles per attempt.
    """

    attempts: int = 2
    backoff_seconds: float = 0.2
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)

    def run(self, fn: Callable[..., T], *args, **kwargs) -> T:
        delay = self.backoff_seconds
        attempt = 1
        while True:
            try:
                return fn(*args, **kwargs)
            except TransientStorageError as e:
                if attempt >= self.attempts:
                    raise
                logger.warning(
                    "transient storage failure in %s (attempt %d/%d): %s",
                    getattr(fn, "__name__", fn), attempt, self.attempts, e,
                )
                self.sleep(delay)
                delay *= 2
                attempt += 1


NO_RETRY = RetryPolicy(attempts=1, backoff_seconds=0.0)

"""
Retry Driver
Bounded, fixed-backoff retry around one full fetch + extract attempt
"""

import time
import logging
from enum import Enum
from typing import Callable, Optional

from .exceptions import AttemptsExhausted, IncompleteExtraction, ScraperError
from .models import PriceRecord

logger = logging.getLogger(__name__)


class RetryState(str, Enum):
    IDLE = "idle"
    ATTEMPTING = "attempting"
    ACCEPTED = "accepted"
    EXHAUSTED = "exhausted"


class RetryDriver:
    """
    Runs a pipeline until it yields a complete record or the budget is spent

    The wait between attempts is fixed (no growth, no jitter) and is never
    taken after the last attempt. The driver never makes up data: on
    exhaustion it raises and the caller decides what to persist.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        backoff_seconds: float = 10.0,
        sleep: Callable[[float], None] = time.sleep
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.max_attempts = max_attempts
        self.backoff_seconds = backoff_seconds
        self.sleep = sleep
        self.state = RetryState.IDLE
        self.attempts = 0
        self.last_error: Optional[Exception] = None

    def run(self, pipeline: Callable[[int], PriceRecord]) -> PriceRecord:
        """
        Call `pipeline(attempt_number)` until its record is complete

        Args:
            pipeline: One fetch + extract attempt; may raise ScraperError

        Returns:
            The first complete record

        Raises:
            AttemptsExhausted: no attempt produced a complete record
        """
        self.state = RetryState.ATTEMPTING
        self.attempts = 0
        self.last_error = None

        for attempt in range(1, self.max_attempts + 1):
            self.attempts = attempt
            try:
                record = pipeline(attempt)
                if record.is_complete():
                    self.state = RetryState.ACCEPTED
                    logger.info(f" Attempt {attempt} accepted")
                    return record
                self.last_error = IncompleteExtraction(record.source)
            except ScraperError as e:
                self.last_error = e

            logger.warning(f" Attempt {attempt}/{self.max_attempts} failed: {self.last_error}")

            if attempt < self.max_attempts:
                logger.info(f"⏳ Retrying in {self.backoff_seconds}s...")
                self.sleep(self.backoff_seconds)

        self.state = RetryState.EXHAUSTED
        raise AttemptsExhausted(self.attempts, self.last_error)

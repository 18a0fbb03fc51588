"""
Metal Price Scraper - Main orchestration class
Runs scrape-and-persist cycles over the configured sources

Cycle Flow:
1. Fetch from the first working source (FetchOrchestrator)
2. Extract prices for the source's content shape
3. Retry the whole attempt with a fixed backoff (RetryDriver)
4. Substitute the fallback record when every attempt fails
5. Append the record to the CSV log and the JSON history
"""

import time
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from .config import ScraperConfig
from .embedded_extractor import EmbeddedPriceMapper
from .exceptions import AttemptsExhausted, PersistenceError
from .fallback import FallbackProvider
from .field_classifier import FieldClassifier
from .html_fetcher import HTMLFetcher
from .models import PriceRecord, new_record
from .price_extractor import PriceExtractor
from .retry import RetryDriver
from .source_fetcher import FetchOrchestrator
from .storage import CSVPriceLog, JSONPriceHistory

logger = logging.getLogger(__name__)


@dataclass
class CycleResult:
    """Outcome of one scrape-and-persist cycle"""
    record: PriceRecord
    attempts: int
    csv_saved: bool = False
    json_saved: bool = False
    errors: List[str] = field(default_factory=list)

    @property
    def used_fallback(self) -> bool:
        return self.record.is_fallback


class MetalPriceScraper:
    """
    Gold & silver price scraper

    One cycle runs to completion before the next starts; nothing but the
    output files is shared between cycles.
    """

    def __init__(
        self,
        config: Optional[ScraperConfig] = None,
        fetcher: Optional[HTMLFetcher] = None,
        classifier: Optional[FieldClassifier] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        """
        Initialize Metal Price Scraper

        Args:
            config: Settings for this process (defaults when omitted)
            fetcher: HTTP fetcher, e.g. one wrapping a test session
            classifier: Field classifier with extra synonyms
            sleep: Blocking wait used for retry backoff and the run loop
        """
        self.config = config or ScraperConfig()
        self.fetcher = fetcher or HTMLFetcher()
        self.classifier = classifier or FieldClassifier()
        self.sleep = sleep

        self.orchestrator = FetchOrchestrator(self.fetcher)
        self.extractor = PriceExtractor(self.classifier)
        self.mapper = EmbeddedPriceMapper(self.classifier, self.config.embedded_value_keys)
        self.fallback_provider = FallbackProvider(self.config.currency)
        self.csv_log = CSVPriceLog(self.config.csv_path)
        self.json_history = JSONPriceHistory(self.config.json_path)
        self.last_attempts = 0

    def _attempt(self, attempt: int) -> PriceRecord:
        """One fetch + extract pass; raises ScraperError subclasses on failure"""
        logger.info(f"🔍 Fetching data (attempt {attempt}/{self.config.max_attempts})...")
        content = self.orchestrator.fetch(self.config.sources)

        record = new_record(content.candidate.source_tag, self.config.currency)
        if content.document is not None:
            logger.info("🔎 Searching for prices...")
            self.extractor.extract_from_document(content.document, record, self.config.price_ranges)
        else:
            self.mapper.map(content.arrays, record)

        return record.freeze()

    def scrape_prices(self) -> PriceRecord:
        """
        Produce the record of one cycle

        Always returns a complete record: a live one when an attempt
        succeeded, otherwise the fallback record.
        """
        driver = RetryDriver(
            max_attempts=self.config.max_attempts,
            backoff_seconds=self.config.backoff_seconds,
            sleep=self.sleep,
        )
        try:
            record = driver.run(self._attempt)
            logger.info(" Extracted prices successfully!")
        except AttemptsExhausted as e:
            logger.warning(f" All scraping attempts failed: {e.last_error}")
            record = self.fallback_provider.fallback()
        self.last_attempts = driver.attempts
        return record

    def persist(self, record: PriceRecord) -> Dict[str, Any]:
        """Write to both sinks; a failing sink does not stop the other"""
        outcome: Dict[str, Any] = {'csv': False, 'json': False, 'errors': []}

        try:
            self.csv_log.append(record)
            outcome['csv'] = True
            logger.info(" Successfully saved to CSV")
        except PersistenceError as e:
            logger.error(f" Error saving to CSV: {e}")
            outcome['errors'].append(str(e))

        try:
            self.json_history.append(record)
            outcome['json'] = True
            logger.info(" Successfully saved to JSON")
        except PersistenceError as e:
            logger.error(f" Error saving to JSON: {e}")
            outcome['errors'].append(str(e))

        return outcome

    def run_cycle(self) -> CycleResult:
        """Scrape, fall back if needed, and persist"""
        logger.info("--- Starting new scraping cycle ---")
        record = self.scrape_prices()
        outcome = self.persist(record)
        logger.info(f"📊 {record.summary()}")
        return CycleResult(
            record=record,
            attempts=self.last_attempts,
            csv_saved=outcome['csv'],
            json_saved=outcome['json'],
            errors=outcome['errors'],
        )

    def run_forever(self, max_cycles: Optional[int] = None) -> int:
        """
        Run a cycle now and then every `interval_seconds`

        Args:
            max_cycles: Stop after this many cycles (None runs until interrupted)

        Returns:
            Number of cycles run
        """
        interval = self.config.interval_seconds
        logger.info("===========================================")
        logger.info("Gold & Silver Price Scraper Started")
        for source in self.config.sources:
            logger.info(f"Target: {source.label}")
        logger.info(f"Scraping interval: {timedelta(seconds=interval)}")
        logger.info("===========================================")

        cycles = 0
        while max_cycles is None or cycles < max_cycles:
            try:
                self.run_cycle()
            except Exception:
                # A broken cycle must not stop the schedule
                logger.exception(" Scraping cycle crashed")
            cycles += 1

            if max_cycles is not None and cycles >= max_cycles:
                break
            next_run = datetime.now() + timedelta(seconds=interval)
            logger.info(f"Next scraping in {timedelta(seconds=interval)} at {next_run:%H:%M:%S}")
            self.sleep(interval)

        return cycles

    def check_sources(self) -> List[Dict[str, Any]]:
        """Reachability of every configured source"""
        return [
            self.fetcher.check(source.url, timeout=source.timeout)
            for source in self.config.sources
        ]

    def close(self) -> None:
        self.fetcher.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

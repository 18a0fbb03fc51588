"""
Scraper Errors
Typed failures raised along the fetch -> extract -> persist path
"""

from typing import Any, List, Optional, Tuple


class ScraperError(Exception):
    """Base class for every recoverable scraping failure"""


class CandidateUnreachable(ScraperError):
    """Network error, timeout or non-success status for one source"""

    def __init__(self, url: str, reason: str, status_code: Optional[int] = None):
        self.url = url
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"{url}: {reason}")


class ContentUnparseable(ScraperError):
    """Source answered but its content could not be parsed"""


class EmbeddedDataError(ContentUnparseable):
    """Script-embedded price arrays are missing or unusable"""


class MissingMarker(EmbeddedDataError):
    def __init__(self, marker: str):
        self.marker = marker
        super().__init__(f"Array assignment '{marker} = [...]' not found")


class MalformedArray(EmbeddedDataError):
    def __init__(self, marker: str, reason: str):
        self.marker = marker
        self.reason = reason
        super().__init__(f"Array '{marker}' could not be decoded: {reason}")


class InsufficientEntries(EmbeddedDataError):
    def __init__(self, marker: str, found: int, required: int):
        self.marker = marker
        self.found = found
        self.required = required
        super().__init__(
            f"Array '{marker}' has {found} entries, at least {required} required"
        )


class SourcesExhausted(ScraperError):
    """Every candidate source failed during one fetch"""

    def __init__(self, failures: List[Tuple[Any, Exception]]):
        self.failures = failures
        summary = "; ".join(str(error) for _, error in failures) or "no candidates configured"
        super().__init__(f"All {len(failures)} sources failed: {summary}")


class IncompleteExtraction(ScraperError):
    """Content parsed but the primary price field was not found"""

    def __init__(self, source: str):
        self.source = source
        super().__init__(f"No primary price extracted from {source}")


class AttemptsExhausted(ScraperError):
    """Retry budget spent without an acceptable record"""

    def __init__(self, attempts: int, last_error: Optional[Exception] = None):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Gave up after {attempts} attempts: {last_error}")


class PersistenceError(ScraperError):
    """Writing a record to one of the output logs failed"""

    def __init__(self, path: Any, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not write {path}: {reason}")


class RecordFrozenError(RuntimeError):
    """A price record was modified after its extraction pass ended"""

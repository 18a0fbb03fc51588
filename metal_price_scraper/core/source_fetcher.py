"""
Source Fetcher
Tries the configured sources in order and returns the first usable content
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup, ParserRejectedMarkup

from .config import ContentShape, SourceCandidate
from .embedded_extractor import EmbeddedArrays, locate_embedded_arrays
from .exceptions import CandidateUnreachable, ContentUnparseable, SourcesExhausted
from .html_fetcher import HTMLFetcher

logger = logging.getLogger(__name__)


@dataclass
class FetchedContent:
    """Content of the accepted source, parsed for its shape"""
    raw: str
    candidate: SourceCandidate
    document: Optional[BeautifulSoup] = None
    arrays: Optional[EmbeddedArrays] = None


class FetchOrchestrator:
    """
    Sequential first-success fetch over an ordered source list

    A source is accepted as soon as it answers 2xx with content that parses
    for its shape. Whether the parsed content actually holds prices is not
    judged here; an accepted source is never followed by the next one.
    """

    def __init__(
        self,
        fetcher: HTMLFetcher,
        parser: str = "html.parser",
        on_failure: Optional[Callable[[SourceCandidate, Exception], None]] = None
    ):
        self.fetcher = fetcher
        self.parser = parser
        self.on_failure = on_failure

    def fetch(self, candidates: Sequence[SourceCandidate]) -> FetchedContent:
        """
        Fetch from the first working candidate

        Raises:
            SourcesExhausted: every candidate failed; carries each failure
        """
        failures: List[Tuple[SourceCandidate, Exception]] = []

        for index, candidate in enumerate(candidates, 1):
            logger.info(f" Source {index}/{len(candidates)}: {candidate.label} ({candidate.shape.value})")
            try:
                response = self.fetcher.fetch(candidate.url, timeout=candidate.timeout)
                content = self._parse(response.text, candidate)
            except (CandidateUnreachable, ContentUnparseable) as e:
                logger.warning(f" {candidate.label} failed: {e}")
                failures.append((candidate, e))
                if self.on_failure:
                    self.on_failure(candidate, e)
                continue

            logger.info(f" Accepted {candidate.label}")
            return content

        raise SourcesExhausted(failures)

    def _parse(self, raw: str, candidate: SourceCandidate) -> FetchedContent:
        if candidate.shape == ContentShape.EMBEDDED:
            arrays = locate_embedded_arrays(raw, candidate.gold_marker, candidate.silver_marker)
            return FetchedContent(raw=raw, candidate=candidate, arrays=arrays)

        if not raw or not raw.strip():
            raise ContentUnparseable(f"{candidate.url}: empty body")
        try:
            document = BeautifulSoup(raw, self.parser)
        except ParserRejectedMarkup as e:
            raise ContentUnparseable(f"{candidate.url}: markup rejected by parser: {e}") from e
        if document.find() is None:
            raise ContentUnparseable(f"{candidate.url}: no markup elements")
        return FetchedContent(raw=raw, candidate=candidate, document=document)

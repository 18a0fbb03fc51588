"""
HTML Fetcher with CloudScraper
Issues single GET requests with realistic browser headers
"""

import random
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import cloudscraper
import requests
from cloudscraper.exceptions import CloudflareException
from requests.adapters import HTTPAdapter

from .exceptions import CandidateUnreachable

logger = logging.getLogger(__name__)


@dataclass
class FetchResponse:
    """Body and metadata of one successful request"""
    text: str
    url: str
    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)


class HTMLFetcher:
    """
    Fetches pages with a browser-like client identity

    Several price sites reject anonymous or default clients, so every request
    carries a realistic Chrome header set. Retrying is not done here: one call
    is one network attempt, and the RetryDriver owns the retry policy.
    """

    # Realistic user agents
    USER_AGENTS = [
        'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36',
        'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36',
        'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
    ]

    def __init__(
        self,
        session: Optional[Any] = None,
        user_agent: Optional[str] = None
    ):
        """
        Initialize HTML Fetcher

        Args:
            session: requests-compatible session; a CloudScraper session is
                created when omitted
            user_agent: Fixed User-Agent instead of a random realistic one
        """
        self.user_agent = user_agent or random.choice(self.USER_AGENTS)
        self.session = session if session is not None else self._create_session()
        self.request_count = 0

    def _create_session(self) -> requests.Session:
        """Create CloudScraper session with browser headers"""
        session = cloudscraper.create_scraper(
            browser={
                'browser': 'chrome',
                'platform': 'windows',
                'mobile': False
            }
        )

        session.headers.update({
            'User-Agent': self.user_agent,
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8',
            'Accept-Language': 'en-US,en;q=0.9,bn;q=0.8',
            'Accept-Encoding': 'gzip, deflate, br',
            'Connection': 'keep-alive',
            'Upgrade-Insecure-Requests': '1',
            'sec-ch-ua': '"Not_A Brand";v="8", "Chromium";v="121", "Google Chrome";v="121"',
            'sec-ch-ua-mobile': '?0',
            'sec-ch-ua-platform': '"Windows"',
            'Sec-Fetch-Dest': 'document',
            'Sec-Fetch-Mode': 'navigate',
            'Sec-Fetch-Site': 'none',
            'Sec-Fetch-User': '?1',
        })

        logger.info(f" Using user agent: {self.user_agent[:60]}...")

        # No transport-level retries: a failed request moves on to the next source
        adapter = HTTPAdapter(max_retries=0)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        return session

    def fetch(self, url: str, timeout: float = 30.0) -> FetchResponse:
        """
        Fetch one URL

        Raises:
            CandidateUnreachable: transport error, timeout or non-2xx status
        """
        self.request_count += 1
        logger.info(f" Fetching: {url[:80]}..." if len(url) > 80 else f" Fetching: {url}")

        try:
            response = self.session.get(url, timeout=timeout, allow_redirects=True)
        except requests.Timeout as e:
            raise CandidateUnreachable(url, f"timed out after {timeout}s") from e
        except (requests.RequestException, CloudflareException) as e:
            raise CandidateUnreachable(url, str(e)[:200]) from e

        if not 200 <= response.status_code < 300:
            raise CandidateUnreachable(
                url, f"status code {response.status_code}", status_code=response.status_code
            )

        logger.info(f" Success: {response.status_code} ({len(response.text)} bytes)")
        return FetchResponse(
            text=response.text,
            url=response.url,
            status_code=response.status_code,
            headers=dict(response.headers),
        )

    def check(self, url: str, timeout: float = 30.0) -> Dict[str, Any]:
        """
        Probe a source without extracting anything

        Returns:
            Dict with 'url', 'reachable', 'status_code', 'status',
            'content_type', 'content_length' and 'error' keys
        """
        result: Dict[str, Any] = {
            'url': url,
            'reachable': False,
            'status_code': None,
            'status': '',
            'content_type': '',
            'content_length': '',
            'error': None,
        }
        try:
            response = self.session.get(url, timeout=timeout, allow_redirects=True)
        except (requests.RequestException, CloudflareException) as e:
            result['error'] = str(e)[:200]
            logger.warning(f" {url} unreachable: {result['error']}")
            return result

        result.update({
            'reachable': True,
            'status_code': response.status_code,
            'status': f"{response.status_code} {response.reason or ''}".strip(),
            'content_type': response.headers.get('Content-Type', ''),
            'content_length': response.headers.get('Content-Length', ''),
        })
        return result

    def close(self) -> None:
        """Close the session"""
        if self.session:
            self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

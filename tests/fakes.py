"""In-memory stand-ins for the HTTP session, the blocking sleep and the parser."""

from typing import Dict, List, Union

import requests
from bs4 import BeautifulSoup, ParserRejectedMarkup

from metal_price_scraper.core.html_fetcher import HTMLFetcher


class FakeResponse:
    def __init__(self, url: str, text: str = "", status_code: int = 200, headers=None):
        self.url = url
        self.text = text
        self.status_code = status_code
        self.headers = headers or {"Content-Type": "text/html; charset=utf-8"}
        self.reason = "OK" if status_code < 400 else "Error"


class FakeSession:
    """Answers GETs from a url -> response (or exception) table and records calls."""

    def __init__(self, routes: Dict[str, Union[FakeResponse, Exception]]):
        self.routes = routes
        self.calls: List[str] = []
        self.closed = False

    def get(self, url, timeout=None, allow_redirects=True):
        self.calls.append(url)
        answer = self.routes.get(url)
        if answer is None:
            raise requests.ConnectionError(f"no route to {url}")
        if isinstance(answer, Exception):
            raise answer
        return answer

    def close(self):
        self.closed = True


class RecordingSleep:
    def __init__(self):
        self.calls: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def make_fetcher(routes) -> HTMLFetcher:
    return HTMLFetcher(session=FakeSession(routes), user_agent="test-agent")


# html.parser rejects this on some interpreters; strict_soup always does
REJECTED_MARKUP = "<html><![ q ]]></html>"


def strict_soup(markup, features=None, *args, **kwargs):
    if markup == REJECTED_MARKUP:
        raise ParserRejectedMarkup("expected name token at '<![ q ]]></html>'")
    return BeautifulSoup(markup, features, *args, **kwargs)

"""Shared fixtures."""

from typing import Dict

import pytest

from metal_price_scraper.core import source_fetcher
from metal_price_scraper.core.config import PRICE_SCALES, PriceRange
from metal_price_scraper.core.models import FieldKind

from tests.fakes import RecordingSleep, strict_soup


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def wide_ranges() -> Dict[FieldKind, PriceRange]:
    """Gold 50000-250000 and silver 50-200."""
    return {
        kind: PriceRange(50, 200) if kind.is_silver else PriceRange(50000, 250000)
        for kind in FieldKind
    }


@pytest.fixture
def rejecting_parser(monkeypatch):
    """Make the markup parser reject REJECTED_MARKUP on every interpreter."""
    monkeypatch.setattr(source_fetcher, "BeautifulSoup", strict_soup)

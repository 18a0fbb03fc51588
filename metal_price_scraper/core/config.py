"""
Scraper Configuration
Immutable settings built once at startup and passed down explicitly
"""

import os
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

from .models import FieldKind

logger = logging.getLogger(__name__)


class ContentShape(str, Enum):
    """How a source publishes its prices"""
    MARKUP = "markup"      # prices rendered as visible HTML text
    EMBEDDED = "embedded"  # prices in a `name = [...];` script assignment


@dataclass(frozen=True)
class PriceRange:
    """Inclusive interval a parsed number must fall in to count as a price"""
    minimum: float
    maximum: float

    def __post_init__(self):
        if self.minimum > self.maximum:
            raise ValueError(f"Invalid price range: {self.minimum} > {self.maximum}")

    def contains(self, value: float) -> bool:
        return self.minimum <= value <= self.maximum


@dataclass(frozen=True)
class SourceCandidate:
    """One entry of the ordered source list"""
    url: str
    shape: ContentShape = ContentShape.MARKUP
    timeout: float = 30.0
    gold_marker: str = "goldPrices"
    silver_marker: str = "silverPrices"
    name: str = ""

    @property
    def label(self) -> str:
        return self.name or self.url

    @property
    def source_tag(self) -> str:
        """Identifier stamped on records produced from this candidate"""
        if self.shape == ContentShape.EMBEDDED:
            return f"{self.url}#embedded"
        return self.url


def _preset(gold: Tuple[float, float], silver: Tuple[float, float]) -> Dict[FieldKind, PriceRange]:
    ranges = {}
    for kind in FieldKind:
        low, high = silver if kind.is_silver else gold
        ranges[kind] = PriceRange(low, high)
    return ranges


# Local listings quote per gram or per vori (11.664 g)
PRICE_SCALES: Dict[str, Dict[FieldKind, PriceRange]] = {
    "gram": _preset(gold=(5000, 15000), silver=(50, 200)),
    "vori": _preset(gold=(50000, 250000), silver=(500, 5000)),
}

DEFAULT_SOURCES = (
    SourceCandidate(url="https://www.goldr.org", name="goldr"),
)


@dataclass(frozen=True)
class ScraperConfig:
    """
    Everything one scraper process needs

    Built once (defaults, `from_env()` or the CLI) and passed by reference to
    the fetcher, the retry driver and the scraper. Nothing here is mutated
    after construction.
    """
    sources: Tuple[SourceCandidate, ...] = DEFAULT_SOURCES
    price_ranges: Mapping[FieldKind, PriceRange] = field(
        default_factory=lambda: dict(PRICE_SCALES["gram"])
    )
    max_attempts: int = 3
    backoff_seconds: float = 10.0
    interval_seconds: float = 2 * 60 * 60
    csv_path: Path = Path("gold_silver_prices.csv")
    json_path: Path = Path("gold_silver_prices.json")
    currency: str = "BDT"
    embedded_value_keys: Tuple[str, ...] = ("price", "rate", "sell", "value", "amount", "gram")

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.backoff_seconds < 0:
            raise ValueError("backoff_seconds must be >= 0")
        if self.interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")
        missing = [kind.value for kind in FieldKind if kind not in self.price_ranges]
        if missing:
            raise ValueError(f"price_ranges missing: {', '.join(missing)}")
        object.__setattr__(self, "price_ranges", MappingProxyType(dict(self.price_ranges)))

    def range_for(self, kind: FieldKind) -> PriceRange:
        return self.price_ranges[kind]

    def with_overrides(self, **changes) -> "ScraperConfig":
        """Return a copy with some settings replaced (None values are ignored)"""
        changes = {key: value for key, value in changes.items() if value is not None}
        return replace(self, **changes)

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "ScraperConfig":
        """
        Build a config from METAL_SCRAPER_* environment variables

        METAL_SCRAPER_URLS is a comma-separated list of `url` or
        `url|markup` / `url|embedded` entries, tried in the given order.
        """
        env = os.environ if environ is None else environ
        timeout = float(env.get("METAL_SCRAPER_TIMEOUT", "30"))

        sources = DEFAULT_SOURCES
        raw_urls = env.get("METAL_SCRAPER_URLS", "")
        if raw_urls.strip():
            sources = tuple(
                parse_source(entry, timeout)
                for entry in raw_urls.split(",")
                if entry.strip()
            )
        elif "METAL_SCRAPER_TIMEOUT" in env:
            sources = tuple(replace(source, timeout=timeout) for source in DEFAULT_SOURCES)

        scale = env.get("METAL_SCRAPER_SCALE", "gram").strip().lower()
        if scale not in PRICE_SCALES:
            raise ValueError(
                f"Unknown METAL_SCRAPER_SCALE '{scale}'. Use one of: {', '.join(PRICE_SCALES)}"
            )

        config = cls(
            sources=sources,
            price_ranges=dict(PRICE_SCALES[scale]),
            max_attempts=int(env.get("METAL_SCRAPER_MAX_ATTEMPTS", "3")),
            backoff_seconds=float(env.get("METAL_SCRAPER_BACKOFF", "10")),
            interval_seconds=float(env.get("METAL_SCRAPER_INTERVAL", str(2 * 60 * 60))),
            csv_path=Path(env.get("METAL_SCRAPER_CSV", "gold_silver_prices.csv")),
            json_path=Path(env.get("METAL_SCRAPER_JSON", "gold_silver_prices.json")),
            currency=env.get("METAL_SCRAPER_CURRENCY", "BDT"),
        )
        logger.debug(f"Loaded config with {len(config.sources)} source(s), scale={scale}")
        return config


def parse_source(entry: str, timeout: float = 30.0) -> SourceCandidate:
    """Parse `url` or `url|shape` into a SourceCandidate"""
    url, _, shape = entry.strip().partition("|")
    shape = shape.strip().lower() or ContentShape.MARKUP.value
    try:
        content_shape = ContentShape(shape)
    except ValueError:
        raise ValueError(f"Unknown content shape '{shape}' for {url}") from None
    return SourceCandidate(url=url.strip(), shape=content_shape, timeout=timeout)

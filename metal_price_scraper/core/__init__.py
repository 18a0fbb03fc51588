"""Core scraping modules"""

from .scraper import MetalPriceScraper, CycleResult
from .config import ScraperConfig, SourceCandidate, ContentShape, PriceRange
from .models import FieldKind, PriceRecord
from .number_parser import parse_price
from .field_classifier import FieldClassifier
from .price_extractor import PriceExtractor
from .embedded_extractor import extract_from_embedded
from .source_fetcher import FetchOrchestrator
from .retry import RetryDriver
from .fallback import FallbackProvider

__all__ = [
    "MetalPriceScraper",
    "CycleResult",
    "ScraperConfig",
    "SourceCandidate",
    "ContentShape",
    "PriceRange",
    "FieldKind",
    "PriceRecord",
    "parse_price",
    "FieldClassifier",
    "PriceExtractor",
    "extract_from_embedded",
    "FetchOrchestrator",
    "RetryDriver",
    "FallbackProvider",
]

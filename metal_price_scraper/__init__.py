"""
Metal Price Scraper
Periodic gold & silver price extraction with retry and fallback
"""

__version__ = "1.0.0"

from .core.scraper import MetalPriceScraper
from .core.config import ScraperConfig

__all__ = ["MetalPriceScraper", "ScraperConfig"]

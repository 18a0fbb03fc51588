"""
Basic Usage Example
One scrape cycle against the default source, saved to CSV and JSON
"""

from metal_price_scraper import MetalPriceScraper, ScraperConfig
from metal_price_scraper.core import FieldKind


def main():
    # Settings from METAL_SCRAPER_* variables, defaults otherwise
    config = ScraperConfig.from_env()

    with MetalPriceScraper(config=config) as scraper:
        result = scraper.run_cycle()

    record = result.record
    print(f"\n✅ Cycle finished after {result.attempts} attempt(s)")
    print(f"📊 Source: {record.source}")
    if result.used_fallback:
        print("⚠️  No source could be read, these are fallback values")

    for kind in FieldKind:
        if record.is_set(kind):
            print(f"  {kind.value}: {record.get(kind):,.2f} {record.currency}")

    print(f"\nSaved to {config.csv_path} and {config.json_path}")


if __name__ == '__main__':
    main()

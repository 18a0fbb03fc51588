"""
Embedded Source Example
Reading prices a site keeps in a script array, with a markup site as backup
"""

from pathlib import Path

from metal_price_scraper import MetalPriceScraper, ScraperConfig
from metal_price_scraper.core import ContentShape, SourceCandidate, extract_from_embedded

SAMPLE_PAGE = """
<script>
  var goldPrices = [
    {"name": "22 Karat", "price": "7,850"},
    {"name": "21 Karat", "price": "7,520"},
    {"name": "18 Karat", "price": "6,430"},
    {"name": "Traditional", "price": "5,340"}
  ];
  var silverPrices = [{"name": "Silver", "price": 95.5}];
</script>
"""


def main():
    # Offline: decode a payload directly
    record = extract_from_embedded(SAMPLE_PAGE, source="sample")
    print(f"📊 {record.summary()}")

    # Live: try the script-array source first, then the markup page
    config = ScraperConfig(
        sources=(
            SourceCandidate(
                url='https://www.goldr.org',
                shape=ContentShape.EMBEDDED,
                gold_marker='goldPrices',
                silver_marker='silverPrices',
            ),
            SourceCandidate(url='https://www.goldr.org'),
        ),
        max_attempts=2,
        backoff_seconds=5,
        csv_path=Path('prices/gold_silver_prices.csv'),
        json_path=Path('prices/gold_silver_prices.json'),
    )

    with MetalPriceScraper(config=config) as scraper:
        result = scraper.run_cycle()

    print(f"\n✅ {result.record.summary()}")
    if result.errors:
        print(f"⚠️  Persistence errors: {result.errors}")


if __name__ == '__main__':
    main()

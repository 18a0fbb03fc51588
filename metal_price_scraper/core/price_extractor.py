"""
Price Extractor - Markup mode
Walks the text-bearing nodes of a parsed page and fills a PriceRecord
"""

import logging
from typing import Dict, Iterator, List, Optional

from bs4 import BeautifulSoup, Comment, Tag

from .config import PriceRange
from .field_classifier import FieldClassifier
from .models import PRIMARY_FIELD, FieldKind, PriceRecord
from .number_parser import parse_price

logger = logging.getLogger(__name__)


class PriceExtractor:
    """
    Extracts prices from visible page text, no rendering involved

    Every field is first-match-wins: once set during a pass it is never
    overwritten, so the traversal order decides which occurrence is kept
    when a price appears more than once on the page.
    """

    # Nodes that can carry human-readable text, visited in document order
    TEXT_TAGS = [
        'table', 'tr', 'td', 'th',
        'div', 'span', 'p', 'li', 'dt', 'dd',
        'h1', 'h2', 'h3', 'h4', 'h5', 'h6',
        'strong', 'b', 'label',
    ]

    # A node enclosing one of these is a container: its text merges several
    # price lines, so it is only read after the inner blocks
    BLOCK_TAGS = [
        'table', 'tr', 'div', 'p', 'li', 'dt', 'dd',
        'h1', 'h2', 'h3', 'h4', 'h5', 'h6',
    ]

    # Never part of the visible text
    HIDDEN_TAGS = {'script', 'style', 'noscript', 'template'}

    # Attributes carrying a literal price, read for the primary field only
    PRICE_ATTRIBUTES = ['data-price', 'data-rate', 'data-gold-price', 'data-value']

    def __init__(self, classifier: Optional[FieldClassifier] = None):
        self.classifier = classifier or FieldClassifier()

    def extract_from_document(
        self,
        soup: BeautifulSoup,
        record: PriceRecord,
        ranges: Dict[FieldKind, PriceRange]
    ) -> int:
        """
        Fill `record` from the text of `soup`

        Args:
            soup: Parsed page
            record: Record of the current pass, filled in place
            ranges: Plausibility range per field

        Returns:
            Number of fields set by this call
        """
        nodes = soup.find_all(self.TEXT_TAGS)
        inner = [node for node in nodes if not self._is_container(node)]
        containers = [node for node in nodes if self._is_container(node)]

        logger.debug(f"Scanning {len(inner)} text blocks, {len(containers)} containers")

        found = 0
        for node in inner:
            found += self.extract_from_text(self._visible_text(node), record, ranges)

        if record.missing_fields() and containers:
            for node in containers:
                text = self._visible_text(node)
                if self._names_one_tier(text):
                    found += self.extract_from_text(text, record, ranges)

        if not record.is_set(PRIMARY_FIELD):
            found += self._extract_from_attributes(soup, record, ranges[PRIMARY_FIELD])

        return found

    def extract_from_text(
        self,
        text: str,
        record: PriceRecord,
        ranges: Dict[FieldKind, PriceRange]
    ) -> int:
        """Classify one text fragment and record any new plausible prices"""
        text = (text or "").strip()
        if not text:
            return 0

        found = 0
        for kind in self.classifier.ordered(self.classifier.classify(text)):
            if record.is_set(kind):
                continue
            price_range = ranges[kind]
            value = parse_price(text, price_range.minimum, price_range.maximum)
            if value is not None and record.set_field(kind, value):
                logger.info(f" Found {kind.value}: {value:.2f}")
                found += 1
        return found

    def _extract_from_attributes(
        self,
        soup: BeautifulSoup,
        record: PriceRecord,
        price_range: PriceRange
    ) -> int:
        for elem in soup.find_all(self._has_price_attribute):
            for raw in self._attribute_values(elem):
                value = parse_price(raw, price_range.minimum, price_range.maximum)
                if value is not None and record.set_field(PRIMARY_FIELD, value):
                    logger.info(f" Found {PRIMARY_FIELD.value} in attribute: {value:.2f}")
                    return 1
        return 0

    def _has_price_attribute(self, tag: Tag) -> bool:
        if any(tag.has_attr(attr) for attr in self.PRICE_ATTRIBUTES):
            return True
        return tag.get('itemprop') == 'price' and tag.has_attr('content')

    def _attribute_values(self, elem: Tag) -> Iterator[str]:
        for attr in self.PRICE_ATTRIBUTES:
            value = elem.get(attr)
            if value:
                yield str(value)
        if elem.get('itemprop') == 'price' and elem.get('content'):
            yield str(elem['content'])

    def _names_one_tier(self, text: str) -> bool:
        """
        A container is read only when its merged lines name a single tier;
        with several, which number belongs to which tier is unknown
        """
        tiers = {kind for kind in self.classifier.classify(text) if kind != FieldKind.SILVER}
        return len(tiers) <= 1

    def _is_container(self, node: Tag) -> bool:
        return node.find(self.BLOCK_TAGS) is not None

    def _visible_text(self, node: Tag) -> str:
        parts: List[str] = []
        for string in node.find_all(string=True):
            if isinstance(string, Comment):
                continue
            if string.parent is not None and string.parent.name in self.HIDDEN_TAGS:
                continue
            stripped = string.strip()
            if stripped:
                parts.append(stripped)
        return " ".join(parts)

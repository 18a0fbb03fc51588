"""
Number Parser
Finds plausible prices among the numbers of an arbitrary text fragment
"""

import re
import logging
from typing import List, Optional

logger = logging.getLogger(__name__)

# Thousands-grouped numbers first so "78,500.50" is not split at the comma
NUMBER_PATTERN = re.compile(r"\d{1,3}(?:,\d{3})+(?:\.\d+)?|\d+(?:\.\d+)?")

# Bengali digits ০-৯ read the same as 0-9
_BENGALI_DIGITS = str.maketrans("০১২৩৪৫৬৭৮৯", "0123456789")


def normalize_digits(text: str) -> str:
    return text.translate(_BENGALI_DIGITS)


def find_number_candidates(text: str) -> List[float]:
    """
    Every number in `text`, left to right, with thousands separators removed

    Examples:
        "22K Gold: 78,500.50" → [22.0, 78500.5]
        "Silver rate: 95.5"   → [95.5]
    """
    candidates = []
    for match in NUMBER_PATTERN.finditer(normalize_digits(text)):
        try:
            candidates.append(float(match.group(0).replace(",", "")))
        except ValueError:
            continue
    return candidates


def parse_price(text: str, min_plausible: float, max_plausible: float) -> Optional[float]:
    """
    Return the first number in `text` inside [min_plausible, max_plausible]

    Dates, percentages and counts often sit next to the price in the same
    text node, so position alone does not identify the price; the range does.
    None means "no price here", not an error.
    """
    if not text:
        return None
    for value in find_number_candidates(text):
        if min_plausible <= value <= max_plausible:
            return value
    return None

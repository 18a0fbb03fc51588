"""
Field Classifier
Decides which price fields a text fragment talks about

Matching is substring containment on lower-cased text, in English, Bengali
script and transliterated Bengali. Rules are data, so new synonyms or whole
new rules can be added without touching the extractors.
"""

import re
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set, Tuple

from .models import FieldKind
from .number_parser import normalize_digits

logger = logging.getLogger(__name__)


# Synonym groups, keyed by group name. Bengali digits are normalised before
# matching, so "২২" is covered by "22".
DEFAULT_SYNONYMS: Dict[str, Tuple[str, ...]] = {
    "gold": ("gold", "সোনা", "স্বর্ণ", "sona", "swarna", "shorno"),
    "silver": ("silver", "রুপা", "রূপা", "rupa", "rupor"),
    "traditional": ("traditional", "সনাতন", "sanaton", "sonaton", "sanatan"),
    "22k": ("22", "22k"),
    "21k": ("21", "21k"),
    "18k": ("18", "18k"),
    "24k": ("24", "24k"),
}


@dataclass
class FieldRule:
    """
    A FieldKind matches when every `require` group has a term in the text
    and no `exclude` group does
    """
    kind: FieldKind
    require: Tuple[str, ...]
    exclude: Tuple[str, ...] = ()


DEFAULT_RULES: List[FieldRule] = [
    FieldRule(FieldKind.GOLD_22K, require=("22k", "gold")),
    FieldRule(FieldKind.GOLD_21K, require=("21k", "gold")),
    FieldRule(FieldKind.GOLD_18K, require=("18k", "gold")),
    FieldRule(FieldKind.GOLD_24K, require=("24k", "gold")),
    FieldRule(FieldKind.GOLD_TRADITIONAL, require=("traditional",), exclude=("silver",)),
    FieldRule(FieldKind.SILVER, require=("silver",)),
    FieldRule(FieldKind.SILVER_22K, require=("22k", "silver")),
    FieldRule(FieldKind.SILVER_21K, require=("21k", "silver")),
    FieldRule(FieldKind.SILVER_18K, require=("18k", "silver")),
    FieldRule(FieldKind.SILVER_TRADITIONAL, require=("traditional", "silver")),
]


class FieldClassifier:
    """Maps text fragments to the price fields they may carry"""

    def __init__(
        self,
        synonyms: Optional[Dict[str, Iterable[str]]] = None,
        rules: Optional[List[FieldRule]] = None
    ):
        source = DEFAULT_SYNONYMS if synonyms is None else synonyms
        self.synonyms: Dict[str, Set[str]] = {}
        for group, terms in source.items():
            self.add_synonyms(group, terms)
        self.rules: List[FieldRule] = list(DEFAULT_RULES if rules is None else rules)
        self._numeric_patterns: Dict[str, re.Pattern] = {}

    def add_synonyms(self, group: str, terms: Iterable[str]) -> None:
        """Extend (or create) a synonym group, e.g. add_synonyms('gold', ['or'])"""
        self.synonyms.setdefault(group, set()).update(
            normalize_digits(term.lower()) for term in terms
        )

    def register(self, rule: FieldRule) -> None:
        unknown = [g for g in rule.require + rule.exclude if g not in self.synonyms]
        if unknown:
            raise ValueError(f"Unknown synonym group(s): {', '.join(unknown)}")
        self.rules.append(rule)

    def _contains(self, lowered: str, term: str) -> bool:
        if not term[0].isdigit():
            return term in lowered
        # Tier tokens must stand apart from other digits: the "22" inside
        # "6,422" or "2022" is not a purity
        pattern = self._numeric_patterns.get(term)
        if pattern is None:
            pattern = re.compile(r"(?<![\d.,])" + re.escape(term) + r"(?![\d]|[.,]\d)")
            self._numeric_patterns[term] = pattern
        return pattern.search(lowered) is not None

    def _mentions(self, lowered: str, group: str) -> bool:
        return any(self._contains(lowered, term) for term in self.synonyms.get(group, ()))

    def classify(self, text: str) -> Set[FieldKind]:
        """
        Return every FieldKind the text may refer to (possibly none)

        A fragment often matches several kinds, e.g. a row mentioning both
        22K and 21K; the caller lets the number parser and the
        first-match-wins rule decide what is actually recorded.
        """
        if not text:
            return set()
        lowered = normalize_digits(text.lower())
        matches = set()
        for rule in self.rules:
            if not all(self._mentions(lowered, group) for group in rule.require):
                continue
            if any(self._mentions(lowered, group) for group in rule.exclude):
                continue
            matches.add(rule.kind)
        return matches

    def ordered(self, kinds: Set[FieldKind]) -> List[FieldKind]:
        """Sort classified kinds in rule order for deterministic processing"""
        order: Dict[FieldKind, int] = {}
        for index, rule in enumerate(self.rules):
            order.setdefault(rule.kind, index)
        return sorted(kinds, key=lambda kind: order.get(kind, len(order)))

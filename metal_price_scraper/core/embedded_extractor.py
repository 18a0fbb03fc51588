"""
Embedded Price Extractor - Script-array mode
Some sources keep their price table in a script block, e.g.

    var goldPrices = [{"name": "22 Karat", "price": "7,850"}, ...];

instead of rendering it as visible text. The arrays are located by their
assignment, cut out as balanced bracket blocks and mapped by position.
"""

import json
import re
import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from .exceptions import InsufficientEntries, MalformedArray, MissingMarker
from .field_classifier import FieldClassifier
from .models import FieldKind, PriceRecord, new_record
from .number_parser import parse_price

logger = logging.getLogger(__name__)

MIN_GOLD_ENTRIES = 4

# Source-defined order of the entries; the names are not consulted
GOLD_POSITIONS = [
    FieldKind.GOLD_22K,
    FieldKind.GOLD_21K,
    FieldKind.GOLD_18K,
    FieldKind.GOLD_TRADITIONAL,
]
SILVER_POSITIONS = [
    FieldKind.SILVER_22K,
    FieldKind.SILVER_21K,
    FieldKind.SILVER_18K,
    FieldKind.SILVER_TRADITIONAL,
]

DEFAULT_VALUE_KEYS = ("price", "rate", "sell", "value", "amount", "gram")
NAME_KEYS = ("name", "title", "label", "type", "karat", "category")


@dataclass
class EmbeddedArrays:
    """Decoded gold and silver entry arrays of one payload"""
    gold: List[Any]
    silver: List[Any]
    gold_marker: str
    silver_marker: str


def _assignment_pattern(marker: str) -> re.Pattern:
    return re.compile(
        r'(?:\b(?:var|let|const)\s+)?(?<![\w$])' + re.escape(marker) + r'\s*=\s*(?=\[)'
    )


def extract_balanced_block(text: str, start_index: int) -> Optional[str]:
    """
    Extract a balanced JSON block ({...} or [...]) starting at start_index

    Brackets inside string literals are ignored.
    """
    if start_index >= len(text):
        return None

    start_char = text[start_index]
    if start_char == '{':
        end_char = '}'
    elif start_char == '[':
        end_char = ']'
    else:
        return None

    stack = 1
    in_string = False
    escape = False

    for i in range(start_index + 1, len(text)):
        char = text[i]

        if escape:
            escape = False
            continue

        if char == '\\':
            escape = True
            continue

        if char == '"':
            in_string = not in_string
            continue

        if not in_string:
            if char == start_char:
                stack += 1
            elif char == end_char:
                stack -= 1
                if stack == 0:
                    return text[start_index:i + 1]

    return None


def _locate(raw: str, marker: str) -> str:
    match = _assignment_pattern(marker).search(raw)
    if not match:
        raise MissingMarker(marker)
    block = extract_balanced_block(raw, match.end())
    if block is None:
        raise MalformedArray(marker, "unterminated array")
    return block


def _decode(block: str, marker: str) -> List[Any]:
    try:
        data = json.loads(block)
    except json.JSONDecodeError as e:
        raise MalformedArray(marker, str(e)) from e
    if not isinstance(data, list):
        raise MalformedArray(marker, f"expected an array, got {type(data).__name__}")
    return data


def locate_embedded_arrays(raw: str, gold_marker: str, silver_marker: str) -> EmbeddedArrays:
    """
    Find and decode both `marker = [...];` assignments in a payload

    Raises:
        MissingMarker: either assignment is absent
        MalformedArray: an array is not valid JSON
    """
    raw = raw or ""
    gold_block = _locate(raw, gold_marker)
    silver_block = _locate(raw, silver_marker)
    return EmbeddedArrays(
        gold=_decode(gold_block, gold_marker),
        silver=_decode(silver_block, silver_marker),
        gold_marker=gold_marker,
        silver_marker=silver_marker,
    )


def entry_value(entry: Any, value_keys: Sequence[str] = DEFAULT_VALUE_KEYS) -> Optional[float]:
    """
    The price carried by one array entry

    Dict entries use the first of `value_keys` holding a positive number.
    List entries prefer raw numbers over numeric strings, and a leading
    string in a longer list is the entry's name, never its value.
    """
    if isinstance(entry, bool):
        return None
    if isinstance(entry, (int, float)):
        return float(entry) if entry > 0 else None
    if isinstance(entry, str):
        return parse_price(entry, 0.01, float("inf"))
    if isinstance(entry, list):
        strings = [item for item in entry if isinstance(item, str)]
        if len(entry) > 1 and isinstance(entry[0], str):
            strings = strings[1:]
        others = [item for item in entry if not isinstance(item, str)]
        for item in others + strings:
            value = entry_value(item, value_keys)
            if value is not None:
                return value
        return None
    if isinstance(entry, dict):
        lowered = {str(key).lower(): value for key, value in entry.items()}
        for key in value_keys:
            if key in lowered:
                value = entry_value(lowered[key], value_keys)
                if value is not None:
                    return value
    return None


def entry_name(entry: Any) -> str:
    if isinstance(entry, dict):
        lowered = {str(key).lower(): value for key, value in entry.items()}
        for key in NAME_KEYS:
            if isinstance(lowered.get(key), str):
                return lowered[key]
    if isinstance(entry, list) and entry and isinstance(entry[0], str):
        return entry[0]
    return ""


class EmbeddedPriceMapper:
    """Maps decoded entry arrays onto PriceRecord fields by position"""

    def __init__(
        self,
        classifier: Optional[FieldClassifier] = None,
        value_keys: Sequence[str] = DEFAULT_VALUE_KEYS
    ):
        self.classifier = classifier or FieldClassifier()
        self.value_keys = tuple(value_keys)

    def map(self, arrays: EmbeddedArrays, record: PriceRecord) -> int:
        """
        Fill `record` from decoded arrays

        Raises:
            InsufficientEntries: fewer than four gold entries
        """
        if len(arrays.gold) < MIN_GOLD_ENTRIES:
            raise InsufficientEntries(arrays.gold_marker, len(arrays.gold), MIN_GOLD_ENTRIES)

        found = self._map_positions(arrays.gold, GOLD_POSITIONS, record)

        if len(arrays.silver) >= len(SILVER_POSITIONS):
            found += self._map_positions(arrays.silver, SILVER_POSITIONS, record)
        elif arrays.silver:
            found += self._set(record, FieldKind.SILVER, arrays.silver[0])
        else:
            logger.info(f" '{arrays.silver_marker}' is empty, silver left unset")

        return found

    def _map_positions(self, entries: List[Any], kinds: List[FieldKind], record: PriceRecord) -> int:
        found = 0
        for kind, entry in zip(kinds, entries):
            self._check_name(kind, entry)
            found += self._set(record, kind, entry)
        return found

    def _set(self, record: PriceRecord, kind: FieldKind, entry: Any) -> int:
        value = entry_value(entry, self.value_keys)
        if value is not None and record.set_field(kind, value):
            logger.info(f" Found {kind.value}: {value:.2f}")
            return 1
        return 0

    def _check_name(self, kind: FieldKind, entry: Any) -> None:
        # Reordered upstream arrays would silently mismap; flag it
        name = entry_name(entry)
        if not name:
            return
        named_kinds = self.classifier.classify(name)
        if named_kinds and kind not in named_kinds:
            logger.warning(
                f" Entry '{name}' mapped to {kind.value} by position but reads as "
                f"{', '.join(sorted(k.value for k in named_kinds))}"
            )


def map_embedded_arrays(
    arrays: EmbeddedArrays,
    record: PriceRecord,
    value_keys: Sequence[str] = DEFAULT_VALUE_KEYS,
    classifier: Optional[FieldClassifier] = None
) -> int:
    return EmbeddedPriceMapper(classifier, value_keys).map(arrays, record)


def extract_from_embedded(
    raw: str,
    gold_marker: str = "goldPrices",
    silver_marker: str = "silverPrices",
    source: str = "embedded",
    currency: str = "BDT",
    value_keys: Sequence[str] = DEFAULT_VALUE_KEYS,
    classifier: Optional[FieldClassifier] = None
) -> PriceRecord:
    """
    Build a record from the price arrays embedded in `raw`

    Raises:
        MissingMarker, MalformedArray, InsufficientEntries
    """
    arrays = locate_embedded_arrays(raw, gold_marker, silver_marker)
    record = new_record(source, currency)
    map_embedded_arrays(arrays, record, value_keys, classifier)
    return record

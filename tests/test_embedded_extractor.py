"""Tests for script-embedded price arrays."""

import json
import logging

import pytest

from metal_price_scraper.core.embedded_extractor import (
    EmbeddedArrays,
    EmbeddedPriceMapper,
    entry_name,
    entry_value,
    extract_balanced_block,
    extract_from_embedded,
    locate_embedded_arrays,
)
from metal_price_scraper.core.exceptions import (
    ContentUnparseable,
    InsufficientEntries,
    MalformedArray,
    MissingMarker,
)
from metal_price_scraper.core.models import FieldKind, new_record

GOLD = [
    {"name": "22 Karat", "price": "7,850.50"},
    {"name": "21 Karat", "price": 7520.25},
    {"name": "18 Karat", "price": "6430.75"},
    {"name": "Traditional", "price": 5340},
]
SILVER = [
    {"name": "22 Karat", "price": 130},
    {"name": "21 Karat", "price": 124},
    {"name": "18 Karat", "price": 106},
    {"name": "Traditional", "price": 80},
]


def page(gold=GOLD, silver=SILVER) -> str:
    parts = ["<html><head><script>"]
    if gold is not None:
        parts.append(f"var goldPrices = {json.dumps(gold)};")
    if silver is not None:
        parts.append(f"const silverPrices = {json.dumps(silver)};")
    parts.append("</script></head><body></body></html>")
    return "\n".join(parts)


class TestBalancedBlock:

    def test_nested_block(self):
        text = 'x = [{"a": [1, 2]}, {"b": "]"}]; y = 1'
        assert extract_balanced_block(text, 4) == '[{"a": [1, 2]}, {"b": "]"}]'

    def test_unterminated(self):
        assert extract_balanced_block("[1, 2", 0) is None

    def test_not_a_block(self):
        assert extract_balanced_block("abc", 0) is None


class TestLocateEmbeddedArrays:

    def test_both_arrays(self):
        arrays = locate_embedded_arrays(page(), "goldPrices", "silverPrices")
        assert len(arrays.gold) == 4
        assert len(arrays.silver) == 4

    def test_missing_silver_marker(self):
        with pytest.raises(MissingMarker) as exc_info:
            locate_embedded_arrays(page(silver=None), "goldPrices", "silverPrices")
        assert exc_info.value.marker == "silverPrices"

    def test_missing_gold_marker(self):
        with pytest.raises(MissingMarker) as exc_info:
            locate_embedded_arrays(page(gold=None), "goldPrices", "silverPrices")
        assert exc_info.value.marker == "goldPrices"

    def test_malformed_array(self):
        raw = "var goldPrices = [{price: 1}]; var silverPrices = [];"
        with pytest.raises(MalformedArray):
            locate_embedded_arrays(raw, "goldPrices", "silverPrices")

    def test_unterminated_array(self):
        raw = 'var silverPrices = []; var goldPrices = [{"price": 1}'
        with pytest.raises(MalformedArray):
            locate_embedded_arrays(raw, "goldPrices", "silverPrices")

    def test_marker_must_be_whole_identifier(self):
        raw = 'var oldgoldPrices = [1, 2, 3, 4]; var silverPrices = [];'
        with pytest.raises(MissingMarker):
            locate_embedded_arrays(raw, "goldPrices", "silverPrices")

    def test_errors_are_content_errors(self):
        assert issubclass(MissingMarker, ContentUnparseable)
        assert issubclass(MalformedArray, ContentUnparseable)
        assert issubclass(InsufficientEntries, ContentUnparseable)


class TestEntryHelpers:

    def test_entry_value_shapes(self):
        assert entry_value({"Price": "7,850"}) == 7850.0
        assert entry_value({"rate": 0, "sell": 95.5}) == 95.5
        assert entry_value(["Traditional", 5340]) == 5340.0
        assert entry_value(7850) == 7850.0
        assert entry_value({"name": "22K"}) is None
        assert entry_value(True) is None
        assert entry_value(-3) is None

    def test_name_digits_are_not_the_value(self):
        assert entry_value(["22 Karat", 7850]) == 7850.0
        assert entry_value(["18K", "6,430"]) == 6430.0
        assert entry_value(["7,850"]) == 7850.0
        assert entry_value(["22 Karat", "n/a"]) is None

    def test_entry_value_custom_keys(self):
        assert entry_value({"bdt": 7850}, value_keys=("bdt",)) == 7850.0

    def test_entry_name(self):
        assert entry_name({"Title": "22 Karat"}) == "22 Karat"
        assert entry_name(["Traditional", 5340]) == "Traditional"
        assert entry_name(5340) == ""


class TestMapper:

    def test_positional_mapping(self):
        record = extract_from_embedded(page(), source="https://example.com#embedded")
        assert record.source == "https://example.com#embedded"
        assert record.get(FieldKind.GOLD_22K) == 7850.5
        assert record.get(FieldKind.GOLD_21K) == 7520.25
        assert record.get(FieldKind.GOLD_18K) == 6430.75
        assert record.get(FieldKind.GOLD_TRADITIONAL) == 5340.0
        assert record.get(FieldKind.SILVER_22K) == 130.0
        assert record.get(FieldKind.SILVER_TRADITIONAL) == 80.0
        assert not record.is_set(FieldKind.SILVER)
        assert not record.is_set(FieldKind.GOLD_24K)
        assert record.is_complete()

    def test_name_value_pairs(self):
        raw = (
            'var goldPrices = [["22 Karat", 7850], ["21 Karat", 7520], '
            '["18 Karat", 6430], ["Traditional", 5340]]; '
            'var silverPrices = [["Silver", 95.5]];'
        )
        record = extract_from_embedded(raw)
        assert record.get(FieldKind.GOLD_22K) == 7850.0
        assert record.get(FieldKind.GOLD_21K) == 7520.0
        assert record.get(FieldKind.GOLD_18K) == 6430.0
        assert record.get(FieldKind.GOLD_TRADITIONAL) == 5340.0
        assert record.get(FieldKind.SILVER) == 95.5

    def test_insufficient_gold_even_with_silver(self):
        with pytest.raises(InsufficientEntries) as exc_info:
            extract_from_embedded(page(gold=GOLD[:3]))
        assert exc_info.value.found == 3
        assert exc_info.value.required == 4

    def test_short_silver_array_sets_plain_silver(self):
        record = extract_from_embedded(page(silver=[{"name": "Silver", "price": 95.5}]))
        assert record.get(FieldKind.SILVER) == 95.5
        assert not record.is_set(FieldKind.SILVER_22K)

    def test_empty_silver_array(self):
        record = extract_from_embedded(page(silver=[]))
        assert record.is_complete()
        assert all(not record.is_set(kind) for kind in FieldKind if kind.is_silver)

    def test_extra_entries_are_ignored(self):
        gold = GOLD + [{"name": "24 Karat", "price": 8560}]
        record = extract_from_embedded(page(gold=gold))
        assert not record.is_set(FieldKind.GOLD_24K)

    def test_name_drift_is_logged(self, caplog):
        swapped = [
            {"name": "21K Gold", "price": 7520.25},
            {"name": "22K Gold", "price": 7850.5},
        ] + GOLD[2:]
        arrays = EmbeddedArrays(swapped, [], "goldPrices", "silverPrices")
        record = new_record("embedded")
        with caplog.at_level(logging.WARNING):
            EmbeddedPriceMapper().map(arrays, record)
        # Position still decides
        assert record.get(FieldKind.GOLD_22K) == 7520.25
        assert "mapped to gold_22k by position" in caplog.text

"""Tests for PriceRecord field semantics and serialization."""

from datetime import datetime, timezone

import pytest

from metal_price_scraper.core.exceptions import RecordFrozenError
from metal_price_scraper.core.models import (
    FALLBACK_SOURCE,
    PRIMARY_FIELD,
    FieldKind,
    PriceRecord,
    new_record,
)

CAPTURED = datetime(2024, 6, 18, 9, 30, 5, tzinfo=timezone.utc)


class TestSetField:

    def test_first_match_wins(self):
        record = new_record("https://example.com")
        assert record.set_field(FieldKind.GOLD_22K, 7850.0) is True
        assert record.set_field(FieldKind.GOLD_22K, 9999.0) is False
        assert record.get(FieldKind.GOLD_22K) == 7850.0

    def test_non_positive_values_are_rejected(self):
        record = new_record("https://example.com")
        assert record.set_field(FieldKind.SILVER, 0) is False
        assert record.set_field(FieldKind.SILVER, -1.5) is False
        assert record.set_field(FieldKind.SILVER, None) is False
        assert not record.is_set(FieldKind.SILVER)

    def test_frozen_record_rejects_writes(self):
        record = new_record("https://example.com").freeze()
        assert record.frozen
        with pytest.raises(RecordFrozenError):
            record.set_field(FieldKind.GOLD_22K, 7850.0)

    def test_completeness_tracks_primary_field(self):
        record = new_record("https://example.com")
        record.set_field(FieldKind.SILVER, 95.5)
        assert not record.is_complete()
        record.set_field(PRIMARY_FIELD, 7850.0)
        assert record.is_complete()

    def test_missing_fields(self):
        record = new_record("https://example.com")
        record.set_field(FieldKind.GOLD_22K, 7850.0)
        missing = record.missing_fields()
        assert FieldKind.GOLD_22K not in missing
        assert len(missing) == len(FieldKind) - 1


class TestSerialization:

    def _record(self):
        record = new_record("https://www.goldr.org", captured_at=CAPTURED)
        record.set_field(FieldKind.GOLD_22K, 7850.5)
        record.set_field(FieldKind.SILVER, 95.5)
        return record.freeze()

    def test_to_dict(self):
        data = self._record().to_dict()
        assert data["timestamp"] == "2024-06-18T09:30:05+00:00"
        assert data["date"] == "2024-06-18"
        assert data["time"] == "09:30:05"
        assert data["gold_22k"] == 7850.5
        assert data["gold_21k"] == 0.0
        assert data["silver"] == 95.5
        assert data["currency"] == "BDT"
        assert data["source"] == "https://www.goldr.org"

    def test_from_dict_restores_frozen_record(self):
        original = self._record()
        restored = PriceRecord.from_dict(original.to_dict())
        assert restored.frozen
        assert restored.captured_at == CAPTURED
        assert restored.fields == original.fields
        assert restored.source == original.source

    def test_csv_header_and_row_align(self):
        header = PriceRecord.csv_header()
        row = self._record().to_csv_row()
        assert header[:3] == ["Timestamp", "Date", "Time"]
        assert header[3] == "Gold_22K"
        assert header[-2:] == ["Currency", "Source"]
        assert len(header) == len(row)
        assert row[3] == "7850.50"
        assert row[4] == "0.00"

    def test_fallback_flag(self):
        assert new_record(FALLBACK_SOURCE).is_fallback
        assert not new_record("https://www.goldr.org").is_fallback

    def test_summary_lists_set_fields(self):
        summary = self._record().summary()
        assert "gold_22k=7850.50" in summary
        assert "silver=95.50" in summary
        assert "gold_21k" not in summary

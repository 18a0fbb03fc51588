"""
Price Record Models
The unit of output for one scrape cycle, plus the closed set of price fields
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from .exceptions import RecordFrozenError


class FieldKind(str, Enum):
    """Every price a record can carry"""
    GOLD_22K = "gold_22k"
    GOLD_21K = "gold_21k"
    GOLD_18K = "gold_18k"
    GOLD_24K = "gold_24k"
    GOLD_TRADITIONAL = "gold_traditional"
    SILVER = "silver"
    SILVER_22K = "silver_22k"
    SILVER_21K = "silver_21k"
    SILVER_18K = "silver_18k"
    SILVER_TRADITIONAL = "silver_traditional"

    @property
    def is_silver(self) -> bool:
        return self.value.startswith("silver")


# A record is accepted only once this field is set
PRIMARY_FIELD = FieldKind.GOLD_22K

GOLD_FIELDS = [kind for kind in FieldKind if not kind.is_silver]
SILVER_FIELDS = [kind for kind in FieldKind if kind.is_silver]

FALLBACK_SOURCE = "FALLBACK"

# Zero doubles as "not observed yet"; a real price is never zero
UNSET = 0.0


@dataclass
class PriceRecord:
    """
    Prices observed during one scrape cycle

    Fields are filled first-match-wins during a single extraction pass and
    the record is frozen before it is handed to persistence. A field holding
    0.0 is unset, so a genuine zero price cannot be represented.
    """
    source: str
    currency: str = "BDT"
    captured_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    fields: Dict[FieldKind, float] = field(default_factory=dict)
    _frozen: bool = field(default=False, repr=False, compare=False)

    # ── display strings ──────────────────────────────────────────────────

    @property
    def timestamp(self) -> str:
        return self.captured_at.isoformat(timespec="seconds")

    @property
    def date(self) -> str:
        return self.captured_at.strftime("%Y-%m-%d")

    @property
    def time(self) -> str:
        return self.captured_at.strftime("%H:%M:%S")

    # ── field access ─────────────────────────────────────────────────────

    def get(self, kind: FieldKind) -> float:
        return self.fields.get(kind, UNSET)

    def is_set(self, kind: FieldKind) -> bool:
        return self.get(kind) != UNSET

    def set_field(self, kind: FieldKind, value: float) -> bool:
        """
        Record a price unless the field already holds one

        Returns:
            True if the value was stored, False if the field was already set
            or the value is not a usable price
        """
        if self._frozen:
            raise RecordFrozenError(f"Record from {self.source} is frozen")
        if value is None or value <= 0 or self.is_set(kind):
            return False
        self.fields[kind] = float(value)
        return True

    def is_complete(self) -> bool:
        return self.is_set(PRIMARY_FIELD)

    def missing_fields(self) -> List[FieldKind]:
        return [kind for kind in FieldKind if not self.is_set(kind)]

    @property
    def is_fallback(self) -> bool:
        return self.source == FALLBACK_SOURCE

    def freeze(self) -> "PriceRecord":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    # ── serialization ────────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "timestamp": self.timestamp,
            "date": self.date,
            "time": self.time,
        }
        for kind in FieldKind:
            data[kind.value] = self.get(kind)
        data["currency"] = self.currency
        data["source"] = self.source
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PriceRecord":
        captured_at = datetime.fromisoformat(data["timestamp"])
        record = cls(
            source=data.get("source", ""),
            currency=data.get("currency", "BDT"),
            captured_at=captured_at,
        )
        for kind in FieldKind:
            value = data.get(kind.value)
            if value:
                record.fields[kind] = float(value)
        return record.freeze()

    @staticmethod
    def csv_header() -> List[str]:
        return (
            ["Timestamp", "Date", "Time"]
            + [kind.name.title() for kind in FieldKind]
            + ["Currency", "Source"]
        )

    def to_csv_row(self) -> List[str]:
        return (
            [self.timestamp, self.date, self.time]
            + [f"{self.get(kind):.2f}" for kind in FieldKind]
            + [self.currency, self.source]
        )

    def summary(self) -> str:
        parts = [
            f"{kind.value}={self.get(kind):.2f}"
            for kind in FieldKind
            if self.is_set(kind)
        ]
        return f"[{self.source}] " + (" | ".join(parts) if parts else "no prices")


def new_record(source: str, currency: str = "BDT", captured_at: Optional[datetime] = None) -> PriceRecord:
    """Start an empty record for one extraction pass"""
    if captured_at is None:
        return PriceRecord(source=source, currency=currency)
    return PriceRecord(source=source, currency=currency, captured_at=captured_at)

"""
Price Storage
Append-only CSV log and whole-array JSON history of price records
"""

import csv
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

from .exceptions import PersistenceError
from .models import PriceRecord

logger = logging.getLogger(__name__)


class CSVPriceLog:
    """One row per record; the header is written when the file is created"""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def append(self, record: PriceRecord) -> None:
        write_header = not self.path.exists()
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'a', newline='', encoding='utf-8') as f:
                writer = csv.writer(f)
                if write_header:
                    writer.writerow(PriceRecord.csv_header())
                writer.writerow(record.to_csv_row())
        except OSError as e:
            raise PersistenceError(self.path, str(e)) from e
        logger.debug(f"Appended CSV row to {self.path}")

    def read_rows(self) -> List[Dict[str, str]]:
        if not self.path.exists():
            return []
        with open(self.path, newline='', encoding='utf-8') as f:
            return list(csv.DictReader(f))


class JSONPriceHistory:
    """
    Every record ever written, as one pretty-printed JSON array

    Appending reads the whole array, adds the record and rewrites the file,
    so the cost grows with the history size.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read_entries(self) -> List[Dict[str, Any]]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
            logger.warning(f" Could not read {self.path}, starting a new history: {e}")
            return []
        if not isinstance(data, list):
            logger.warning(f" {self.path} does not hold a JSON array, starting a new history")
            return []
        return data

    def load(self) -> List[PriceRecord]:
        """Records in append order"""
        records = []
        for entry in self._read_entries():
            try:
                records.append(PriceRecord.from_dict(entry))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f" Skipping unreadable history entry: {e}")
        return records

    def append(self, record: PriceRecord) -> int:
        """
        Add one record to the history file

        Returns:
            Number of records in the file after the write
        """
        entries = self._read_entries()
        entries.append(record.to_dict())

        # Write to a temp file then rename, so a crash never leaves half an array
        temp_path = self.path.with_suffix(self.path.suffix + '.tmp')
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, 'w', encoding='utf-8') as f:
                json.dump(entries, f, indent=2, ensure_ascii=False)
            temp_path.replace(self.path)
        except OSError as e:
            if temp_path.exists():
                temp_path.unlink()
            raise PersistenceError(self.path, str(e)) from e

        logger.debug(f"History {self.path} now holds {len(entries)} records")
        return len(entries)

"""Shared plumbing for the JSON-file repositories.

Each collection lives in its own file as a JSON list of records.  Every
read-modify-write cycle runs under the store's lock, so writes from
threads in one process never interleave.  Nothing here coordinates
between processes.
"""

from __future__ import annotations

import json
import threading
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any


class JsonStore:

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self.lock = threading.RLock()
        self._ensure_file()

    def load(self) -> list[dict]:
        with self.lock:
            return json.loads(self._file_path.read_text(encoding="utf-8"))

    def persist(self, records: list[dict]) -> None:
        with self.lock:
            self._file_path.write_text(
                json.dumps(records, indent=2) + "\n", encoding="utf-8"
            )

    def next_id(self, records: list[dict] | None = None) -> str:
        rows = self.load() if records is None else records
        if not rows:
            return "1"
        return str(max(int(r["id"]) for r in rows) + 1)

    def upsert(self, record: dict) -> None:
        """Replace the record with the same id, or append it."""
        with self.lock:
            rows = self.load()
            for i, raw in enumerate(rows):
                if raw["id"] == record["id"]:
                    rows[i] = record
                    break
            else:
                rows.append(record)
            self.persist(rows)

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")


# --- Field codecs -------------------------------------------------------------


def dec(value: Decimal | None) -> str | None:
    return None if value is None else str(value)


def to_dec(raw: Any) -> Decimal | None:
    return None if raw is None else Decimal(str(raw))


def iso(value: date | datetime | None) -> str | None:
    return None if value is None else value.isoformat()


def to_datetime(raw: str | None) -> datetime | None:
    return None if raw is None else datetime.fromisoformat(raw)


def to_date(raw: str | None) -> date | None:
    return None if raw is None else date.fromisoformat(raw)

"""
Append-only history of searches and generated content.

Interface:
    save(record) -> id
    list(limit)  -> records, newest first

Two implementations:
- InMemoryHistoryStore: process-local, for tests and ephemeral deployments
- JsonFileHistoryStore: one pretty-printed JSON file per record

Layout on disk:
data/
├── searches/
│   ├── search_20260101T120000123456Z_1a2b3c4d.json
│   └── ...
└── formatted_content/
    └── formatted_20260101T120500000000Z_5e6f7a8b.json
"""

import copy
import json
import logging
import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Union

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 20


def _timestamp() -> datetime:
    return datetime.now(timezone.utc)


class HistoryStore(ABC):
    """Append-only record store. Records are never updated or deleted."""

    @abstractmethod
    def save(self, record: dict) -> str:
        """Append record and return its id."""
        pass

    @abstractmethod
    def list(self, limit: int = DEFAULT_LIST_LIMIT) -> List[dict]:
        """Return up to limit records, newest first, each with id and timestamp."""
        pass


class InMemoryHistoryStore(HistoryStore):

    def __init__(self, prefix: str = "record"):
        self.prefix = prefix
        self._records: List[dict] = []
        self._lock = threading.Lock()

    def save(self, record: dict) -> str:
        saved_at = _timestamp()
        record_id = f"{self.prefix}_{saved_at.strftime('%Y%m%dT%H%M%S%fZ')}_{uuid.uuid4().hex[:8]}"
        entry = copy.deepcopy(record)
        entry["id"] = record_id
        entry["timestamp"] = saved_at.isoformat()

        with self._lock:
            self._records.append(entry)
        return record_id

    def list(self, limit: int = DEFAULT_LIST_LIMIT) -> List[dict]:
        if limit <= 0:
            return []
        with self._lock:
            newest = self._records[::-1][:limit]
        return copy.deepcopy(newest)


class JsonFileHistoryStore(HistoryStore):
    """
    File-backed store. File names start with a sortable UTC timestamp,
    so reverse name order is newest first.
    """

    def __init__(self, directory: Union[str, Path], prefix: str = "search"):
        self.directory = Path(directory)
        self.prefix = prefix

    def save(self, record: dict) -> str:
        self.directory.mkdir(parents=True, exist_ok=True)

        saved_at = _timestamp()
        record_id = f"{self.prefix}_{saved_at.strftime('%Y%m%dT%H%M%S%fZ')}_{uuid.uuid4().hex[:8]}"
        entry = dict(record)
        entry["timestamp"] = saved_at.isoformat()

        path = self.directory / f"{record_id}.json"
        # Exclusive create: an existing record is never overwritten
        with open(path, "x", encoding="utf-8") as f:
            json.dump(entry, f, indent=2, ensure_ascii=False, default=str)

        logger.debug(f"Saved history record {record_id} to {path}")
        return record_id

    def list(self, limit: int = DEFAULT_LIST_LIMIT) -> List[dict]:
        if limit <= 0 or not self.directory.exists():
            return []

        paths = sorted(self.directory.glob(f"{self.prefix}_*.json"), reverse=True)[:limit]

        records = []
        for path in paths:
            with open(path, "r", encoding="utf-8") as f:
                entry = json.load(f)
            entry["id"] = path.stem
            records.append(entry)
        return records

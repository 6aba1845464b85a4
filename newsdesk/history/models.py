from dataclasses import dataclass
from datetime import datetime
from typing import Any

from newsdesk.database.models import HistoryRecord
from newsdesk.queue.models import JobCategory


@dataclass
class HistoryEntry:
    """Durable record of one completed job's result."""

    id: str
    timestamp: str
    file_name: str
    category: JobCategory
    payload: dict[str, Any]

    def to_cache(self) -> dict[str, Any]:
        """Shape stored in the local cache."""
        return {
            "id": self.id,
            "date": self.timestamp,
            "fileName": self.file_name,
            "mode": self.category.mode,
            "data": self.payload,
        }

    @classmethod
    def from_cache(cls, item: Any) -> "HistoryEntry | None":
        """Parse one cached item. Returns None for malformed items."""
        if not isinstance(item, dict):
            return None
        entry_id = item.get("id")
        file_name = item.get("fileName")
        data = item.get("data")
        if not isinstance(entry_id, str) or not isinstance(file_name, str):
            return None
        if not isinstance(data, dict):
            return None
        return cls(
            id=entry_id,
            timestamp=str(item.get("date") or ""),
            file_name=file_name,
            category=JobCategory.from_mode(str(item.get("mode") or "")),
            payload=data,
        )

    @classmethod
    def from_record(cls, record: HistoryRecord) -> "HistoryEntry":
        created_at = record.created_at or datetime.now().astimezone()
        return cls(
            id=record.id,
            timestamp=created_at.isoformat(),
            file_name=record.file_name,
            category=JobCategory.from_job_type(record.job_type),
            payload=record.result,
        )

"""Most-recent-first history of completed jobs.

The remote audio_jobs table is the source of truth for a signed-in user;
the local cache is a backup that every completion is written through to.
Remote writes are best-effort and never block the local write.

Methods block on the database and the cache file, so callers on an event
loop run them through asyncio.to_thread. A lock serialises the in-memory
list and cache updates between worker threads.
"""

import threading
import uuid
from datetime import datetime
from typing import Any

from newsdesk.auth.session import AuthGate
from newsdesk.database.repositories.history_repository import HistoryRepository
from newsdesk.history.local_cache import ListMutation, LocalCache
from newsdesk.history.models import HistoryEntry
from newsdesk.inference.models import FactCheck, InferenceResult
from newsdesk.logging.logger import Log
from newsdesk.queue.models import JobCategory


class History:
    """Shared history fed by every job queue."""

    def __init__(
        self,
        *,
        cache: LocalCache,
        repo: HistoryRepository,
        auth: AuthGate,
        cache_key: str,
        limit: int = 50,
    ) -> None:
        self._cache = cache
        self._repo = repo
        self._auth = auth
        self._cache_key = cache_key
        self._limit = limit
        self._entries: list[HistoryEntry] = []
        self._lock = threading.Lock()

    @property
    def entries(self) -> list[HistoryEntry]:
        return list(self._entries)

    def find(self, entry_id: str) -> HistoryEntry | None:
        return next((e for e in self._entries if e.id == entry_id), None)

    def load(self) -> list[HistoryEntry]:
        """Load from the cloud for a signed-in user, otherwise from the cache."""
        session = self._auth.session
        if session is not None:
            try:
                records = self._repo.query_recent(session.user_id, self._limit)
            except Exception as exc:
                Log.warning(f"Cloud history unavailable, using local cache: {exc}")
            else:
                entries = [HistoryEntry.from_record(r) for r in records]
                with self._lock:
                    self._entries = entries
                Log.info(f"Loaded {len(entries)} history entries from the cloud")
                return self.entries

        with self._lock:
            cached = (
                HistoryEntry.from_cache(item) for item in self._cache.read_list(self._cache_key)
            )
            self._entries = [e for e in cached if e is not None][: self._limit]
        Log.info(f"Loaded {len(self._entries)} history entries from the local cache")
        return self.entries

    def record(
        self,
        result: InferenceResult,
        file_name: str,
        category: JobCategory,
        mime_type: str | None = None,
    ) -> HistoryEntry:
        """Store a completed job's result and return its history entry."""
        payload = result.to_payload()
        entry = HistoryEntry(
            id=str(uuid.uuid4()),
            timestamp=datetime.now().astimezone().isoformat(),
            file_name=file_name,
            category=category,
            payload=payload,
        )

        session = self._auth.session
        if session is not None:
            try:
                record = self._repo.insert(
                    user_id=session.user_id,
                    file_name=file_name,
                    job_type=category.job_type,
                    result=payload,
                    mime_type=mime_type,
                )
            except Exception as exc:
                Log.warning(f"Could not save {file_name} to cloud history: {exc}")
            else:
                entry.id = record.id

        with self._lock:
            self._entries = [entry, *self._entries][: self._limit]
            self._mutate_cache(lambda items: [entry.to_cache(), *items])
        Log.info(f"Saved {category.value} result for {file_name} to history ({entry.id})")
        return entry

    def delete(self, entry_id: str) -> None:
        """Remove an entry locally, then from the cloud when signed in."""
        with self._lock:
            self._entries = [e for e in self._entries if e.id != entry_id]
            self._mutate_cache(
                lambda items: [
                    i for i in items if not (isinstance(i, dict) and i.get("id") == entry_id)
                ]
            )

        if self._auth.session is None:
            return
        try:
            self._repo.delete_by_id(entry_id)
        except Exception as exc:
            Log.warning(f"Could not delete history entry {entry_id} from the cloud: {exc}")

    def append_fact_check(
        self,
        fact_check: FactCheck,
        *,
        entry_id: str | None = None,
        file_name: str | None = None,
        category: JobCategory | None = None,
    ) -> HistoryEntry | None:
        """Append a manual fact check to an entry's manualFactChecks.

        Matches by entry_id. Without an id, falls back to the first entry
        with the same (file_name, category), which is ambiguous when two
        entries share both.
        """
        check = fact_check.to_payload()
        cached_items: list[Any] = []

        def mutate(items: list[Any]) -> list[Any]:
            cached = self._match_cached(items, entry_id, file_name, category)
            if cached is not None:
                _append_check(cached["data"], check)
                cached_items.append(cached)
            return items

        with self._lock:
            entry = self._match(self._entries, entry_id, file_name, category)
            if entry is not None:
                _append_check(entry.payload, check)
            self._mutate_cache(mutate)
            if entry is None and cached_items:
                entry = HistoryEntry.from_cache(cached_items[0])
            payload = dict(entry.payload) if entry is not None else None

        if entry is None or payload is None:
            Log.warning("No history entry matched the manual fact check")
            return None

        if self._auth.session is not None:
            try:
                self._repo.update_result(entry.id, payload)
            except Exception as exc:
                Log.warning(f"Could not update history entry {entry.id} in the cloud: {exc}")
        return entry

    def _mutate_cache(self, mutate: ListMutation) -> None:
        """The only place that writes the history cache key."""
        self._cache.update_list(self._cache_key, lambda items: mutate(items)[: self._limit])

    @staticmethod
    def _match(
        entries: list[HistoryEntry],
        entry_id: str | None,
        file_name: str | None,
        category: JobCategory | None,
    ) -> HistoryEntry | None:
        if entry_id is not None:
            return next((e for e in entries if e.id == entry_id), None)
        return next(
            (e for e in entries if e.file_name == file_name and e.category is category),
            None,
        )

    @staticmethod
    def _match_cached(
        items: list[Any],
        entry_id: str | None,
        file_name: str | None,
        category: JobCategory | None,
    ) -> dict[str, Any] | None:
        for item in items:
            if not isinstance(item, dict) or not isinstance(item.get("data"), dict):
                continue
            if entry_id is not None:
                if item.get("id") == entry_id:
                    return item
            elif (
                category is not None
                and item.get("fileName") == file_name
                and item.get("mode") == category.mode
            ):
                return item
        return None


def _append_check(payload: dict[str, Any], check: dict[str, Any]) -> None:
    checks = payload.get("manualFactChecks")
    if not isinstance(checks, list):
        checks = []
    payload["manualFactChecks"] = [*checks, check]

import json
import os
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

from newsdesk.logging.logger import Log

ListMutation = Callable[[list[Any]], list[Any]]


class LocalCache:
    """On-device key/value store: one UTF-8 file per key under a directory."""

    def __init__(self, root: Path) -> None:
        self._root = root

    def read(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def write(self, key: str, value: str) -> None:
        """Replace the value under key atomically."""
        self._root.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._root, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(tmp_name, self._path(key))
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def read_list(self, key: str) -> list[Any]:
        """Parse the value under key as a JSON array.

        Missing, unparsable or non-array data reads as an empty list.
        """
        raw = self.read(key)
        if raw is None:
            return []
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as exc:
            Log.warning(f"Discarding unreadable cache value for '{key}': {exc}")
            return []
        if not isinstance(parsed, list):
            Log.warning(f"Discarding non-array cache value for '{key}'")
            return []
        return parsed

    def update_list(self, key: str, mutate: ListMutation) -> list[Any]:
        """Read-modify-write the JSON array under key and return the new list."""
        updated = mutate(self.read_list(key))
        self.write(key, json.dumps(updated, ensure_ascii=False))
        return updated

    def _path(self, key: str) -> Path:
        if not key or "/" in key or key.startswith("."):
            raise ValueError(f"Invalid cache key: {key!r}")
        return self._root / f"{key}.json"

"""
File-backed storage adapter.

Layout under the data directory:

    settings.json        {key: value}
    tasks.json           [task, ...]
    templates.json       [template, ...]
    staff.json           [staff, ...]
    logs/<category>.jsonl  one record per line, append-only

JSON files are rewritten atomically (temp file + replace). Corrupted log
lines are skipped with a warning.
"""

import json
import logging
import threading
from pathlib import Path

from shiftboard.lib.constants import LOG_CATEGORIES
from shiftboard.storage.base import ConnectivityError, StorageError, StorageResult, failed, ok
from shiftboard.storage.memory import MemoryStorage

logger = logging.getLogger(__name__)

_KEYED_FILES = {
    "tasks": "tasks.json",
    "templates": "templates.json",
    "staff": "staff.json",
}


def _load_json(path: Path, default):
    if not path.exists():
        return default
    try:
        raw = path.read_text(encoding="utf-8").strip()
        if not raw:
            return default
        return json.loads(raw)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"[STORAGE] Failed to read {path}: {e}")
        return default


def _save_json(path: Path, data) -> None:
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
    tmp.replace(path)


class JsonFileStorage(MemoryStorage):
    """MemoryStorage persisted to a directory of JSON files."""

    def __init__(self, data_dir: Path):
        super().__init__()
        self.data_dir = Path(data_dir)
        self._write_lock = threading.Lock()
        try:
            (self.data_dir / "logs").mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConnectivityError(f"Data directory unavailable: {self.data_dir}: {e}") from e
        self._load()

    def _load(self) -> None:
        self.settings = _load_json(self.data_dir / "settings.json", default={})
        for collection, filename in _KEYED_FILES.items():
            records = _load_json(self.data_dir / filename, default=[])
            setattr(self, collection, {r["id"]: r for r in records if isinstance(r, dict) and r.get("id")})
        for category in LOG_CATEGORIES:
            self.logs[category] = self._load_log_file(category)

    def _log_path(self, category: str) -> Path:
        return self.data_dir / "logs" / f"{category}.jsonl"

    def _load_log_file(self, category: str) -> list[dict]:
        path = self._log_path(category)
        if not path.exists():
            return []

        records = []
        for line_num, line in enumerate(path.read_text(encoding="utf-8").splitlines(), 1):
            if not line.strip():
                continue
            try:
                records.append(json.loads(line))
            except json.JSONDecodeError as e:
                logger.warning(f"[STORAGE] Skipping corrupted log line {line_num} in {path}: {e}")
        return records

    def _commit(self, collection: str) -> None:
        """Rewrite the file behind `collection`. Serialized; writers may run in parallel."""
        with self._write_lock:
            try:
                if collection == "settings":
                    _save_json(self.data_dir / "settings.json", self.settings)
                elif collection in _KEYED_FILES:
                    records = list(getattr(self, collection).values())
                    _save_json(self.data_dir / _KEYED_FILES[collection], records)
            except OSError as e:
                raise StorageError(f"Failed to write {collection}: {e}") from e

    def append_log(self, category: str, record: dict) -> StorageResult:
        self._check()
        if category not in self.logs:
            return failed(f"Unknown log category: {category}")
        try:
            with open(self._log_path(category), "a", encoding="utf-8") as f:
                f.write(json.dumps(record, ensure_ascii=False) + "\n")
                f.flush()
        except OSError as e:
            return failed(f"Failed to append {category} log: {e}")
        self.logs[category].append(dict(record))
        return ok(record.get("id"))

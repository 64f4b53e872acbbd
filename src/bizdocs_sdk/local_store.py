from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from platformdirs import user_data_dir

logger = logging.getLogger(__name__)

LOCAL_ID_PREFIX = "local-"
_COUNTERS_KEY = "_counters"


def is_local_id(record_id: str | None) -> bool:
    return bool(record_id) and str(record_id).startswith(LOCAL_ID_PREFIX)


@dataclass
class LocalDocumentStore:
    """Key-value store of document snapshots, one JSON array per document type."""

    base_dir: Path | None = None
    app_name: str = "bizdocs"

    def _dir(self) -> Path:
        base = self.base_dir or Path(user_data_dir(self.app_name, "BizDocs"))
        base.mkdir(parents=True, exist_ok=True)
        return base

    def _path(self, key: str) -> Path:
        return self._dir() / f"{key}.json"

    def _read(self, key: str) -> list[dict[str, Any]]:
        path = self._path(key)
        if not path.exists():
            return []
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("local_store_corrupt", extra={"key": key, "path": str(path)})
            return []
        if not isinstance(data, list):
            logger.warning("local_store_unexpected_shape", extra={"key": key})
            return []
        return [row for row in data if isinstance(row, dict)]

    def _write(self, key: str, rows: list[dict[str, Any]]) -> None:
        path = self._path(key)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(json.dumps(rows, indent=2, default=str), encoding="utf-8")
        tmp.replace(path)

    def list(self, key: str) -> list[dict[str, Any]]:
        return self._read(key)

    def get(self, key: str, record_id: str) -> dict[str, Any] | None:
        for row in self._read(key):
            if str(row.get("id")) == str(record_id):
                return row
        return None

    def upsert(self, key: str, snapshot: dict[str, Any], record_id: str | None = None) -> dict[str, Any]:
        rows = self._read(key)
        now = datetime.now(timezone.utc).isoformat()
        resolved_id = str(record_id or snapshot.get("id") or f"{LOCAL_ID_PREFIX}{uuid.uuid4().hex}")
        stored = {**snapshot, "id": resolved_id}
        for idx, row in enumerate(rows):
            if str(row.get("id")) == resolved_id:
                stored = {**row, **stored, "updatedAt": now}
                rows[idx] = stored
                break
        else:
            stored.setdefault("createdAt", now)
            rows.append(stored)
        self._write(key, rows)
        return stored

    def delete(self, key: str, record_id: str) -> bool:
        rows = self._read(key)
        remaining = [row for row in rows if str(row.get("id")) != str(record_id)]
        if len(remaining) == len(rows):
            return False
        self._write(key, remaining)
        return True

    def clear(self, key: str) -> None:
        path = self._path(key)
        if path.exists():
            path.unlink()

    def next_sequence(self, name: str) -> int:
        counters = {str(row.get("name")): int(row.get("value", 0)) for row in self._read(_COUNTERS_KEY)}
        value = counters.get(name, 0) + 1
        counters[name] = value
        self._write(_COUNTERS_KEY, [{"name": key, "value": count} for key, count in sorted(counters.items())])
        return value

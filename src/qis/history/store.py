"""Append-only run history, persisted as one JSON array.

Every append rewrites the whole file. The rewrite goes through a temporary
file and ``os.replace`` under a lock, so readers never see a half-written
ledger and concurrent appends from one process cannot lose records.
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from qis.core.errors import HistoryError
from qis.history.models import HistoryRecord

if TYPE_CHECKING:
    from qis.modules.base import Module

log = structlog.get_logger()

HISTORY_FILENAME = "history.json"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class HistoryStore:
    """Ordered ledger of module run outcomes."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def read(self, module: str | None = None) -> list[HistoryRecord]:
        """All records in insertion order, optionally only one module's."""
        records = self._load()
        if module is None:
            return records
        return [record for record in records if record.module == module]

    def append(self, module_name: str, module: Module) -> HistoryRecord:
        """Record the current status, summary and metrics of a module."""
        record = HistoryRecord(
            module=module_name,
            date=datetime.now().strftime(DATE_FORMAT),
            status=bool(module.get_status()),
            summary=module.get_summary(short=True),
            metric=json.dumps(module.get_metrics(only_primary=True)),
            metrics=json.dumps(module.get_metrics()),
        )
        with self._lock:
            records = self._load()
            records.append(record)
            self._write(records)

        log.info("history_appended", module=module_name, status=record.status, count=len(records))
        return record

    def _load(self) -> list[HistoryRecord]:
        if not self._path.exists():
            return []
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise HistoryError.corrupt(str(self._path), str(e)) from e
        if not isinstance(data, list):
            raise HistoryError.corrupt(str(self._path), "expected a JSON array")
        return [HistoryRecord.from_dict(item) for item in data if isinstance(item, dict)]

    def _write(self, records: list[HistoryRecord]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump([record.to_dict() for record in records], f)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

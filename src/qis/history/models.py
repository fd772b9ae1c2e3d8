"""History ledger records."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class HistoryRecord:
    """One persisted outcome of a module run.

    ``metric`` and ``metrics`` hold the module's primary metric and full
    metric map as JSON strings; their shape is up to the module.
    """

    module: str
    date: str
    status: bool
    summary: str
    metric: str
    metrics: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HistoryRecord:
        return cls(
            module=str(data.get("module", "")),
            date=str(data.get("date", "")),
            status=bool(data.get("status", False)),
            summary=str(data.get("summary", "")),
            metric=str(data.get("metric", "null")),
            metrics=str(data.get("metrics", "null")),
        )

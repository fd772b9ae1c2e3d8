"""Run history ledger."""

from qis.history.models import HistoryRecord
from qis.history.store import DATE_FORMAT, HISTORY_FILENAME, HistoryStore

__all__ = ["DATE_FORMAT", "HISTORY_FILENAME", "HistoryRecord", "HistoryStore"]

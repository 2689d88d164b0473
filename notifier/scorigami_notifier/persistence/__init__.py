"""Persistence helpers for the historical record, ledger and retry queue."""

from .history import HistoricalLedgerReader, HistoryReadError
from .ledger import (
    FINAL_DETAILS,
    IdempotencyLedger,
    LedgerWriteError,
    forecast_details,
)
from .post_queue import PostQueue

__all__ = [
    "HistoricalLedgerReader",
    "HistoryReadError",
    "IdempotencyLedger",
    "LedgerWriteError",
    "FINAL_DETAILS",
    "forecast_details",
    "PostQueue",
]

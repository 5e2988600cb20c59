from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from typing import Any, Iterable

ACCOUNT_SLOT = "account"
TRANSACTION_SLOT = "transaction"


@dataclass(slots=True)
class DualStreamRecord:
    signature: str
    account_timestamp: float | None = None
    account_endpoint: str | None = None
    transaction_timestamp: float | None = None
    transaction_endpoint: str | None = None

    def has_both(self) -> bool:
        return self.account_timestamp is not None and self.transaction_timestamp is not None

    def delta_ms(self) -> float | None:
        """Transaction minus account arrival in ms; positive means the account write led."""
        if self.account_timestamp is None or self.transaction_timestamp is None:
            return None
        return (self.transaction_timestamp - self.account_timestamp) * 1000.0


class LocalDualStreamTracker:
    """Single-writer view of one dual-stream endpoint: first local sighting wins."""

    def __init__(self) -> None:
        self._records: dict[str, DualStreamRecord] = {}

    def _entry(self, signature: str) -> DualStreamRecord:
        record = self._records.get(signature)
        if record is None:
            record = DualStreamRecord(signature=signature)
            self._records[signature] = record
        return record

    def observe_account(self, signature: str, endpoint: str, timestamp: float) -> tuple[DualStreamRecord, bool]:
        """Returns the record and whether this call completed both slots."""
        record = self._entry(signature)
        if record.account_timestamp is not None:
            return record, False
        record.account_timestamp = timestamp
        record.account_endpoint = endpoint
        return record, record.transaction_timestamp is not None

    def observe_transaction(self, signature: str, endpoint: str, timestamp: float) -> tuple[DualStreamRecord, bool]:
        record = self._entry(signature)
        if record.transaction_timestamp is not None:
            return record, False
        record.transaction_timestamp = timestamp
        record.transaction_endpoint = endpoint
        return record, record.account_timestamp is not None

    def __len__(self) -> int:
        return len(self._records)

    def records(self) -> list[DualStreamRecord]:
        return [replace(record) for record in self._records.values()]


class GlobalDualStreamTracker:
    """Cross-endpoint merge: per slot, the strictly earliest observation wins."""

    def __init__(self) -> None:
        self._records: dict[str, DualStreamRecord] = {}
        self._lock = threading.Lock()

    def observe(self, slot: str, signature: str, endpoint: str, timestamp: float) -> None:
        if slot not in (ACCOUNT_SLOT, TRANSACTION_SLOT):
            raise ValueError(f"unknown dual stream slot: {slot}")
        with self._lock:
            record = self._records.get(signature)
            if record is None:
                record = DualStreamRecord(signature=signature)
                self._records[signature] = record
            if slot == ACCOUNT_SLOT:
                if record.account_timestamp is None or timestamp < record.account_timestamp:
                    record.account_timestamp = timestamp
                    record.account_endpoint = endpoint
            elif record.transaction_timestamp is None or timestamp < record.transaction_timestamp:
                record.transaction_timestamp = timestamp
                record.transaction_endpoint = endpoint

    def observe_account(self, signature: str, endpoint: str, timestamp: float) -> None:
        self.observe(ACCOUNT_SLOT, signature, endpoint, timestamp)

    def observe_transaction(self, signature: str, endpoint: str, timestamp: float) -> None:
        self.observe(TRANSACTION_SLOT, signature, endpoint, timestamp)

    def get(self, signature: str) -> DualStreamRecord | None:
        with self._lock:
            record = self._records.get(signature)
            return None if record is None else replace(record)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def records(self) -> list[DualStreamRecord]:
        with self._lock:
            return [replace(record) for record in self._records.values()]


def summarize_local(records: Iterable[DualStreamRecord], endpoint: str) -> dict[str, Any]:
    """Per-endpoint lead/lag between its own account and transaction streams."""
    records = list(records)
    diffs: list[float] = []
    account_first = 0
    transaction_first = 0
    for record in records:
        account_ts = record.account_timestamp
        transaction_ts = record.transaction_timestamp
        if account_ts is None or transaction_ts is None:
            continue
        diffs.append(abs(transaction_ts - account_ts) * 1000.0)
        if account_ts < transaction_ts:
            account_first += 1
        else:
            transaction_first += 1
    summary: dict[str, Any] = {
        "endpoint": endpoint,
        "signatures": len(records),
        "both_received": len(diffs),
    }
    if not diffs:
        summary["status"] = "no_data"
        return summary
    diffs.sort()
    both = len(diffs)
    summary.update(
        {
            "status": "ok",
            "account_first": account_first,
            "account_first_pct": account_first / both * 100.0,
            "transaction_first": transaction_first,
            "transaction_first_pct": transaction_first / both * 100.0,
            "avg_abs_diff_ms": sum(diffs) / both,
            "median_abs_diff_ms": diffs[both // 2],
            "min_abs_diff_ms": diffs[0],
            "max_abs_diff_ms": diffs[-1],
        }
    )
    return summary

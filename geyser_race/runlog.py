from __future__ import annotations

import sys
from collections import deque
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import IO, Any, Iterator

import orjson

from .bootstrap import _append_ndjson, monotonic_ns, wall_clock_seconds
from .writers_ndjson import RunlogWriter

OBSERVATION_LOG_SUFFIX = ".ndjson"


def _normalize_orjson(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()
    if is_dataclass(value) and not isinstance(value, type):
        return _normalize_orjson(asdict(value))
    if isinstance(value, dict):
        return {str(key): _normalize_orjson(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset, deque)):
        return [_normalize_orjson(item) for item in value]
    return str(value)


class RunLog:
    """Structured NDJSON diagnostics for one run.

    Records go through the background writer when one is attached, otherwise
    they are appended synchronously. A failing writer disables the runlog and
    is reported once on stderr; it never interrupts a runner.
    """

    def __init__(
        self,
        path: Path,
        run_id: str,
        *,
        writer: RunlogWriter | None = None,
        enqueue_timeout_seconds: float = 1.0,
    ) -> None:
        self.path = path
        self.run_id = run_id
        self._writer = writer
        self._enqueue_timeout_seconds = enqueue_timeout_seconds
        self.failed = False

    def write(self, record_type: str, **fields: Any) -> None:
        if self.failed:
            return
        record: dict[str, Any] = {
            "record_type": record_type,
            "run_id": self.run_id,
            "ts_wall": wall_clock_seconds(),
            "ts_mono_ns": monotonic_ns(),
        }
        record.update(fields)
        normalized = _normalize_orjson(record)
        if self._writer is None:
            try:
                _append_ndjson(self.path, normalized)
            except OSError as exc:
                self._mark_failed(f"{type(exc).__name__}: {exc}")
            return
        error = self._writer.error()
        if error is not None:
            self._mark_failed(f"{type(error).__name__}: {error}")
            return
        if not self._writer.enqueue(normalized, timeout_seconds=self._enqueue_timeout_seconds):
            self._mark_failed("enqueue_timeout")

    def close(self) -> None:
        if self._writer is not None:
            self._writer.close()

    def _mark_failed(self, detail: str) -> None:
        if self.failed:
            return
        self.failed = True
        print(f"runlog failure: {detail}", file=sys.stderr)


def observation_log_path(log_dir: Path, name: str) -> Path:
    return Path(log_dir) / f"{name}{OBSERVATION_LOG_SUFFIX}"


def open_log_file(log_dir: Path, name: str) -> IO[bytes]:
    path = observation_log_path(log_dir, name)
    path.parent.mkdir(parents=True, exist_ok=True)
    return path.open("ab")


def write_log_entry(handle: IO[bytes], timestamp: float, label: str, signature: str) -> None:
    # Flushed per entry; OSError propagates to the runner.
    line = orjson.dumps(
        {"ts": timestamp, "label": label, "signature": signature},
        option=orjson.OPT_APPEND_NEWLINE,
    )
    handle.write(line)
    handle.flush()


def iter_log_entries(path: Path) -> Iterator[dict[str, Any]]:
    with Path(path).open("rb") as handle:
        for line in handle:
            line = line.strip()
            if not line:
                continue
            try:
                entry = orjson.loads(line)
            except orjson.JSONDecodeError:
                continue
            if isinstance(entry, dict) and "signature" in entry and "ts" in entry:
                yield entry

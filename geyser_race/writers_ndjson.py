from __future__ import annotations

import contextlib
import os
import queue
import threading
import time
from pathlib import Path
from typing import IO, Any

import orjson

_STOP = object()
_NDJSON_OPTIONS = orjson.OPT_APPEND_NEWLINE
if hasattr(orjson, "OPT_ESCAPE_NON_ASCII"):
    _NDJSON_OPTIONS |= orjson.OPT_ESCAPE_NON_ASCII


class RunlogWriter:
    """Appends runlog records to one NDJSON file from a background thread.

    Runners only pay for a queue put. Lines are flushed in batches, or when
    the flush interval elapses, and on close. The first I/O error is latched
    and every later ``enqueue`` is refused.
    """

    def __init__(
        self,
        path: Path,
        *,
        max_queue: int = 10000,
        flush_interval_seconds: float = 0.25,
        batch_size: int = 100,
        fsync_on_close: bool = False,
    ) -> None:
        self.path = Path(path)
        self._queue: queue.Queue[object] = queue.Queue(maxsize=max_queue)
        self._flush_interval_seconds = flush_interval_seconds
        self._batch_size = batch_size
        self._fsync_on_close = fsync_on_close
        self._handle: IO[bytes] | None = None
        self._error: Exception | None = None
        self._thread = threading.Thread(target=self._run, name="runlog-writer", daemon=True)
        self._thread.start()

    def enqueue(self, record: dict[str, Any], *, timeout_seconds: float) -> bool:
        if self._error is not None:
            return False
        try:
            self._queue.put(record, timeout=max(0.0, timeout_seconds))
        except queue.Full:
            return False
        return True

    def close(self, timeout_seconds: float = 5.0) -> None:
        with contextlib.suppress(queue.Full):
            self._queue.put(_STOP, timeout=timeout_seconds)
        self._thread.join(timeout=timeout_seconds)

    def error(self) -> Exception | None:
        return self._error

    def _run(self) -> None:
        lines: list[bytes] = []
        deadline = time.monotonic() + self._flush_interval_seconds
        try:
            while True:
                timeout = max(0.0, deadline - time.monotonic())
                try:
                    item = self._queue.get(timeout=timeout)
                except queue.Empty:
                    item = None
                if item is _STOP:
                    break
                if item is not None:
                    lines.append(orjson.dumps(item, option=_NDJSON_OPTIONS))
                if len(lines) >= self._batch_size or time.monotonic() >= deadline:
                    self._write(lines)
                    deadline = time.monotonic() + self._flush_interval_seconds
        except Exception as exc:
            if self._error is None:
                self._error = exc
        finally:
            self._finish(lines)

    def _write(self, lines: list[bytes]) -> None:
        if not lines:
            return
        if self._handle is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._handle = self.path.open("ab")
        self._handle.write(b"".join(lines))
        self._handle.flush()
        lines.clear()

    def _finish(self, lines: list[bytes]) -> None:
        try:
            if self._error is None:
                self._write(lines)
        except OSError as exc:
            self._error = exc
        if self._handle is None:
            return
        with contextlib.suppress(OSError):
            if self._fsync_on_close:
                os.fsync(self._handle.fileno())
            self._handle.close()

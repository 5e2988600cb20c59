from __future__ import annotations

import json
import os
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path

from .config import Config, Endpoint

MANIFEST_VERSION = 1


def wall_clock_seconds() -> float:
    # Every runner stamps arrivals with this clock; races compare these values directly.
    return time.time_ns() / 1_000_000_000


def monotonic_ns() -> int:
    return time.perf_counter_ns()


class RunBootstrap:
    def __init__(self, run_id: str, run_dir: Path, start_time: float, t0_mono_ns: int):
        self.run_id = run_id
        self.run_dir = run_dir
        self.start_time = start_time
        self.t0_mono_ns = t0_mono_ns

    @property
    def log_dir(self) -> Path:
        return self.run_dir / "logs"

    @property
    def runlog_path(self) -> Path:
        return self.run_dir / "runlog.ndjson"


def _default_run_id() -> str:
    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    suffix = uuid.uuid4().hex[:8]
    return f"{stamp}-{suffix}"


def _write_json(path: Path, payload: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    data = json.dumps(payload, ensure_ascii=True, separators=(",", ":"))
    path.write_text(data + "\n", encoding="utf-8")


def _append_ndjson(path: Path, record: dict, *, fsync_on_close: bool = False) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    line = json.dumps(record, ensure_ascii=True, separators=(",", ":"))
    with path.open("ab") as handle:
        handle.write(line.encode("utf-8") + b"\n")
        if fsync_on_close:
            handle.flush()
            os.fsync(handle.fileno())


def bootstrap_run(
    config: Config,
    endpoints: list[Endpoint],
    run_id: str | None = None,
) -> RunBootstrap:
    run_id = run_id or _default_run_id()
    run_dir = Path(config.data_dir) / "runs" / run_id
    run_dir.mkdir(parents=True, exist_ok=False)
    (run_dir / "logs").mkdir()

    start_time = wall_clock_seconds()
    t0_mono_ns = monotonic_ns()
    manifest = {
        "manifest_version": MANIFEST_VERSION,
        "run_id": run_id,
        "start_time": start_time,
        "t0_mono_ns": t0_mono_ns,
        "account": config.account,
        "transactions": config.transactions,
        "commitment": config.commitment,
        "race_required_endpoints": config.race_required_endpoints,
        # Tokens stay out of the manifest.
        "endpoints": [
            {"name": ep.name, "url": ep.url, "kind": ep.kind} for ep in endpoints
        ],
    }
    _write_json(run_dir / "manifest.json", manifest)

    run_start = {
        "record_type": "run_start",
        "run_id": run_id,
        "start_time": start_time,
        "ts_mono_ns": t0_mono_ns,
    }
    _append_ndjson(
        run_dir / "runlog.ndjson",
        run_start,
        fsync_on_close=config.runlog_fsync_on_close,
    )
    return RunBootstrap(run_id, run_dir, start_time, t0_mono_ns)

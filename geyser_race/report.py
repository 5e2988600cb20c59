from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Sequence

from .comparator import Observation, RaceRecord, RaceTracker
from .dual_stream import DualStreamRecord, GlobalDualStreamTracker
from .runlog import iter_log_entries, observation_log_path

NO_DATA = "no_data"


def _median(ordered: Sequence[float]) -> float:
    # Upper median for even counts.
    return ordered[len(ordered) // 2]


def _pct(count: int, total: int) -> float:
    return count / total * 100.0


def build_race_report(
    records: Iterable[RaceRecord],
    endpoint_names: Sequence[str],
    *,
    start_time: float | None = None,
) -> dict[str, Any]:
    races = [record for record in records if record.arrivals]
    total = len(races)
    if total == 0:
        return {"status": NO_DATA, "races": 0}

    rows: dict[str, dict[str, Any]] = {
        name: {"wins": 0, "reported": 0, "lags": []} for name in endpoint_names
    }
    expected = set(endpoint_names)
    seen_by_all = 0
    last_first_ts: float | None = None
    for record in races:
        first = record.first()
        if first is None:
            continue
        winner, first_ts = first
        if expected and expected <= record.arrivals.keys():
            seen_by_all += 1
        for name, ts in record.arrivals.items():
            row = rows.setdefault(name, {"wins": 0, "reported": 0, "lags": []})
            row["reported"] += 1
            row["lags"].append((ts - first_ts) * 1000.0)
        rows[winner]["wins"] += 1
        if last_first_ts is None or first_ts > last_first_ts:
            last_first_ts = first_ts

    endpoints: list[dict[str, Any]] = []
    for name, row in rows.items():
        lags = sorted(row["lags"])
        entry: dict[str, Any] = {
            "endpoint": name,
            "wins": row["wins"],
            "win_pct": _pct(row["wins"], total),
            "reported": row["reported"],
            "reported_pct": _pct(row["reported"], total),
        }
        if lags:
            entry["avg_lag_ms"] = sum(lags) / len(lags)
            entry["median_lag_ms"] = _median(lags)
            entry["max_lag_ms"] = lags[-1]
        endpoints.append(entry)
    endpoints.sort(key=lambda item: (-item["wins"], item["endpoint"]))
    for rank, entry in enumerate(endpoints, start=1):
        entry["rank"] = rank

    report: dict[str, Any] = {
        "status": "ok",
        "races": total,
        "races_seen_by_all": seen_by_all,
        "endpoints": endpoints,
    }
    if start_time is not None and last_first_ts is not None:
        report["elapsed_s"] = max(0.0, last_first_ts - start_time)
    return report


def build_dual_stream_report(records: Iterable[DualStreamRecord]) -> dict[str, Any]:
    records = list(records)
    total = len(records)
    if total == 0:
        return {"status": NO_DATA, "signatures": 0}

    account_wins: dict[str, int] = {}
    transaction_wins: dict[str, int] = {}
    diffs: list[float] = []
    account_faster = 0
    transaction_faster = 0
    for record in records:
        if record.account_endpoint is not None:
            account_wins[record.account_endpoint] = account_wins.get(record.account_endpoint, 0) + 1
        if record.transaction_endpoint is not None:
            transaction_wins[record.transaction_endpoint] = (
                transaction_wins.get(record.transaction_endpoint, 0) + 1
            )
        delta = record.delta_ms()
        if delta is None:
            continue
        diffs.append(delta)
        if delta > 0:
            account_faster += 1
        else:
            transaction_faster += 1

    def _wins(table: dict[str, int]) -> list[dict[str, Any]]:
        ordered = sorted(table.items(), key=lambda kv: (-kv[1], kv[0]))
        return [
            {"endpoint": name, "wins": count, "pct": _pct(count, total)}
            for name, count in ordered
        ]

    report: dict[str, Any] = {
        "status": "ok",
        "signatures": total,
        "account_first_by_endpoint": _wins(account_wins),
        "transaction_first_by_endpoint": _wins(transaction_wins),
        "both_received": len(diffs),
    }
    if not diffs:
        report["timing"] = {"status": NO_DATA}
        return report
    diffs.sort()
    both = len(diffs)
    # Positive deltas mean the transaction arrived after the account write.
    report["timing"] = {
        "status": "ok",
        "account_faster": account_faster,
        "account_faster_pct": _pct(account_faster, both),
        "transaction_faster": transaction_faster,
        "transaction_faster_pct": _pct(transaction_faster, both),
        "avg_diff_ms": sum(diffs) / both,
        "median_diff_ms": _median(diffs),
        "min_diff_ms": diffs[0],
        "max_diff_ms": diffs[-1],
    }
    return report


def build_run_report(
    *,
    run_id: str,
    race_records: Iterable[RaceRecord],
    dual_records: Iterable[DualStreamRecord],
    endpoint_names: Sequence[str],
    start_time: float | None,
    valid_count: int,
    target: int | None,
    include_dual_stream: bool,
) -> dict[str, Any]:
    report: dict[str, Any] = {
        "record_type": "race_report",
        "run_id": run_id,
        "target": target,
        "valid_count": valid_count,
        "race": build_race_report(race_records, endpoint_names, start_time=start_time),
    }
    if include_dual_stream:
        report["dual_stream"] = build_dual_stream_report(dual_records)
    return report


def format_report(report: dict[str, Any], *, stable: bool = False) -> str:
    return json.dumps(report, ensure_ascii=True, separators=(",", ":"), sort_keys=stable)


def write_report(run_dir: Path, report: dict[str, Any]) -> Path:
    path = Path(run_dir) / "report.json"
    path.write_text(json.dumps(report, ensure_ascii=True, indent=2) + "\n", encoding="utf-8")
    return path


def load_manifest(run_dir: Path) -> dict[str, Any]:
    path = Path(run_dir) / "manifest.json"
    if not path.exists():
        raise FileNotFoundError(f"missing manifest: {path}")
    return json.loads(path.read_text(encoding="utf-8"))


def report_from_logs(run_dir: Path) -> dict[str, Any]:
    """Rebuild the report of a finished run from its per-endpoint observation logs."""
    run_dir = Path(run_dir)
    manifest = load_manifest(run_dir)
    start_time = manifest.get("start_time")
    endpoints = manifest.get("endpoints") or []
    log_dir = run_dir / "logs"

    tracker = RaceTracker(required_endpoints=int(manifest.get("race_required_endpoints") or 1))
    dual = GlobalDualStreamTracker()
    names: list[str] = []
    has_dual = False
    for endpoint in endpoints:
        name = str(endpoint.get("name"))
        names.append(name)
        dual_stream = endpoint.get("kind") == "dual_stream"
        log_name = f"{name}_dual_stream" if dual_stream else name
        path = observation_log_path(log_dir, log_name)
        if not path.exists():
            continue
        has_dual = has_dual or dual_stream
        for entry in iter_log_entries(path):
            label = str(entry.get("label", ""))
            signature = str(entry["signature"])
            ts = float(entry["ts"])
            if dual_stream and label.endswith("_ACCT"):
                dual.observe_account(signature, name, ts)
                continue
            if dual_stream:
                dual.observe_transaction(signature, name, ts)
            tracker.add(
                name,
                Observation(
                    endpoint=name,
                    signature=signature,
                    timestamp=ts,
                    start_time=start_time or 0.0,
                ),
            )

    return build_run_report(
        run_id=str(manifest.get("run_id", run_dir.name)),
        race_records=tracker.records(),
        dual_records=dual.records(),
        endpoint_names=names,
        start_time=start_time,
        valid_count=tracker.get_valid_count(),
        target=manifest.get("transactions"),
        include_dual_stream=has_dual,
    )

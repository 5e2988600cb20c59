import pytest

from geyser_race.dual_stream import (
    DualStreamRecord,
    GlobalDualStreamTracker,
    LocalDualStreamTracker,
    summarize_local,
)


def test_account_first_delta() -> None:
    local = LocalDualStreamTracker()
    _record, completed = local.observe_account("S1", "A", 5.000)
    assert completed is False
    record, completed = local.observe_transaction("S1", "A", 5.020)
    assert completed is True
    assert record.delta_ms() == pytest.approx(20.0)

    summary = summarize_local(local.records(), "A")
    assert summary["status"] == "ok"
    assert summary["account_first"] == 1
    assert summary["transaction_first"] == 0
    assert summary["avg_abs_diff_ms"] == pytest.approx(20.0)


def test_local_keeps_first_sighting() -> None:
    local = LocalDualStreamTracker()
    local.observe_transaction("S1", "A", 2.0)
    record, completed = local.observe_transaction("S1", "A", 1.0)
    assert completed is False
    assert record.transaction_timestamp == 2.0


def test_global_minimum_wins_per_slot() -> None:
    tracker = GlobalDualStreamTracker()
    tracker.observe_account("S1", "A", 5.010)
    tracker.observe_account("S1", "B", 5.002)
    tracker.observe_account("S1", "C", 5.002)
    tracker.observe_transaction("S1", "C", 5.030)
    tracker.observe_transaction("S1", "A", 5.040)

    record = tracker.get("S1")
    assert record is not None
    assert record.account_endpoint == "B"
    assert record.account_timestamp == 5.002
    assert record.transaction_endpoint == "C"
    assert record.transaction_timestamp == 5.030
    assert len(tracker) == 1


def test_global_rejects_unknown_slot() -> None:
    tracker = GlobalDualStreamTracker()
    with pytest.raises(ValueError):
        tracker.observe("block", "S1", "A", 1.0)


def test_summary_without_pairs_is_no_data() -> None:
    records = [DualStreamRecord(signature="S1", account_timestamp=1.0, account_endpoint="A")]
    summary = summarize_local(records, "A")
    assert summary["status"] == "no_data"
    assert summary["signatures"] == 1
    assert summary["both_received"] == 0


def test_summary_counts_transaction_first() -> None:
    local = LocalDualStreamTracker()
    local.observe_transaction("S1", "A", 1.000)
    local.observe_account("S1", "A", 1.004)
    local.observe_account("S2", "A", 2.000)
    local.observe_transaction("S2", "A", 2.010)
    summary = summarize_local(local.records(), "A")
    assert summary["account_first"] == 1
    assert summary["transaction_first"] == 1
    assert summary["min_abs_diff_ms"] == pytest.approx(4.0)
    assert summary["max_abs_diff_ms"] == pytest.approx(10.0)


def test_summary_skips_half_received_records() -> None:
    records = [
        DualStreamRecord(signature="S1", transaction_timestamp=1.0, transaction_endpoint="A"),
        DualStreamRecord(signature="S2", account_timestamp=2.0, account_endpoint="A"),
        DualStreamRecord(
            signature="S3",
            account_timestamp=3.000,
            account_endpoint="A",
            transaction_timestamp=3.006,
            transaction_endpoint="A",
        ),
    ]
    summary = summarize_local(records, "A")
    assert summary["signatures"] == 3
    assert summary["both_received"] == 1
    assert summary["account_first"] == 1
    assert summary["avg_abs_diff_ms"] == pytest.approx(6.0)

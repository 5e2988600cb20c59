import asyncio
import threading

import pytest

from geyser_race.comparator import Observation, RaceTracker


def _obs(endpoint: str, signature: str, ts: float) -> Observation:
    return Observation(endpoint=endpoint, signature=signature, timestamp=ts, start_time=0.0)


def test_target_reached_on_third_distinct_signature() -> None:
    tracker = RaceTracker(3)
    results = []
    counts = []
    for idx, sig in enumerate(["S1", "S2", "S3"]):
        results.append(tracker.add("A", _obs("A", sig, 1.0 + idx)))
        counts.append(tracker.get_valid_count())
    assert counts == [1, 2, 3]
    assert results == [False, False, True]


def test_same_signature_from_two_endpoints_counts_once() -> None:
    tracker = RaceTracker(10)
    tracker.add("A", _obs("A", "S1", 10.000))
    tracker.add("B", _obs("B", "S1", 10.005))
    assert tracker.get_valid_count() == 1
    assert len(tracker) == 1
    record = tracker.get("S1")
    assert record is not None
    assert record.arrivals == {"A": 10.000, "B": 10.005}
    assert record.first() == ("A", 10.000)


def test_repeat_from_same_endpoint_is_ignored() -> None:
    tracker = RaceTracker(10)
    assert tracker.add("A", _obs("A", "S1", 1.0)) is False
    assert tracker.add("A", _obs("A", "S1", 0.5)) is False
    record = tracker.get("S1")
    assert record is not None
    assert record.arrivals == {"A": 1.0}
    assert tracker.get_valid_count() == 1


def test_required_endpoints_delays_validity() -> None:
    tracker = RaceTracker(1, required_endpoints=2)
    assert tracker.add("A", _obs("A", "S1", 1.0)) is False
    assert tracker.get_valid_count() == 0
    assert tracker.add("B", _obs("B", "S1", 1.1)) is True
    assert tracker.get_valid_count() == 1
    # A third endpoint does not count the record again.
    assert tracker.add("C", _obs("C", "S1", 1.2)) is False
    assert tracker.get_valid_count() == 1


def test_no_target_never_completes() -> None:
    tracker = RaceTracker()
    assert tracker.add("A", _obs("A", "S1", 1.0)) is False
    assert tracker.get_valid_count() == 1


def test_records_are_copies() -> None:
    tracker = RaceTracker()
    tracker.add("A", _obs("A", "S1", 1.0))
    snapshot = tracker.records()
    snapshot[0].arrivals["B"] = 2.0
    record = tracker.get("S1")
    assert record is not None
    assert "B" not in record.arrivals


def test_invalid_required_endpoints() -> None:
    with pytest.raises(ValueError):
        RaceTracker(1, required_endpoints=0)


def test_exactly_once_crossing_across_threads() -> None:
    target = 50
    tracker = RaceTracker(target)
    hits = []
    hits_lock = threading.Lock()
    barrier = threading.Barrier(4)

    def worker(name: str) -> None:
        barrier.wait()
        for idx in range(200):
            if tracker.add(name, _obs(name, f"S{idx}", float(idx))):
                with hits_lock:
                    hits.append(name)

    threads = [threading.Thread(target=worker, args=(f"ep{i}",)) for i in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(hits) == 1
    assert tracker.get_valid_count() == 200
    assert len(tracker) == 200


def test_valid_count_is_monotonic() -> None:
    tracker = RaceTracker()
    seen = []
    for idx in range(20):
        tracker.add("A" if idx % 2 else "B", _obs("A", f"S{idx % 7}", float(idx)))
        seen.append(tracker.get_valid_count())
    assert seen == sorted(seen)
    assert seen[-1] == 7


@pytest.mark.asyncio
async def test_exactly_once_crossing_across_tasks() -> None:
    tracker = RaceTracker(30)
    hits = []

    async def runner(name: str) -> None:
        for idx in range(60):
            if tracker.add(name, _obs(name, f"S{idx}", float(idx))):
                hits.append(name)
            await asyncio.sleep(0)

    await asyncio.gather(*(runner(f"ep{i}") for i in range(3)))
    assert len(hits) == 1
    assert tracker.get_valid_count() == 60

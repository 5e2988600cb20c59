from __future__ import annotations

import threading
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Observation:
    endpoint: str
    signature: str
    timestamp: float
    start_time: float


@dataclass(slots=True)
class RaceRecord:
    signature: str
    # endpoint -> first arrival timestamp, in arrival order
    arrivals: dict[str, float] = field(default_factory=dict)

    def first(self) -> tuple[str, float] | None:
        if not self.arrivals:
            return None
        return min(self.arrivals.items(), key=lambda item: item[1])

    def copy(self) -> "RaceRecord":
        return RaceRecord(signature=self.signature, arrivals=dict(self.arrivals))


class RaceTracker:
    """Registry of first arrivals per signature shared by every runner.

    A record is complete once ``required_endpoints`` distinct endpoints have
    reported it. Completion is decided under the same lock as the insert, so
    exactly one ``add`` call sees the valid count reach ``target``.
    """

    def __init__(self, target: int | None = None, *, required_endpoints: int = 1) -> None:
        if required_endpoints <= 0:
            raise ValueError("required_endpoints must be >= 1")
        self._target = target
        self._required_endpoints = required_endpoints
        self._records: dict[str, RaceRecord] = {}
        self._valid_count = 0
        self._lock = threading.Lock()

    @property
    def target(self) -> int | None:
        return self._target

    def add(self, endpoint_name: str, observation: Observation) -> bool:
        """Record ``endpoint_name``'s first arrival; True iff this call hit the target."""
        with self._lock:
            record = self._records.get(observation.signature)
            if record is None:
                record = RaceRecord(signature=observation.signature)
                self._records[observation.signature] = record
            if endpoint_name in record.arrivals:
                return False
            record.arrivals[endpoint_name] = observation.timestamp
            if len(record.arrivals) != self._required_endpoints:
                return False
            self._valid_count += 1
            return self._target is not None and self._valid_count == self._target

    def get_valid_count(self) -> int:
        with self._lock:
            return self._valid_count

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def get(self, signature: str) -> RaceRecord | None:
        with self._lock:
            record = self._records.get(signature)
            return None if record is None else record.copy()

    def records(self) -> list[RaceRecord]:
        with self._lock:
            return [record.copy() for record in self._records.values()]

import asyncio
import json

import orjson
import pytest

from geyser_race.config import Config, ConfigError, Endpoint
from geyser_race.geyser_grpc import UPDATE_TRANSACTION, ConnectError, GeyserUpdate
from geyser_race.race import SHUTDOWN_MAX_RUN_SECONDS, run_race
from geyser_race.runner import EXIT_SHUTDOWN, EXIT_TARGET_REACHED

ACCOUNT = "Watched1111111111111111111111111111111111"


class FakeSender:
    async def send(self, request):
        return None


class FakeConnection:
    def __init__(self, signatures, *, delay=0.0):
        self._signatures = list(signatures)
        self._delay = delay

    async def subscribe(self, request):
        return FakeSender(), self._updates()

    async def _updates(self):
        for sig in self._signatures:
            await asyncio.sleep(self._delay)
            yield GeyserUpdate(kind=UPDATE_TRANSACTION, signature=sig, account_keys=[ACCOUNT])
        await asyncio.Event().wait()

    async def close(self):
        return None


class FakeClient:
    def __init__(self, connection=None, error=None):
        self._connection = connection
        self._error = error

    async def connect(self):
        if self._error is not None:
            raise self._error
        return self._connection


def _config(tmp_path, **overrides) -> Config:
    cfg = Config(account=ACCOUNT, transactions=3, data_dir=str(tmp_path))
    return cfg.apply_overrides(overrides)


def _read_runlog(run_dir):
    return [orjson.loads(line) for line in (run_dir / "runlog.ndjson").read_bytes().splitlines()]


@pytest.mark.asyncio
async def test_race_stops_at_target_and_writes_report(tmp_path) -> None:
    clients = {
        "fast": FakeClient(FakeConnection(["S1", "S2", "S3", "S4"])),
        "slow": FakeClient(FakeConnection(["S1", "S2"], delay=0.01)),
    }
    endpoints = [Endpoint(name="fast", url="https://fast"), Endpoint(name="slow", url="https://slow")]

    result = await asyncio.wait_for(
        run_race(
            _config(tmp_path),
            endpoints,
            client_factory=lambda ep: clients[ep.name],
            run_id="race-1",
        ),
        timeout=5.0,
    )

    assert result.ok
    assert result.valid_count == 3
    assert result.shutdown_reason == EXIT_TARGET_REACHED
    by_name = {outcome.endpoint: outcome for outcome in result.outcomes}
    assert by_name["fast"].exit_reason == EXIT_TARGET_REACHED
    assert by_name["slow"].exit_reason == EXIT_SHUTDOWN

    report = json.loads((result.run_dir / "report.json").read_text(encoding="utf-8"))
    assert report == result.report
    assert report["valid_count"] == 3
    assert report["race"]["races"] == 3
    assert report["race"]["endpoints"][0]["endpoint"] == "fast"
    assert "dual_stream" not in report

    records = _read_runlog(result.run_dir)
    assert records[0]["record_type"] == "run_start"
    assert records[-1]["record_type"] == "run_end"
    assert sum(1 for r in records if r["record_type"] == "runner_exit") == 2


@pytest.mark.asyncio
async def test_failed_endpoint_does_not_stop_others(tmp_path) -> None:
    clients = {
        "up": FakeClient(FakeConnection(["S1", "S2", "S3"])),
        "down": FakeClient(error=ConnectError("https://down: refused")),
    }
    endpoints = [Endpoint(name="down", url="https://down"), Endpoint(name="up", url="https://up")]

    result = await asyncio.wait_for(
        run_race(
            _config(tmp_path),
            endpoints,
            client_factory=lambda ep: clients[ep.name],
            runlog_writer=False,
        ),
        timeout=5.0,
    )

    assert result.ok
    assert result.valid_count == 3
    by_name = {outcome.endpoint: outcome for outcome in result.outcomes}
    assert by_name["down"].ok is False
    assert by_name["down"].error.startswith("ConnectError")
    assert by_name["up"].ok is True
    assert result.report["race"]["races"] == 3


@pytest.mark.asyncio
async def test_all_endpoints_failing_is_not_ok(tmp_path) -> None:
    clients = {"down": FakeClient(error=ConnectError("https://down: refused"))}
    result = await run_race(
        _config(tmp_path),
        [Endpoint(name="down", url="https://down")],
        client_factory=lambda ep: clients[ep.name],
        runlog_writer=False,
    )
    assert result.ok is False
    assert result.report["race"]["status"] == "no_data"


@pytest.mark.asyncio
async def test_max_run_seconds_stops_the_race(tmp_path) -> None:
    clients = {"quiet": FakeClient(FakeConnection([]))}
    result = await asyncio.wait_for(
        run_race(
            _config(tmp_path, max_run_seconds=0.05),
            [Endpoint(name="quiet", url="https://quiet")],
            client_factory=lambda ep: clients[ep.name],
            runlog_writer=False,
        ),
        timeout=5.0,
    )
    assert result.shutdown_reason == SHUTDOWN_MAX_RUN_SECONDS
    assert result.outcomes[0].exit_reason == EXIT_SHUTDOWN
    assert any(r["record_type"] == "run_timeout" for r in _read_runlog(result.run_dir))


@pytest.mark.asyncio
async def test_invalid_config_is_rejected(tmp_path) -> None:
    with pytest.raises(ConfigError):
        await run_race(Config(data_dir=str(tmp_path)), [Endpoint(name="a", url="https://a")])

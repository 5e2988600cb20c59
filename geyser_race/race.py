from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .bootstrap import bootstrap_run
from .comparator import RaceTracker
from .config import Config, Endpoint
from .dual_stream import GlobalDualStreamTracker
from .report import build_run_report, write_report
from .runlog import RunLog
from .runner import (
    ClientFactory,
    EndpointRunner,
    RaceContext,
    RunnerStats,
    build_runner,
    default_client_factory,
)
from .shutdown import RunCompletion, ShutdownCoordinator, install_signal_handlers
from .writers_ndjson import RunlogWriter

SHUTDOWN_MAX_RUN_SECONDS = "max_run_seconds"


@dataclass(slots=True)
class EndpointOutcome:
    endpoint: str
    kind: str
    ok: bool
    exit_reason: str | None
    stats: RunnerStats
    error: str | None = None


@dataclass(slots=True)
class RaceResult:
    run_id: str
    run_dir: Path
    outcomes: list[EndpointOutcome]
    valid_count: int
    shutdown_reason: str | None
    report: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return any(outcome.ok for outcome in self.outcomes)


async def run_race(
    config: Config,
    endpoints: list[Endpoint],
    *,
    client_factory: ClientFactory | None = None,
    run_id: str | None = None,
    install_signals: bool = False,
    runlog_writer: bool = True,
) -> RaceResult:
    config.validate()
    if not endpoints:
        raise ValueError("at least one endpoint is required")
    run = bootstrap_run(config, endpoints, run_id=run_id)
    print(f"race run dir: {run.run_dir}")
    writer = (
        RunlogWriter(run.runlog_path, fsync_on_close=config.runlog_fsync_on_close)
        if runlog_writer
        else None
    )
    runlog = RunLog(
        run.runlog_path,
        run.run_id,
        writer=writer,
        enqueue_timeout_seconds=config.runlog_enqueue_timeout_seconds,
    )
    tracker = RaceTracker(config.transactions, required_endpoints=config.race_required_endpoints)
    dual_tracker = GlobalDualStreamTracker()
    shutdown = ShutdownCoordinator()
    completion = RunCompletion(len(endpoints))
    ctx = RaceContext(
        run_config=config.run_config(),
        tracker=tracker,
        dual_tracker=dual_tracker,
        shutdown=shutdown,
        runlog=runlog,
        log_dir=run.log_dir,
        start_time=run.start_time,
        client_factory=client_factory or default_client_factory(config),
    )
    runners = [build_runner(endpoint, ctx) for endpoint in endpoints]
    include_dual = any(runner.kind == "dual_stream" for runner in runners)
    final_report: dict[str, Any] = {}
    outcomes: list[EndpointOutcome] = []

    async def _supervise(runner: EndpointRunner) -> RunnerStats:
        try:
            return await runner.run()
        finally:
            # The last runner out builds the report; no tracker writer is left.
            if completion.runner_finished():
                final_report.update(
                    build_run_report(
                        run_id=run.run_id,
                        race_records=tracker.records(),
                        dual_records=dual_tracker.records(),
                        endpoint_names=[ep.name for ep in endpoints],
                        start_time=run.start_time,
                        valid_count=tracker.get_valid_count(),
                        target=tracker.target,
                        include_dual_stream=include_dual,
                    )
                )

    tasks = [
        asyncio.create_task(_supervise(runner), name=f"runner-{runner.name}")
        for runner in runners
    ]
    if install_signals:
        install_signal_handlers(shutdown)
    try:
        if config.max_run_seconds is not None:
            _done, pending = await asyncio.wait(tasks, timeout=config.max_run_seconds)
            if pending and shutdown.trigger(SHUTDOWN_MAX_RUN_SECONDS):
                runlog.write("run_timeout", max_run_seconds=config.max_run_seconds)
        results = await asyncio.gather(*tasks, return_exceptions=True)
        for runner, result in zip(runners, results):
            error = None
            if isinstance(result, BaseException):
                error = f"{type(result).__name__}: {result}"
            outcomes.append(
                EndpointOutcome(
                    endpoint=runner.name,
                    kind=runner.kind,
                    ok=error is None,
                    exit_reason=runner.exit_reason,
                    stats=runner.stats,
                    error=error,
                )
            )
        write_report(run.run_dir, final_report)
        runlog.write(
            "run_end",
            valid_count=tracker.get_valid_count(),
            target=tracker.target,
            shutdown_reason=shutdown.reason,
            shutdown_source=shutdown.triggered_by,
            outcomes=outcomes,
        )
    finally:
        runlog.close()
    return RaceResult(
        run_id=run.run_id,
        run_dir=run.run_dir,
        outcomes=outcomes,
        valid_count=tracker.get_valid_count(),
        shutdown_reason=shutdown.reason,
        report=final_report,
    )

from __future__ import annotations

import asyncio
import contextlib
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Any, AsyncIterator, Callable

from .bootstrap import wall_clock_seconds
from .comparator import Observation, RaceTracker
from .config import Config, Endpoint, RunConfig
from .dual_stream import GlobalDualStreamTracker, LocalDualStreamTracker, summarize_local
from .entries import EntryDecodeError, decode_entries
from .geyser_grpc import (
    UPDATE_ACCOUNT,
    UPDATE_ENTRIES,
    UPDATE_MALFORMED,
    UPDATE_PING,
    UPDATE_PONG,
    UPDATE_TRANSACTION,
    GeyserClient,
    GeyserUpdate,
    StreamError,
    SubscriptionRequest,
    SubscriptionSender,
    build_dual_stream_request,
    build_entries_request,
    build_ping_reply,
    build_transactions_request,
    request_fields,
)
from .runlog import RunLog, open_log_file, write_log_entry
from .shutdown import ShutdownCoordinator

STATE_IDLE = "idle"
STATE_CONNECTING = "connecting"
STATE_SUBSCRIBED = "subscribed"
STATE_STREAMING = "streaming"
STATE_TERMINATED = "terminated"

EXIT_SHUTDOWN = "shutdown"
EXIT_TARGET_REACHED = "target_reached"
EXIT_STREAM_CLOSED = "stream_closed"
EXIT_STREAM_ERROR = "stream_error"
EXIT_FAILED = "failed"

ClientFactory = Callable[[Endpoint], Any]


def default_client_factory(config: Config) -> ClientFactory:
    def _factory(endpoint: Endpoint) -> GeyserClient:
        return GeyserClient(
            endpoint.url,
            endpoint.x_token,
            connect_timeout=config.grpc_connect_timeout_seconds,
            close_grace=config.grpc_close_grace_seconds,
            max_message_bytes=config.grpc_max_message_bytes,
            user_agent=config.grpc_user_agent,
        )

    return _factory


@dataclass(slots=True)
class RunnerStats:
    updates: int = 0
    matches: int = 0
    transactions: int = 0
    account_updates: int = 0
    entries: int = 0
    pings: int = 0
    pongs: int = 0
    decode_errors: int = 0
    other_updates: int = 0


@dataclass(slots=True)
class RaceContext:
    run_config: RunConfig
    tracker: RaceTracker
    dual_tracker: GlobalDualStreamTracker
    shutdown: ShutdownCoordinator
    runlog: RunLog
    log_dir: Path
    start_time: float
    client_factory: ClientFactory


class EndpointRunner:
    """Drives one endpoint's subscription until shutdown or end of stream.

    Variants only provide the subscription request and the mapping from an
    update to observations; connect, subscribe, the wait loop, ping replies
    and shutdown handling are shared.
    """

    kind = ""

    def __init__(self, endpoint: Endpoint, ctx: RaceContext) -> None:
        self.endpoint = endpoint
        self.ctx = ctx
        self.stats = RunnerStats()
        self.state = STATE_IDLE
        self.exit_reason: str | None = None
        self._log_fh: IO[bytes] | None = None

    @property
    def name(self) -> str:
        return self.endpoint.name

    @property
    def log_name(self) -> str:
        return self.endpoint.name

    def subscribe_request(self) -> SubscriptionRequest:
        raise NotImplementedError

    def handle_update(self, update: GeyserUpdate) -> bool:
        """Fold one update into the trackers; True when it completed the run's target."""
        raise NotImplementedError

    def exit_fields(self) -> dict[str, Any]:
        return {}

    def _runlog(self, record_type: str, **fields: Any) -> None:
        self.ctx.runlog.write(record_type, endpoint=self.name, kind=self.kind, **fields)

    async def run(self) -> RunnerStats:
        connection = None
        error: BaseException | None = None
        self._log_fh = open_log_file(self.ctx.log_dir, self.log_name)
        try:
            self.state = STATE_CONNECTING
            self._runlog("connect_attempt", url=self.endpoint.url)
            client = self.ctx.client_factory(self.endpoint)
            connection = await client.connect()
            self._runlog("connected", url=self.endpoint.url)

            request = self.subscribe_request()
            sender, updates = await connection.subscribe(request)
            self.state = STATE_SUBSCRIBED
            self._runlog(
                "subscribed",
                account=self.ctx.run_config.account,
                commitment=self.ctx.run_config.commitment,
                request_fields=request_fields(request),
            )
            self.exit_reason = await self._stream(sender, updates)
        except BaseException as exc:
            error = exc
            self.exit_reason = EXIT_FAILED
            raise
        finally:
            if connection is not None:
                with contextlib.suppress(Exception):
                    await connection.close()
            self._log_fh.close()
            self.state = STATE_TERMINATED
            self._runlog(
                "runner_exit",
                reason=self.exit_reason,
                error=None if error is None else f"{type(error).__name__}: {error}",
                stats=self.stats,
                **self.exit_fields(),
            )
        return self.stats

    async def _stream(
        self,
        sender: SubscriptionSender,
        updates: AsyncIterator[GeyserUpdate],
    ) -> str:
        self.state = STATE_STREAMING
        shutdown_task = asyncio.ensure_future(self.ctx.shutdown.wait())
        try:
            while True:
                if shutdown_task.done():
                    self._runlog("stop_signal", shutdown_reason=self.ctx.shutdown.reason)
                    return EXIT_SHUTDOWN
                next_task = asyncio.ensure_future(updates.__anext__())
                done, _pending = await asyncio.wait(
                    {next_task, shutdown_task},
                    return_when=asyncio.FIRST_COMPLETED,
                )
                if next_task not in done:
                    next_task.cancel()
                    with contextlib.suppress(asyncio.CancelledError, StopAsyncIteration, StreamError):
                        await next_task
                    self._runlog("stop_signal", shutdown_reason=self.ctx.shutdown.reason)
                    return EXIT_SHUTDOWN
                try:
                    update = next_task.result()
                except StopAsyncIteration:
                    self._runlog("stream_closed")
                    return EXIT_STREAM_CLOSED
                except StreamError as exc:
                    self._runlog("stream_error", error=str(exc))
                    return EXIT_STREAM_ERROR
                self.stats.updates += 1
                try:
                    reached = await self._dispatch(update, sender)
                except StreamError as exc:
                    self._runlog("stream_error", error=str(exc))
                    return EXIT_STREAM_ERROR
                if reached:
                    return EXIT_TARGET_REACHED
        finally:
            if not shutdown_task.done():
                shutdown_task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await shutdown_task
            aclose = getattr(updates, "aclose", None)
            if aclose is not None:
                with contextlib.suppress(Exception):
                    await aclose()

    async def _dispatch(self, update: GeyserUpdate, sender: SubscriptionSender) -> bool:
        if update.kind == UPDATE_PING:
            self.stats.pings += 1
            await sender.send(build_ping_reply())
            return False
        if update.kind == UPDATE_PONG:
            self.stats.pongs += 1
            return False
        if update.kind == UPDATE_MALFORMED:
            self._decode_error(update.error, sample=update.raw_sample)
            return False
        return self.handle_update(update)

    def _decode_error(self, error: str | None, **fields: Any) -> None:
        self.stats.decode_errors += 1
        self._runlog("decode_error", error=error, **fields)

    def _ignore(self, update: GeyserUpdate) -> bool:
        self.stats.other_updates += 1
        return False

    def _log_observation(self, signature: str, timestamp: float, label: str) -> None:
        if self._log_fh is None:
            raise RuntimeError(f"{self.name}: observation log is not open")
        write_log_entry(self._log_fh, timestamp, label, signature)

    def _race(self, signature: str, timestamp: float) -> bool:
        self.stats.matches += 1
        observation = Observation(
            endpoint=self.name,
            signature=signature,
            timestamp=timestamp,
            start_time=self.ctx.start_time,
        )
        if not self.ctx.tracker.add(self.name, observation):
            return False
        fired = self.ctx.shutdown.trigger(EXIT_TARGET_REACHED, source=self.name)
        self._runlog(
            "target_reached",
            valid_count=self.ctx.tracker.get_valid_count(),
            target=self.ctx.run_config.transactions,
            matches=self.stats.matches,
            shutdown_sent=fired,
        )
        return True

    def _matches(self, account_keys: list[str]) -> bool:
        return self.ctx.run_config.account in account_keys


class TransactionRunner(EndpointRunner):
    kind = "transactions"

    def subscribe_request(self) -> SubscriptionRequest:
        run_config = self.ctx.run_config
        return build_transactions_request(run_config.account, run_config.commitment)

    def handle_update(self, update: GeyserUpdate) -> bool:
        if update.kind != UPDATE_TRANSACTION:
            return self._ignore(update)
        self.stats.transactions += 1
        if update.signature is None or not self._matches(update.account_keys):
            return False
        timestamp = wall_clock_seconds()
        self._log_observation(update.signature, timestamp, self.name)
        return self._race(update.signature, timestamp)


class DualStreamRunner(EndpointRunner):
    """Watches account writes and transactions on one endpoint.

    Transactions race against the other endpoints; both signals also feed the
    local tracker (this endpoint's own lead/lag) and the global one.
    """

    kind = "dual_stream"

    def __init__(self, endpoint: Endpoint, ctx: RaceContext) -> None:
        super().__init__(endpoint, ctx)
        self.local = LocalDualStreamTracker()

    @property
    def log_name(self) -> str:
        return f"{self.endpoint.name}_dual_stream"

    def subscribe_request(self) -> SubscriptionRequest:
        run_config = self.ctx.run_config
        return build_dual_stream_request(run_config.account, run_config.commitment)

    def handle_update(self, update: GeyserUpdate) -> bool:
        if update.kind == UPDATE_TRANSACTION:
            return self._on_transaction(update)
        if update.kind == UPDATE_ACCOUNT:
            self._on_account(update)
            return False
        return self._ignore(update)

    def _on_transaction(self, update: GeyserUpdate) -> bool:
        self.stats.transactions += 1
        signature = update.signature
        if signature is None or not self._matches(update.account_keys):
            return False
        timestamp = wall_clock_seconds()
        record, completed = self.local.observe_transaction(signature, self.name, timestamp)
        self.ctx.dual_tracker.observe_transaction(signature, self.name, timestamp)
        self._log_observation(signature, timestamp, f"{self.name}_TX")
        if completed:
            self._runlog_match(record.signature, record.delta_ms())
        return self._race(signature, timestamp)

    def _on_account(self, update: GeyserUpdate) -> None:
        self.stats.account_updates += 1
        signature = update.signature
        if signature is None:
            return
        timestamp = wall_clock_seconds()
        record, completed = self.local.observe_account(signature, self.name, timestamp)
        self.ctx.dual_tracker.observe_account(signature, self.name, timestamp)
        self._log_observation(signature, timestamp, f"{self.name}_ACCT")
        if completed:
            self._runlog_match(record.signature, record.delta_ms())

    def _runlog_match(self, signature: str, delta_ms: float | None) -> None:
        if delta_ms is None:
            return
        self._runlog(
            "dual_stream_match",
            signature=signature,
            delta_ms=delta_ms,
            first="account" if delta_ms > 0 else "transaction",
        )

    def exit_fields(self) -> dict[str, Any]:
        return {"dual_stream": summarize_local(self.local.records(), self.name)}


class EntriesRunner(EndpointRunner):
    """Unfiltered bundled-entry feed; the watched account is matched client-side."""

    kind = "entries"

    def subscribe_request(self) -> SubscriptionRequest:
        return build_entries_request()

    def handle_update(self, update: GeyserUpdate) -> bool:
        if update.kind != UPDATE_ENTRIES:
            return self._ignore(update)
        self.stats.entries += 1
        try:
            transactions = decode_entries(update.payload or b"")
        except EntryDecodeError as exc:
            self._decode_error(str(exc), slot=update.slot)
            return False
        reached = False
        for tx in transactions:
            self.stats.transactions += 1
            if not self._matches(tx.account_keys):
                continue
            timestamp = wall_clock_seconds()
            self._log_observation(tx.signature, timestamp, self.name)
            if self._race(tx.signature, timestamp):
                reached = True
        return reached


RUNNER_KINDS: dict[str, type[EndpointRunner]] = {
    TransactionRunner.kind: TransactionRunner,
    DualStreamRunner.kind: DualStreamRunner,
    EntriesRunner.kind: EntriesRunner,
}


def build_runner(endpoint: Endpoint, ctx: RaceContext) -> EndpointRunner:
    try:
        runner_cls = RUNNER_KINDS[endpoint.kind]
    except KeyError:
        raise ValueError(f"unknown endpoint kind: {endpoint.kind}") from None
    return runner_cls(endpoint, ctx)

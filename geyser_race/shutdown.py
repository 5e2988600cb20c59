from __future__ import annotations

import asyncio
import signal
import threading


class ShutdownCoordinator:
    """One-shot broadcast stop signal shared by every runner of a run.

    ``trigger`` may be called any number of times from any runner; only the
    first call has an effect and reports ``True``. Waiters that start after
    the signal fired return immediately.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._lock = threading.Lock()
        self._reason: str | None = None
        self._triggered_by: str | None = None

    @property
    def reason(self) -> str | None:
        return self._reason

    @property
    def triggered_by(self) -> str | None:
        return self._triggered_by

    def is_set(self) -> bool:
        return self._event.is_set()

    def trigger(self, reason: str, *, source: str | None = None) -> bool:
        with self._lock:
            if self._reason is not None:
                return False
            self._reason = reason
            self._triggered_by = source
        self._event.set()
        return True

    async def wait(self) -> None:
        await self._event.wait()


class RunCompletion:
    """Counts terminated runners; exactly one caller sees the last one finish."""

    def __init__(self, expected: int) -> None:
        if expected <= 0:
            raise ValueError("expected must be >= 1")
        self._expected = expected
        self._finished = 0
        self._lock = threading.Lock()
        self._done = asyncio.Event()

    @property
    def expected(self) -> int:
        return self._expected

    @property
    def finished(self) -> int:
        return self._finished

    def runner_finished(self) -> bool:
        with self._lock:
            self._finished += 1
            last = self._finished == self._expected
        if last:
            self._done.set()
        return last

    def is_done(self) -> bool:
        return self._done.is_set()

    async def wait(self) -> None:
        await self._done.wait()


def install_signal_handlers(shutdown: ShutdownCoordinator) -> None:
    loop = asyncio.get_running_loop()

    def _request_stop(sig: signal.Signals) -> None:
        if shutdown.is_set():
            return
        loop.call_soon_threadsafe(shutdown.trigger, sig.name)

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _request_stop, sig)
        except (NotImplementedError, RuntimeError):
            try:
                signal.signal(sig, lambda *_args, _sig=sig: _request_stop(_sig))
            except (ValueError, AttributeError):
                continue

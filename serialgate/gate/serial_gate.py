import asyncio
import concurrent.futures
import sys
import time
import traceback
from typing import (
    Any,
    Awaitable,
    Callable,
    TypeVar,
)

from serialgate.logging import Logger, report_log_failure
from serialgate.logging.serialgate_logging_models import GateDebug

from .models import GateRun, RunStatus


T = TypeVar("T")


class SerialGate:
    """
    Admits units of work one at a time, in the order they were enqueued.

    Each unit is "acquire, run, release" against a single ``asyncio.Lock``.
    Units are scheduled as tasks at enqueue time and ``asyncio.Lock`` hands
    ownership to waiters in FIFO order, so admission order is enqueue order
    no matter how long each unit suspends for.

    A unit's failure is captured into its ``GateRun`` and never re-raised,
    so one failing unit cannot stall or poison the units behind it.
    """

    def __init__(
        self,
        name: str | None = None,
        logger: Logger | None = None,
    ) -> None:
        if name is None:
            name = "gate"

        self.name = name

        self._lock = asyncio.Lock()
        self._tail: asyncio.Task[GateRun[Any]] | None = None
        self._run_id = 0
        self._pending = 0
        self._logger = logger

    @property
    def pending(self) -> int:
        return self._pending

    @property
    def locked(self) -> bool:
        return self._lock.locked()

    def enqueue(
        self,
        task: Callable[[], Awaitable[T]],
        label: str | None = None,
    ) -> asyncio.Task[GateRun[T]]:
        # No suspension between reading and replacing the tail.
        self._run_id += 1

        if label is None:
            label = self.name

        run: GateRun[T] = GateRun(
            run_id=self._run_id,
            label=label,
            status=RunStatus.PENDING,
            queued=time.monotonic(),
        )

        self._pending += 1
        unit = asyncio.ensure_future(self._admit(run, task))
        unit.add_done_callback(self._settle)
        self._tail = unit

        return unit

    def enqueue_threadsafe(
        self,
        task: Callable[[], Awaitable[T]],
        loop: asyncio.AbstractEventLoop,
        label: str | None = None,
    ) -> concurrent.futures.Future[GateRun[T]]:
        return asyncio.run_coroutine_threadsafe(
            self._enqueue_and_wait(task, label),
            loop,
        )

    async def _enqueue_and_wait(
        self,
        task: Callable[[], Awaitable[T]],
        label: str | None,
    ):
        return await self.enqueue(task, label=label)

    def current_tail(self) -> Awaitable[None]:
        return self._wait_for(self._tail)

    async def drain(self):
        await self.current_tail()

    async def _wait_for(self, tail: asyncio.Task | None):
        if tail is None or tail.done():
            return

        # asyncio.wait never raises on the awaited task's outcome and never
        # cancels it if the waiter is cancelled.
        await asyncio.wait([tail])

    async def _admit(
        self,
        run: GateRun[T],
        task: Callable[[], Awaitable[T]],
    ) -> GateRun[T]:
        try:
            async with self._lock:
                run.status = RunStatus.RUNNING
                run.start = time.monotonic()

                await self._log_run(run)

                try:
                    run.result = await task()
                    run.status = RunStatus.COMPLETE

                except Exception as err:
                    run.error = str(err) or type(err).__name__
                    run.trace = traceback.format_exc()
                    run.status = RunStatus.FAILED

                await self._log_run(run)

        except asyncio.CancelledError:
            run.status = RunStatus.CANCELLED
            raise

        finally:
            run.end = time.monotonic()
            run.elapsed = run.end - (run.start or run.queued)

        return run

    def _settle(self, _: asyncio.Task):
        self._pending -= 1

    async def _log_run(self, run: GateRun[Any]):
        if self._logger is None:
            return

        entry = GateDebug(
            message=f"Gate {self.name} run {run.token} is {run.status.value}",
            gate=self.name,
            run_id=run.run_id,
            label=run.label,
            status=run.status.value,
            pending=self._pending,
        )

        try:
            await self._logger.log(
                entry,
                name=self.name,
            )

        except Exception as err:
            frame = sys._getframe(0)
            await report_log_failure(
                entry,
                err,
                frame.f_code.co_filename,
                frame.f_code.co_name,
                frame.f_lineno,
            )

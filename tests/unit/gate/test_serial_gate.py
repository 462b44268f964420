import asyncio

import pytest

from serialgate.gate import GateRun, RunStatus, SerialGate
from serialgate.latency import SequenceDelay
from serialgate.logging import Logger, LoggingConfig


def make_recording_task(
    events: list[tuple[str, int]],
    idx: int,
    delay: float = 0,
    result=None,
):
    async def task():
        events.append(("start", idx))
        await asyncio.sleep(delay)
        events.append(("end", idx))
        return result

    return task


class TestEnqueue:
    @pytest.mark.asyncio
    async def test_enqueue_returns_handle_with_outcome(self):
        gate = SerialGate(name="test")

        async def task():
            return 42

        unit = gate.enqueue(task, label="answer")
        run = await unit

        assert isinstance(run, GateRun)
        assert run.status == RunStatus.COMPLETE
        assert run.completed is True
        assert run.result == 42
        assert run.label == "answer"
        assert run.run_id == 1
        assert run.error is None
        assert run.elapsed >= 0

    @pytest.mark.asyncio
    async def test_run_ids_increase_in_enqueue_order(self):
        gate = SerialGate()

        async def task():
            return None

        runs = await asyncio.gather(*[
            gate.enqueue(task) for _ in range(5)
        ])

        assert [run.run_id for run in runs] == [1, 2, 3, 4, 5]
        assert all(run.label == "gate" for run in runs)

    @pytest.mark.asyncio
    async def test_task_does_not_start_before_enqueue_returns(self):
        gate = SerialGate()
        started = False

        async def task():
            nonlocal started
            started = True

        unit = gate.enqueue(task)
        assert started is False
        assert gate.pending == 1

        await unit
        assert started is True
        assert gate.pending == 0


class TestOrdering:
    @pytest.mark.asyncio
    async def test_fifo_even_when_earlier_tasks_are_slower(self):
        gate = SerialGate()
        events: list[tuple[str, int]] = []

        delays = [0.05, 0.04, 0.03, 0.02, 0.01, 0]
        units = [
            gate.enqueue(make_recording_task(events, idx, delay))
            for idx, delay in enumerate(delays)
        ]

        await asyncio.gather(*units)

        expected: list[tuple[str, int]] = []
        for idx in range(len(delays)):
            expected.extend([("start", idx), ("end", idx)])

        assert events == expected

    @pytest.mark.asyncio
    async def test_at_most_one_task_in_flight(self):
        gate = SerialGate()
        delay = SequenceDelay([0.003, 0, 0.001, 0.002])
        in_flight = 0
        max_in_flight = 0

        async def task():
            nonlocal in_flight, max_in_flight
            in_flight += 1
            max_in_flight = max(max_in_flight, in_flight)

            await delay()
            assert gate.locked is True
            await delay()

            in_flight -= 1

        runs = await asyncio.gather(*[
            gate.enqueue(task) for _ in range(20)
        ])

        assert all(run.completed for run in runs)
        assert max_in_flight == 1
        assert gate.locked is False


class TestFailureIsolation:
    @pytest.mark.asyncio
    async def test_failing_task_does_not_stall_the_chain(self):
        gate = SerialGate()
        events: list[tuple[str, int]] = []

        async def failing_task():
            events.append(("start", 1))
            await asyncio.sleep(0)
            raise ValueError("boom")

        first = gate.enqueue(make_recording_task(events, 0, result="first"))
        failed = gate.enqueue(failing_task)
        last = gate.enqueue(make_recording_task(events, 2, result="last"))

        first_run, failed_run, last_run = await asyncio.gather(first, failed, last)

        assert first_run.result == "first"
        assert last_run.result == "last"
        assert last_run.completed is True

        assert failed_run.failed is True
        assert failed_run.status == RunStatus.FAILED
        assert failed_run.error == "boom"
        assert "ValueError" in failed_run.trace
        assert failed_run.result is None

        assert events == [
            ("start", 0),
            ("end", 0),
            ("start", 1),
            ("start", 2),
            ("end", 2),
        ]

    @pytest.mark.asyncio
    async def test_error_without_message_reports_exception_type(self):
        gate = SerialGate()

        async def failing_task():
            raise RuntimeError()

        run = await gate.enqueue(failing_task)

        assert run.error == "RuntimeError"

    @pytest.mark.asyncio
    async def test_cancelled_unit_does_not_block_later_units(self):
        gate = SerialGate()
        release = asyncio.Event()

        async def blocker():
            await release.wait()
            return "blocker"

        async def task():
            return "after"

        first = gate.enqueue(blocker)
        cancelled = gate.enqueue(task)
        last = gate.enqueue(task)

        await asyncio.sleep(0)
        cancelled.cancel()
        release.set()

        first_run = await first
        last_run = await last

        assert first_run.result == "blocker"
        assert last_run.result == "after"
        assert cancelled.cancelled() is True
        assert gate.pending == 0


class TestCurrentTail:
    @pytest.mark.asyncio
    async def test_current_tail_on_empty_gate_resolves(self):
        gate = SerialGate()

        await asyncio.wait_for(gate.current_tail(), timeout=1)
        await asyncio.wait_for(gate.drain(), timeout=1)

    @pytest.mark.asyncio
    async def test_current_tail_waits_for_everything_enqueued(self):
        gate = SerialGate()
        events: list[tuple[str, int]] = []

        for idx in range(4):
            gate.enqueue(make_recording_task(events, idx, 0.01))

        await gate.current_tail()

        assert len(events) == 8
        assert gate.pending == 0

    @pytest.mark.asyncio
    async def test_current_tail_ignores_later_enqueues(self):
        gate = SerialGate()
        first_release = asyncio.Event()
        second_release = asyncio.Event()

        async def first_task():
            await first_release.wait()

        async def second_task():
            await second_release.wait()

        gate.enqueue(first_task)
        waiter = asyncio.ensure_future(gate.current_tail())
        second = gate.enqueue(second_task)

        first_release.set()
        await asyncio.wait_for(waiter, timeout=1)

        assert second.done() is False

        second_release.set()
        await second

    @pytest.mark.asyncio
    async def test_current_tail_survives_failed_tail(self):
        gate = SerialGate()

        async def failing_task():
            raise ValueError("tail failure")

        unit = gate.enqueue(failing_task)
        await gate.current_tail()

        run = unit.result()
        assert run.failed is True

    @pytest.mark.asyncio
    async def test_cancelling_waiter_does_not_cancel_tail(self):
        gate = SerialGate()
        release = asyncio.Event()

        async def task():
            await release.wait()
            return "done"

        unit = gate.enqueue(task)
        waiter = asyncio.ensure_future(gate.current_tail())
        await asyncio.sleep(0)

        waiter.cancel()
        release.set()

        run = await unit
        assert run.result == "done"


class TestThreadsafeEnqueue:
    @pytest.mark.asyncio
    async def test_enqueue_from_worker_threads_loses_no_updates(self):
        gate = SerialGate()
        loop = asyncio.get_running_loop()
        state = {"value": 0}

        async def increment():
            current = state["value"]
            await asyncio.sleep(0.001)
            state["value"] = current + 1
            return state["value"]

        def submit(idx: int):
            return gate.enqueue_threadsafe(
                increment,
                loop,
                label=f"thread-{idx}",
            ).result(timeout=10)

        runs = await asyncio.gather(*[
            loop.run_in_executor(None, submit, idx) for idx in range(8)
        ])

        assert state["value"] == 8
        assert sorted(run.result for run in runs) == list(range(1, 9))
        assert all(run.completed for run in runs)


class TestGateLogging:
    @pytest.mark.asyncio
    async def test_admission_and_completion_are_logged_at_debug(self, capsys):
        async def run_with_debug_logging():
            LoggingConfig().update(log_level="debug")

            gate = SerialGate(
                name="ledger.gate",
                logger=Logger(),
            )

            async def task():
                return None

            await gate.enqueue(task, label="noop")

        await asyncio.create_task(run_with_debug_logging())

        output = capsys.readouterr().out
        assert "Gate ledger.gate run noop:1 is RUNNING" in output
        assert "Gate ledger.gate run noop:1 is COMPLETE" in output

    @pytest.mark.asyncio
    async def test_debug_entries_are_dropped_at_info(self, capsys):
        gate = SerialGate(logger=Logger())

        async def task():
            return None

        await gate.enqueue(task)

        assert capsys.readouterr().out == ""

    @pytest.mark.asyncio
    async def test_logger_errors_do_not_fail_the_unit(
        self,
        capsys,
        failing_logger_factory,
    ):
        logger = failing_logger_factory()
        gate = SerialGate(name="ledger.gate", logger=logger)

        async def task():
            return 42

        runs = await asyncio.gather(
            gate.enqueue(task, label="first"),
            gate.enqueue(task, label="second"),
        )

        assert [run.status for run in runs] == [RunStatus.COMPLETE] * 2
        assert [run.result for run in runs] == [42, 42]
        assert logger.failures == 4
        assert gate.pending == 0
        assert gate.locked is False

        errors = capsys.readouterr().err
        assert "log sink unavailable for ledger.gate" in errors
        assert "_log_run" in errors

    @pytest.mark.asyncio
    async def test_unwritable_log_directory_does_not_fail_the_unit(
        self,
        capsys,
        temp_log_directory: str,
    ):
        not_a_directory = f"{temp_log_directory}/taken"
        with open(not_a_directory, "w") as blocker:
            blocker.write("")

        async def run_with_broken_directory():
            LoggingConfig().update(
                log_level="debug",
                log_directory=not_a_directory,
            )

            gate = SerialGate(logger=Logger())

            async def task():
                return "done"

            return await gate.enqueue(task)

        run = await asyncio.create_task(run_with_broken_directory())

        assert run.completed
        assert run.result == "done"
        assert "DEBUG" in capsys.readouterr().err

"""Tests for the per-level process queue.

A queue is a FIFO with a time quantum.  It charges time to its head
process and, when the quantum runs out, hands the process back to the
scheduler with a LOWER_PRIORITY interrupt.  Processes that block or
wake up leave via emit_interrupt, which forwards to the scheduler.
"""

from __future__ import annotations

import pytest

from py_mlfq.interrupts import QueueType, SchedulerInterrupt
from py_mlfq.process import Process
from py_mlfq.queue import ProcessQueue

QUANTUM = 5
SHORT_BURST = 2
LONG_BURST = 4
THREE_PROCESSES = 3


class RecordingScheduler:
    """Scheduler stand-in that records every interrupt it receives."""

    def __init__(self) -> None:
        """Start with no recorded calls."""
        self.calls: list[tuple[ProcessQueue, object, SchedulerInterrupt]] = []

    def handle_interrupt(
        self,
        queue: ProcessQueue,
        process: object,
        interrupt: SchedulerInterrupt,
    ) -> None:
        """Record the call."""
        self.calls.append((queue, process, interrupt))


class FakeProcess:
    """Process stand-in with a directly settable state_changed flag."""

    def __init__(self, pid: int) -> None:
        """Create a fake with the given PID."""
        self.pid = pid
        self.state_changed = False
        self.parent: ProcessQueue | None = None
        self.cpu_bursts: list[int] = []
        self.blocking_bursts: list[int] = []

    def set_parent_queue(self, queue: ProcessQueue) -> None:
        """Remember the parent queue."""
        self.parent = queue

    def execute_process(self, elapsed: int) -> None:
        """Record a CPU burst."""
        self.cpu_bursts.append(elapsed)

    def execute_blocking_process(self, elapsed: int) -> None:
        """Record a blocking burst."""
        self.blocking_bursts.append(elapsed)


def _make_queue(
    quantum: int = QUANTUM,
    queue_type: QueueType = QueueType.CPU_QUEUE,
) -> tuple[ProcessQueue, RecordingScheduler]:
    """Create a queue wired to a recording scheduler."""
    scheduler = RecordingScheduler()
    queue = ProcessQueue(scheduler, quantum=quantum, priority_level=1, queue_type=queue_type)
    return queue, scheduler


class TestQueueCreation:
    """Verify queue initialisation."""

    def test_new_queue_is_empty(self) -> None:
        """A new queue should hold no processes."""
        queue, _ = _make_queue()
        assert queue.is_empty()
        assert len(queue) == 0

    def test_accessors(self) -> None:
        """Priority level, type, and quantum are exposed unchanged."""
        queue, _ = _make_queue(queue_type=QueueType.BLOCKING_QUEUE)
        assert queue.priority_level == 1
        assert queue.queue_type is QueueType.BLOCKING_QUEUE
        assert queue.quantum == QUANTUM
        assert queue.quantum_clock == 0

    def test_non_positive_quantum_raises(self) -> None:
        """A queue cannot have a zero quantum."""
        with pytest.raises(ValueError, match="Quantum must be positive"):
            _make_queue(quantum=0)

    def test_negative_priority_level_raises(self) -> None:
        """Priority levels start at zero."""
        with pytest.raises(ValueError, match="non-negative"):
            ProcessQueue(
                RecordingScheduler(),
                quantum=QUANTUM,
                priority_level=-1,
                queue_type=QueueType.CPU_QUEUE,
            )


class TestEnqueueDequeue:
    """Verify FIFO ordering and parent-queue adoption."""

    def test_enqueue_returns_process(self) -> None:
        """Enqueue hands back the process it added."""
        queue, _ = _make_queue()
        process = FakeProcess(1)
        assert queue.enqueue(process) is process  # type: ignore[arg-type]

    def test_enqueue_sets_parent_queue(self) -> None:
        """The enqueued process should point back at this queue."""
        queue, _ = _make_queue()
        process = FakeProcess(1)
        queue.enqueue(process)  # type: ignore[arg-type]
        assert process.parent is queue

    def test_enqueue_real_process_sets_weak_parent(self) -> None:
        """A real Process resolves its parent queue through a weak reference."""
        queue, _ = _make_queue()
        process = Process(cpu_time_needed=10)
        queue.enqueue(process)
        assert process.parent_queue is queue

    def test_fifo_order(self) -> None:
        """Peek returns processes in arrival order as they are dequeued."""
        queue, _ = _make_queue()
        procs = [FakeProcess(i) for i in range(THREE_PROCESSES)]
        for p in procs:
            queue.enqueue(p)  # type: ignore[arg-type]
        for p in procs:
            assert queue.peek() is p
            assert queue.dequeue() is p
        assert queue.is_empty()

    def test_is_empty_after_last_dequeue(self) -> None:
        """Dequeuing the last process empties the queue."""
        queue, _ = _make_queue()
        queue.enqueue(FakeProcess(1))  # type: ignore[arg-type]
        assert not queue.is_empty()
        queue.dequeue()
        assert queue.is_empty()

    def test_dequeue_empty_returns_none(self) -> None:
        """Dequeuing an empty queue returns None instead of raising."""
        queue, _ = _make_queue()
        assert queue.dequeue() is None

    def test_peek_empty_returns_none(self) -> None:
        """Peeking an empty queue returns None instead of raising."""
        queue, _ = _make_queue()
        assert queue.peek() is None

    def test_peek_does_not_remove(self) -> None:
        """Peek leaves the head in place."""
        queue, _ = _make_queue()
        queue.enqueue(FakeProcess(1))  # type: ignore[arg-type]
        queue.peek()
        assert len(queue) == 1

    def test_enqueue_always_succeeds(self) -> None:
        """Enqueue never refuses a process, even one already queued."""
        queue, _ = _make_queue()
        process = FakeProcess(1)
        assert queue.enqueue(process) is process  # type: ignore[arg-type]
        assert queue.enqueue(process) is process  # type: ignore[arg-type]
        assert process.parent is queue

    def test_contains_uses_identity(self) -> None:
        """Membership checks the exact process object."""
        queue, _ = _make_queue()
        present = FakeProcess(1)
        queue.enqueue(present)  # type: ignore[arg-type]
        assert present in queue
        assert FakeProcess(1) not in queue

    def test_drain_empties_and_resets_clock(self) -> None:
        """Drain returns everything in order and resets the clock."""
        queue, scheduler = _make_queue()
        procs = [FakeProcess(i) for i in range(THREE_PROCESSES)]
        for p in procs:
            queue.enqueue(p)  # type: ignore[arg-type]
        queue.manage_time_slice(procs[0], SHORT_BURST)  # type: ignore[arg-type]
        assert queue.drain() == procs
        assert queue.is_empty()
        assert queue.quantum_clock == 0
        assert scheduler.calls == []


class TestManageTimeSlice:
    """Verify quantum accounting and demotion."""

    def test_below_quantum_accumulates(self) -> None:
        """Time below the quantum is added to the clock, nothing else."""
        queue, scheduler = _make_queue()
        process = FakeProcess(1)
        queue.enqueue(process)  # type: ignore[arg-type]
        queue.manage_time_slice(process, SHORT_BURST)  # type: ignore[arg-type]
        assert queue.quantum_clock == SHORT_BURST
        assert queue.peek() is process
        assert scheduler.calls == []

    def test_crossing_quantum_demotes_once(self) -> None:
        """2 then 4 against a quantum of 5 demotes on the second call."""
        queue, scheduler = _make_queue()
        process = FakeProcess(1)
        queue.enqueue(process)  # type: ignore[arg-type]
        queue.manage_time_slice(process, SHORT_BURST)  # type: ignore[arg-type]
        queue.manage_time_slice(process, LONG_BURST)  # type: ignore[arg-type]
        assert queue.is_empty()
        assert queue.quantum_clock == 0
        assert scheduler.calls == [(queue, process, SchedulerInterrupt.LOWER_PRIORITY)]

    def test_exact_quantum_demotes(self) -> None:
        """Reaching the quantum exactly is enough to expire it."""
        queue, scheduler = _make_queue()
        process = FakeProcess(1)
        queue.enqueue(process)  # type: ignore[arg-type]
        queue.manage_time_slice(process, QUANTUM)  # type: ignore[arg-type]
        assert queue.quantum_clock == 0
        assert len(scheduler.calls) == 1

    def test_expiry_removes_head_only(self) -> None:
        """Demotion removes the head and leaves the rest in order."""
        queue, _ = _make_queue()
        first, second = FakeProcess(1), FakeProcess(2)
        queue.enqueue(first)  # type: ignore[arg-type]
        queue.enqueue(second)  # type: ignore[arg-type]
        queue.manage_time_slice(first, QUANTUM)  # type: ignore[arg-type]
        assert queue.processes == [second]

    def test_state_changed_resets_clock_without_interrupt(self) -> None:
        """A process that changed state resets the clock and is not demoted."""
        queue, scheduler = _make_queue()
        process = FakeProcess(1)
        queue.enqueue(process)  # type: ignore[arg-type]
        queue.manage_time_slice(process, LONG_BURST)  # type: ignore[arg-type]
        process.state_changed = True
        queue.manage_time_slice(process, LONG_BURST)  # type: ignore[arg-type]
        assert queue.quantum_clock == 0
        assert queue.peek() is process
        assert scheduler.calls == []

    def test_clock_stays_below_quantum(self) -> None:
        """After every call the clock is strictly below the quantum."""
        queue, _ = _make_queue()
        for burst in (1, 3, 7, 2, 5, 4, 4, 1):
            process = queue.peek() or queue.enqueue(FakeProcess(burst))  # type: ignore[arg-type]
            queue.manage_time_slice(process, burst)
            assert 0 <= queue.quantum_clock < QUANTUM


class TestWork:
    """Verify do_cpu_work and do_blocking_work."""

    def test_cpu_work_runs_head(self) -> None:
        """CPU work executes the head and charges the time slice."""
        queue, _ = _make_queue()
        head, tail = FakeProcess(1), FakeProcess(2)
        queue.enqueue(head)  # type: ignore[arg-type]
        queue.enqueue(tail)  # type: ignore[arg-type]
        queue.do_cpu_work(SHORT_BURST)
        assert head.cpu_bursts == [SHORT_BURST]
        assert tail.cpu_bursts == []
        assert queue.quantum_clock == SHORT_BURST

    def test_blocking_work_runs_head(self) -> None:
        """Blocking work executes the head's blocking burst."""
        queue, _ = _make_queue(queue_type=QueueType.BLOCKING_QUEUE)
        head = FakeProcess(1)
        queue.enqueue(head)  # type: ignore[arg-type]
        queue.do_blocking_work(SHORT_BURST)
        assert head.blocking_bursts == [SHORT_BURST]
        assert head.cpu_bursts == []

    def test_cpu_work_demotes_after_quantum(self) -> None:
        """Repeated CPU work eventually expires the quantum."""
        queue, scheduler = _make_queue()
        process = FakeProcess(1)
        queue.enqueue(process)  # type: ignore[arg-type]
        queue.do_cpu_work(SHORT_BURST)
        queue.do_cpu_work(LONG_BURST)
        assert scheduler.calls == [(queue, process, SchedulerInterrupt.LOWER_PRIORITY)]

    def test_cpu_work_on_empty_queue_raises(self) -> None:
        """Working an empty queue is a caller error."""
        queue, _ = _make_queue()
        with pytest.raises(RuntimeError, match="Cannot do CPU work"):
            queue.do_cpu_work(SHORT_BURST)

    def test_blocking_work_on_empty_queue_raises(self) -> None:
        """Blocking work on an empty queue is a caller error."""
        queue, _ = _make_queue(queue_type=QueueType.BLOCKING_QUEUE)
        with pytest.raises(RuntimeError, match="Cannot do blocking work"):
            queue.do_blocking_work(SHORT_BURST)


class TestEmitInterrupt:
    """Verify search-and-remove plus forwarding."""

    def test_blocked_removes_and_forwards(self) -> None:
        """PROCESS_BLOCKED removes the process and notifies the scheduler."""
        queue, scheduler = _make_queue()
        process = FakeProcess(1)
        queue.enqueue(process)  # type: ignore[arg-type]
        queue.emit_interrupt(process, SchedulerInterrupt.PROCESS_BLOCKED)  # type: ignore[arg-type]
        assert queue.is_empty()
        assert scheduler.calls == [(queue, process, SchedulerInterrupt.PROCESS_BLOCKED)]

    def test_ready_removes_and_forwards(self) -> None:
        """PROCESS_READY removes the process and notifies the scheduler."""
        queue, scheduler = _make_queue(queue_type=QueueType.BLOCKING_QUEUE)
        process = FakeProcess(1)
        queue.enqueue(process)  # type: ignore[arg-type]
        queue.emit_interrupt(process, SchedulerInterrupt.PROCESS_READY)  # type: ignore[arg-type]
        assert queue.is_empty()
        assert scheduler.calls == [(queue, process, SchedulerInterrupt.PROCESS_READY)]

    def test_removes_from_middle(self) -> None:
        """The source is found by identity, not just at the head."""
        queue, _ = _make_queue()
        procs = [FakeProcess(i) for i in range(THREE_PROCESSES)]
        for p in procs:
            queue.enqueue(p)  # type: ignore[arg-type]
        queue.emit_interrupt(procs[1], SchedulerInterrupt.PROCESS_BLOCKED)  # type: ignore[arg-type]
        assert queue.processes == [procs[0], procs[2]]

    def test_forwards_even_when_absent(self) -> None:
        """A process not in the queue is still reported to the scheduler."""
        queue, scheduler = _make_queue()
        present = FakeProcess(1)
        stranger = FakeProcess(2)
        queue.enqueue(present)  # type: ignore[arg-type]
        queue.emit_interrupt(stranger, SchedulerInterrupt.PROCESS_BLOCKED)  # type: ignore[arg-type]
        assert queue.processes == [present]
        assert scheduler.calls == [(queue, stranger, SchedulerInterrupt.PROCESS_BLOCKED)]

    def test_lower_priority_is_not_forwarded(self) -> None:
        """Other interrupt kinds remove the process but are not forwarded."""
        queue, scheduler = _make_queue()
        process = FakeProcess(1)
        queue.enqueue(process)  # type: ignore[arg-type]
        queue.emit_interrupt(process, SchedulerInterrupt.LOWER_PRIORITY)  # type: ignore[arg-type]
        assert queue.is_empty()
        assert scheduler.calls == []

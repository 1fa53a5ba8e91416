"""Process queue — one priority level of a multilevel feedback queue.

Each level of the MLFQ is a plain FIFO of processes with a fixed time
**quantum**.  The queue gives CPU (or I/O) time to whichever process is
at its head and keeps a **quantum clock** of how much time that process
has had so far.  When the clock reaches the quantum, the process is
removed and handed back to the scheduler with a ``LOWER_PRIORITY``
interrupt.

The queue only *reports*; it never decides where a process goes next.
That is the scheduler's job.

Two removal paths exist on purpose:

- **Quantum expiry** always removes the head (the process that just
  ran), so a plain ``popleft`` is enough.
- **emit_interrupt** searches by identity, because the process that
  blocked or woke up is not guaranteed to be at the head.

Time-slice state machine::

    accumulating ──(clock >= quantum)──→ expired → reset, demote head
         ↑                                  │
         └──────────────────────────────────┘
    (state changed this tick → reset, no interrupt)
"""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

from py_mlfq.interrupts import QueueType, SchedulerInterrupt

if TYPE_CHECKING:
    from py_mlfq.interrupts import InterruptHandler
    from py_mlfq.process import Process

# Interrupts a queue forwards from its processes to the scheduler
_FORWARDED = frozenset({SchedulerInterrupt.PROCESS_BLOCKED, SchedulerInterrupt.PROCESS_READY})


class ProcessQueue:
    """A FIFO of processes sharing one priority level and quantum.

    The queue holds a back-reference to its scheduler, used for nothing
    but delivering interrupts.  Delivery is fire-and-forget: the queue
    never learns whether the scheduler managed to place the process.
    """

    def __init__(
        self,
        scheduler: InterruptHandler,
        *,
        quantum: int,
        priority_level: int,
        queue_type: QueueType,
    ) -> None:
        """Create an empty queue.

        Args:
            scheduler: Receives the interrupts this queue raises.
            quantum: Time a process may run here before being demoted.
            priority_level: Lower numbers are scheduled first.
            queue_type: Whether this is a CPU or a blocking queue.

        Raises:
            ValueError: If the quantum is not positive or the level is negative.

        """
        if quantum <= 0:
            msg = f"Quantum must be positive, got {quantum}"
            raise ValueError(msg)
        if priority_level < 0:
            msg = f"Priority level must be non-negative, got {priority_level}"
            raise ValueError(msg)
        self._scheduler = scheduler
        self._quantum = quantum
        self._priority_level = priority_level
        self._queue_type = queue_type
        self._quantum_clock = 0
        self._processes: deque[Process] = deque()

    @property
    def priority_level(self) -> int:
        """Return this queue's priority level (lower = higher priority)."""
        return self._priority_level

    @property
    def queue_type(self) -> QueueType:
        """Return whether this is a CPU or blocking queue."""
        return self._queue_type

    @property
    def quantum(self) -> int:
        """Return the time slice granted to each process."""
        return self._quantum

    @property
    def quantum_clock(self) -> int:
        """Return the time the head process has had since the last reset."""
        return self._quantum_clock

    @property
    def processes(self) -> list[Process]:
        """Return a snapshot of the queued processes, head first."""
        return list(self._processes)

    def __len__(self) -> int:
        """Return the number of queued processes."""
        return len(self._processes)

    def __contains__(self, process: object) -> bool:
        """Return True if *process* (by identity) is queued here."""
        return any(p is process for p in self._processes)

    def enqueue(self, process: Process) -> Process:
        """Append *process* to the tail and adopt it as this queue's child.

        Always succeeds; keeping a process out of a queue it is already
        in is the scheduler's job (see ``__contains__``).

        Returns:
            The process that was enqueued.

        """
        self._processes.append(process)
        process.set_parent_queue(self)
        return process

    def dequeue(self) -> Process | None:
        """Remove and return the head, or None if the queue is empty."""
        if not self._processes:
            return None
        return self._processes.popleft()

    def peek(self) -> Process | None:
        """Return the head without removing it, or None if empty."""
        if not self._processes:
            return None
        return self._processes[0]

    def is_empty(self) -> bool:
        """Return True if no processes are queued."""
        return not self._processes

    def drain(self) -> list[Process]:
        """Remove every process (head first) and reset the quantum clock.

        Only the scheduler calls this, when it moves a whole level at
        once.  No interrupts are raised.
        """
        drained = list(self._processes)
        self._processes.clear()
        self._quantum_clock = 0
        return drained

    def manage_time_slice(self, current_process: Process, elapsed: int) -> None:
        """Charge *elapsed* time to *current_process* and demote it if needed.

        If the process changed state while running (finished, blocked,
        woke up), it is no longer this queue's concern: the clock is
        reset and nothing else happens.  Otherwise the clock advances,
        and once it reaches the quantum the head is removed and handed
        to the scheduler with ``LOWER_PRIORITY``.

        Args:
            current_process: The process that just ran (always the head).
            elapsed: Time it was given this tick.

        """
        if current_process.state_changed:
            self._quantum_clock = 0
            return
        self._quantum_clock += elapsed
        if self._quantum_clock >= self._quantum:
            self._quantum_clock = 0
            self.dequeue()
            self._scheduler.handle_interrupt(
                self, current_process, SchedulerInterrupt.LOWER_PRIORITY
            )
        # Below the quantum: keep accumulating

    def do_cpu_work(self, elapsed: int) -> None:
        """Run the head process on the CPU for *elapsed* time.

        Raises:
            RuntimeError: If the queue is empty.

        """
        process = self._require_head("CPU")
        process.execute_process(elapsed)
        self.manage_time_slice(process, elapsed)

    def do_blocking_work(self, elapsed: int) -> None:
        """Advance the head process's I/O wait by *elapsed* time.

        Raises:
            RuntimeError: If the queue is empty.

        """
        process = self._require_head("blocking")
        process.execute_blocking_process(elapsed)
        self.manage_time_slice(process, elapsed)

    def emit_interrupt(self, source: Process, interrupt: SchedulerInterrupt) -> None:
        """Remove *source* and forward blocked/ready interrupts to the scheduler.

        The process is located by identity anywhere in the queue.  The
        interrupt is forwarded even if the process was not found here;
        any kind other than ``PROCESS_BLOCKED`` or ``PROCESS_READY`` is
        ignored.

        Args:
            source: The process raising the interrupt.
            interrupt: Why it is leaving this queue.

        """
        for i, proc in enumerate(self._processes):
            if proc is source:
                del self._processes[i]
                break
        if interrupt in _FORWARDED:
            self._scheduler.handle_interrupt(self, source, interrupt)

    def _require_head(self, kind: str) -> Process:
        """Return the head process or raise if there is nothing to run."""
        process = self.peek()
        if process is None:
            msg = (
                f"Cannot do {kind} work: {self._queue_type} "
                f"at level {self._priority_level} is empty"
            )
            raise RuntimeError(msg)
        return process

    def __repr__(self) -> str:
        """Return a debug-friendly representation."""
        return (
            f"ProcessQueue(level={self._priority_level}, type={self._queue_type}, "
            f"quantum={self._quantum}, size={len(self._processes)})"
        )

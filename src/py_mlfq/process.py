"""Simulated process — a bundle of CPU work and I/O waiting.

A process owes the system two kinds of time:

- **CPU time** — work it needs the processor for.
- **Blocking time** — time it must spend waiting on I/O first.

Each tick, the queue at the head of which the process sits calls one of
its burst methods.  If the burst changes what the process is doing
(it blocks, wakes up, or finishes), the process raises its
``state_changed`` flag so the queue stops normal quantum accounting.

A process only holds a *weak* reference to the queue that currently
owns it.  The queue owns the process, never the other way round.

Lifecycle::

    CPU queue ──(blocking time owed)──→ blocking queue
        ↑                                    │
        └────────(blocking time paid)────────┘
    CPU queue ──(CPU time paid)──→ finished
"""

from __future__ import annotations

import weakref
from itertools import count
from typing import TYPE_CHECKING

from py_mlfq.interrupts import SchedulerInterrupt

if TYPE_CHECKING:
    from random import Random

    from py_mlfq.queue import ProcessQueue

MAX_CPU_TIME = 1000
MAX_BLOCKING_TIME = 100

_pid_counter = count(start=1)


class Process:
    """A simulated process with CPU and blocking work remaining."""

    def __init__(
        self,
        *,
        cpu_time_needed: int,
        blocking_time_needed: int = 0,
        name: str = "",
    ) -> None:
        """Create a process that is not yet in any queue.

        Args:
            cpu_time_needed: CPU time the process must receive to finish.
            blocking_time_needed: I/O time it must wait out before running.
            name: Human-readable label (defaults to ``proc-<pid>``).

        Raises:
            ValueError: If either time is negative.

        """
        if cpu_time_needed < 0 or blocking_time_needed < 0:
            msg = (
                f"Process times must be non-negative, got cpu={cpu_time_needed} "
                f"blocking={blocking_time_needed}"
            )
            raise ValueError(msg)
        self._pid: int = next(_pid_counter)
        self._name: str = name or f"proc-{self._pid}"
        self._cpu_time_needed = cpu_time_needed
        self._blocking_time_needed = blocking_time_needed
        self._cpu_time_used = 0
        self._blocking_time_used = 0
        self._state_changed = False
        self._queue_ref: weakref.ref[ProcessQueue] | None = None
        self.completed_at: int | None = None

    @classmethod
    def random(cls, rng: Random, *, blocking: bool = False) -> Process:
        """Create a process with a random workload.

        CPU time is drawn from ``0..MAX_CPU_TIME``; blocking processes
        also owe ``0..MAX_BLOCKING_TIME`` of I/O.
        """
        cpu = rng.randint(0, MAX_CPU_TIME)
        io = rng.randint(0, MAX_BLOCKING_TIME) if blocking else 0
        return cls(cpu_time_needed=cpu, blocking_time_needed=io)

    @property
    def pid(self) -> int:
        """Return the unique process identifier."""
        return self._pid

    @property
    def name(self) -> str:
        """Return the process name."""
        return self._name

    @property
    def cpu_time_needed(self) -> int:
        """Return the CPU time still owed."""
        return self._cpu_time_needed

    @property
    def blocking_time_needed(self) -> int:
        """Return the blocking time still owed."""
        return self._blocking_time_needed

    @property
    def cpu_time_used(self) -> int:
        """Return the CPU time received so far."""
        return self._cpu_time_used

    @property
    def blocking_time_used(self) -> int:
        """Return the time spent blocked so far."""
        return self._blocking_time_used

    @property
    def state_changed(self) -> bool:
        """Return True if the last burst changed this process's status."""
        return self._state_changed

    @property
    def parent_queue(self) -> ProcessQueue | None:
        """Return the queue currently holding this process, if still alive."""
        if self._queue_ref is None:
            return None
        return self._queue_ref()

    def set_parent_queue(self, queue: ProcessQueue) -> None:
        """Record *queue* as this process's current home (weakly)."""
        self._queue_ref = weakref.ref(queue)

    def is_finished(self) -> bool:
        """Return True once all CPU and blocking time has been paid."""
        return self._cpu_time_needed == 0 and self._blocking_time_needed == 0

    def execute_process(self, elapsed: int) -> None:
        """Run on the CPU for up to *elapsed* time.

        A process that still owes blocking time cannot run: it asks its
        queue to move it to the blocking queue instead.

        Raises:
            RuntimeError: If the process must block but has no queue.

        """
        self._state_changed = False
        if self._blocking_time_needed > 0:
            self._interrupt(SchedulerInterrupt.PROCESS_BLOCKED)
            self._state_changed = True
            return
        burst = min(elapsed, self._cpu_time_needed)
        self._cpu_time_needed -= burst
        self._cpu_time_used += burst
        if self._cpu_time_needed == 0:
            self._state_changed = True

    def execute_blocking_process(self, elapsed: int) -> None:
        """Wait on I/O for up to *elapsed* time; wake up when done.

        Raises:
            RuntimeError: If the process wakes up but has no queue.

        """
        self._state_changed = False
        burst = min(elapsed, self._blocking_time_needed)
        self._blocking_time_needed -= burst
        self._blocking_time_used += burst
        if self._blocking_time_needed == 0:
            self._interrupt(SchedulerInterrupt.PROCESS_READY)
            self._state_changed = True

    def _interrupt(self, interrupt: SchedulerInterrupt) -> None:
        """Raise *interrupt* on the parent queue."""
        queue = self.parent_queue
        if queue is None:
            msg = f"Cannot raise {interrupt}: process {self._pid} has no parent queue"
            raise RuntimeError(msg)
        queue.emit_interrupt(self, interrupt)

    def __repr__(self) -> str:
        """Return a debug-friendly representation."""
        return (
            f"Process(pid={self._pid}, name={self._name!r}, "
            f"cpu={self._cpu_time_needed}, blocking={self._blocking_time_needed})"
        )

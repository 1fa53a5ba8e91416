"""MLFQ scheduler — owns the queues and drives simulated time.

The scheduler keeps one CPU queue per priority level plus a single
blocking queue for processes waiting on I/O.  Each tick it:

1. Gives the blocking queue's head process some I/O time (if any).
2. Gives CPU time to the head of the highest-priority non-empty CPU
   queue.
3. Retires a CPU process that has finished all of its work.
4. Optionally boosts every process back to the top level.

Queues report back through ``handle_interrupt``; the scheduler alone
decides where a process goes:

- ``LOWER_PRIORITY`` from a CPU queue → one level down (the bottom
  level round-robins).  From the blocking queue → back of the blocking
  queue.
- ``PROCESS_BLOCKED`` → the blocking queue.
- ``PROCESS_READY`` → the top CPU queue.

Time is simulated: ``run_tick`` takes the elapsed time as an argument,
so a run is fully deterministic.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from py_mlfq.config import SchedulerConfig
from py_mlfq.interrupts import InterruptRecord, QueueType, SchedulerInterrupt
from py_mlfq.logging import Logger, LogLevel
from py_mlfq.queue import ProcessQueue

if TYPE_CHECKING:
    from py_mlfq.process import Process


class MLFQScheduler:
    """A multilevel feedback queue scheduler over simulated time."""

    def __init__(
        self,
        *,
        config: SchedulerConfig | None = None,
        logger: Logger | None = None,
    ) -> None:
        """Create the CPU queues and the blocking queue.

        Args:
            config: Scheduler settings (defaults to ``SchedulerConfig()``).
            logger: Where events are recorded (a fresh ``Logger`` if None).

        """
        self._config = config if config is not None else SchedulerConfig()
        self._logger = logger if logger is not None else Logger()
        self._cpu_queues: list[ProcessQueue] = [
            ProcessQueue(
                self,
                quantum=self._config.quantum_for(level),
                priority_level=level,
                queue_type=QueueType.CPU_QUEUE,
            )
            for level in range(self._config.priority_levels)
        ]
        self._blocking_queue = ProcessQueue(
            self,
            quantum=self._config.blocking_quantum,
            priority_level=0,
            queue_type=QueueType.BLOCKING_QUEUE,
        )
        self._tick_count = 0
        self._clock = 0
        self._finished: list[Process] = []
        self._interrupt_log: list[InterruptRecord] = []

    @property
    def config(self) -> SchedulerConfig:
        """Return the scheduler settings."""
        return self._config

    @property
    def logger(self) -> Logger:
        """Return the simulation log."""
        return self._logger

    @property
    def tick_count(self) -> int:
        """Return the number of ticks run so far."""
        return self._tick_count

    @property
    def clock(self) -> int:
        """Return the total simulated time elapsed."""
        return self._clock

    @property
    def cpu_queues(self) -> list[ProcessQueue]:
        """Return the CPU queues, highest priority first."""
        return list(self._cpu_queues)

    @property
    def blocking_queue(self) -> ProcessQueue:
        """Return the blocking (I/O) queue."""
        return self._blocking_queue

    @property
    def finished(self) -> list[Process]:
        """Return processes that completed, in completion order."""
        return list(self._finished)

    @property
    def interrupt_log(self) -> list[InterruptRecord]:
        """Return every interrupt received, oldest first."""
        return list(self._interrupt_log)

    def cpu_queue(self, level: int) -> ProcessQueue:
        """Return the CPU queue at *level*.

        Raises:
            IndexError: If the level does not exist.

        """
        if not 0 <= level < len(self._cpu_queues):
            msg = f"No priority level {level} (have {len(self._cpu_queues)})"
            raise IndexError(msg)
        return self._cpu_queues[level]

    def all_queues_empty(self) -> bool:
        """Return True if no process is waiting anywhere."""
        return self._blocking_queue.is_empty() and all(q.is_empty() for q in self._cpu_queues)

    def add_new_process(self, process: Process) -> Process:
        """Admit *process* at the highest priority level."""
        self._cpu_queues[0].enqueue(process)
        self._log(f"Admitted process {process.pid} ({process.name})")
        return process

    def handle_interrupt(
        self,
        queue: ProcessQueue,
        process: Process,
        interrupt: SchedulerInterrupt,
    ) -> None:
        """Move *process*, handed back by *queue*, to where it belongs.

        Args:
            queue: The queue that raised the interrupt.
            process: The process to relocate (no longer in *queue*).
            interrupt: Why it was handed back.

        """
        self._interrupt_log.append(
            InterruptRecord(
                tick=self._tick_count,
                priority_level=queue.priority_level,
                queue_type=queue.queue_type,
                pid=process.pid,
                interrupt=interrupt,
            )
        )
        match interrupt:
            case SchedulerInterrupt.PROCESS_BLOCKED:
                if self._place(self._blocking_queue, process):
                    self._log(f"Process {process.pid} blocked on I/O", source="interrupt")
            case SchedulerInterrupt.PROCESS_READY:
                if self._place(self._cpu_queues[0], process):
                    self._log(f"Process {process.pid} ready, back to level 0", source="interrupt")
            case SchedulerInterrupt.LOWER_PRIORITY:
                if queue.queue_type is QueueType.CPU_QUEUE:
                    level = min(queue.priority_level + 1, len(self._cpu_queues) - 1)
                    if self._place(self._cpu_queues[level], process):
                        self._log(
                            f"Process {process.pid} quantum expired, level "
                            f"{queue.priority_level} -> {level}",
                            level=LogLevel.DEBUG,
                            source="interrupt",
                        )
                elif self._place(self._blocking_queue, process):
                    self._log(
                        f"Process {process.pid} blocking quantum expired, requeued",
                        level=LogLevel.DEBUG,
                        source="interrupt",
                    )

    def run_tick(self, elapsed: int | None = None) -> dict[str, int | bool | None]:
        """Advance simulated time by one tick.

        Args:
            elapsed: Time granted this tick (defaults to ``config.tick_length``).

        Returns:
            Dict with the tick number, clock, CPU level worked (None if
            idle), whether blocking work ran, and how many interrupts and
            completions happened this tick.

        Raises:
            ValueError: If *elapsed* is not positive.

        """
        if elapsed is None:
            elapsed = self._config.tick_length
        if elapsed <= 0:
            msg = f"Elapsed time must be positive, got {elapsed}"
            raise ValueError(msg)

        self._tick_count += 1
        self._clock += elapsed
        interrupts_before = len(self._interrupt_log)
        finished_before = len(self._finished)

        blocking_worked = not self._blocking_queue.is_empty()
        if blocking_worked:
            self._blocking_queue.do_blocking_work(elapsed)

        cpu_level: int | None = None
        queue = self._highest_ready_queue()
        if queue is not None:
            cpu_level = queue.priority_level
            process = queue.peek()
            queue.do_cpu_work(elapsed)
            if process is not None and process.is_finished() and queue.peek() is process:
                queue.dequeue()
                self._retire(process)

        interval = self._config.boost_interval
        if interval and self._tick_count % interval == 0:
            self.boost()

        return {
            "tick": self._tick_count,
            "clock": self._clock,
            "cpu_level": cpu_level,
            "blocking_worked": blocking_worked,
            "interrupts": len(self._interrupt_log) - interrupts_before,
            "finished": len(self._finished) - finished_before,
        }

    def run(self, *, max_ticks: int | None = None) -> int:
        """Tick until every queue is empty or *max_ticks* is reached.

        Returns:
            The number of ticks run.

        """
        ticks = 0
        while not self.all_queues_empty():
            if max_ticks is not None and ticks >= max_ticks:
                self._log(f"Stopped after {ticks} ticks", level=LogLevel.WARNING)
                return ticks
            self.run_tick()
            ticks += 1
        self._log("Idle mode")
        return ticks

    def boost(self) -> int:
        """Move every CPU process back to the top level (anti-starvation).

        Returns:
            The number of processes moved.

        """
        top = self._cpu_queues[0]
        moved = 0
        for queue in self._cpu_queues[1:]:
            for process in queue.drain():
                top.enqueue(process)
                moved += 1
        if moved:
            self._log(f"Priority boost moved {moved} processes to level 0")
        return moved

    def snapshot(self) -> dict[str, object]:
        """Return a JSON-friendly view of every queue and the clock."""
        return {
            "tick": self._tick_count,
            "clock": self._clock,
            "cpu_queues": [_describe(q) for q in self._cpu_queues],
            "blocking_queue": _describe(self._blocking_queue),
            "finished": [p.pid for p in self._finished],
        }

    # -- Private helpers ------------------------------------------------------

    def _highest_ready_queue(self) -> ProcessQueue | None:
        """Return the first non-empty CPU queue, or None."""
        for queue in self._cpu_queues:
            if not queue.is_empty():
                return queue
        return None

    def _place(self, target: ProcessQueue, process: Process) -> bool:
        """Enqueue *process* on *target* unless it is already there.

        Returns:
            True if the process was enqueued, False for a repeat notification.

        """
        if process in target:
            self._log(
                f"Process {process.pid} already in {target.queue_type}"
                f"[{target.priority_level}], ignoring repeat interrupt",
                level=LogLevel.DEBUG,
                source="interrupt",
            )
            return False
        target.enqueue(process)
        return True

    def _retire(self, process: Process) -> None:
        """Record *process* as finished at the current clock."""
        process.completed_at = self._clock
        self._finished.append(process)
        self._log(f"Process {process.pid} finished at t={self._clock}")

    def _log(
        self,
        message: str,
        *,
        level: LogLevel = LogLevel.INFO,
        source: str = "scheduler",
    ) -> None:
        """Write *message* to the simulation log at the current tick."""
        self._logger.log(level, message, source=source, tick=self._tick_count)


def _describe(queue: ProcessQueue) -> dict[str, object]:
    """Summarise one queue for ``snapshot``."""
    return {
        "level": queue.priority_level,
        "type": str(queue.queue_type),
        "quantum": queue.quantum,
        "quantum_clock": queue.quantum_clock,
        "pids": [p.pid for p in queue.processes],
    }

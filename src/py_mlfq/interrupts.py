"""Scheduler interrupts — how a queue asks its scheduler for help.

A queue never decides where a process goes next.  When something
happens that the queue cannot deal with on its own, it raises an
**interrupt** to the scheduler that owns it:

- **LOWER_PRIORITY** — the process used up this level's quantum and
  should be demoted.
- **PROCESS_BLOCKED** — the process needs to wait for I/O.
- **PROCESS_READY** — the process finished waiting and can run again.

The set of interrupts is closed, so the scheduler can handle every
kind exhaustively with a ``match`` statement.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from py_mlfq.process import Process
    from py_mlfq.queue import ProcessQueue


class SchedulerInterrupt(StrEnum):
    """Reasons a queue hands a process back to its scheduler."""

    LOWER_PRIORITY = "LOWER_PRIORITY"
    PROCESS_BLOCKED = "PROCESS_BLOCKED"
    PROCESS_READY = "PROCESS_READY"


class QueueType(StrEnum):
    """Distinguish ready (CPU) queues from the blocking (I/O) queue."""

    CPU_QUEUE = "CPU_QUEUE"
    BLOCKING_QUEUE = "BLOCKING_QUEUE"


class InterruptHandler(Protocol):
    """The one capability a queue needs from its scheduler."""

    def handle_interrupt(
        self,
        queue: ProcessQueue,
        process: Process,
        interrupt: SchedulerInterrupt,
    ) -> None:
        """Relocate *process*, which *queue* has handed back for *interrupt*."""
        ...  # pragma: no cover


@dataclass(frozen=True)
class InterruptRecord:
    """An interrupt as the scheduler saw it, stored by value.

    Attributes:
        tick: Scheduler tick during which the interrupt arrived.
        priority_level: Level of the queue that raised it.
        queue_type: Type of the queue that raised it.
        pid: The process being relocated.
        interrupt: Why the process was handed back.

    """

    tick: int
    priority_level: int
    queue_type: QueueType
    pid: int
    interrupt: SchedulerInterrupt

    def __str__(self) -> str:
        """Format as ``tick N: pid P LOWER_PRIORITY from CPU_QUEUE[0]``."""
        return (
            f"tick {self.tick}: pid {self.pid} {self.interrupt} "
            f"from {self.queue_type}[{self.priority_level}]"
        )

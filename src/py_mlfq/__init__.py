"""py-mlfq — a tick-driven multilevel feedback queue simulator.

Re-exports public symbols so callers can write::

    from py_mlfq import MLFQScheduler, Process, ProcessQueue
"""

from py_mlfq.config import SchedulerConfig
from py_mlfq.interrupts import InterruptHandler, InterruptRecord, QueueType, SchedulerInterrupt
from py_mlfq.logging import LogEntry, Logger, LogLevel
from py_mlfq.process import Process
from py_mlfq.queue import ProcessQueue
from py_mlfq.scheduler import MLFQScheduler

__all__ = [
    "InterruptHandler",
    "InterruptRecord",
    "LogEntry",
    "LogLevel",
    "Logger",
    "MLFQScheduler",
    "Process",
    "ProcessQueue",
    "QueueType",
    "SchedulerConfig",
    "SchedulerInterrupt",
]

"""Command-line runner — simulate a random workload to completion.

The runner builds a scheduler, fills it with randomly sized processes
(some of which start by waiting on I/O), ticks until every queue is
empty, and prints a summary.

The helpers (``build_parser``, ``build_workload``, ``format_summary``)
are pure and testable.  ``main()`` is the I/O entrypoint.
"""

from __future__ import annotations

import argparse
from random import Random
from typing import TYPE_CHECKING

from py_mlfq.config import (
    DEFAULT_BOOST_INTERVAL,
    DEFAULT_PRIORITY_LEVELS,
    DEFAULT_TICK_LENGTH,
    SchedulerConfig,
)
from py_mlfq.logging import LogLevel
from py_mlfq.process import Process
from py_mlfq.scheduler import MLFQScheduler

if TYPE_CHECKING:
    from collections.abc import Sequence

DEFAULT_PROCESS_COUNT = 10
DEFAULT_BLOCKING_RATIO = 0.3

_RULE_WIDTH = 40


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for ``py-mlfq``."""
    parser = argparse.ArgumentParser(
        prog="py-mlfq",
        description="Run a multilevel feedback queue simulation.",
    )
    parser.add_argument("--processes", type=int, default=DEFAULT_PROCESS_COUNT)
    parser.add_argument(
        "--blocking-ratio",
        type=float,
        default=DEFAULT_BLOCKING_RATIO,
        help="fraction of processes that start by waiting on I/O",
    )
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--levels", type=int, default=DEFAULT_PRIORITY_LEVELS)
    parser.add_argument("--tick-length", type=int, default=DEFAULT_TICK_LENGTH)
    parser.add_argument(
        "--boost-interval",
        type=int,
        default=DEFAULT_BOOST_INTERVAL,
        help="ticks between priority boosts (0 disables)",
    )
    parser.add_argument("--max-ticks", type=int, default=None)
    parser.add_argument("-v", "--verbose", action="store_true", help="print the full log")
    return parser


def build_workload(count: int, *, blocking_ratio: float, rng: Random) -> list[Process]:
    """Create *count* random processes.

    Args:
        count: Number of processes.
        blocking_ratio: Probability that a process owes I/O time first.
        rng: Source of randomness (seed it for reproducible runs).

    Raises:
        ValueError: If the count is negative or the ratio is outside 0..1.

    """
    if count < 0:
        msg = f"Process count must be non-negative, got {count}"
        raise ValueError(msg)
    if not 0.0 <= blocking_ratio <= 1.0:
        msg = f"Blocking ratio must be between 0 and 1, got {blocking_ratio}"
        raise ValueError(msg)
    return [Process.random(rng, blocking=rng.random() < blocking_ratio) for _ in range(count)]


def format_summary(scheduler: MLFQScheduler, ticks: int) -> str:
    """Summarise a finished (or stopped) run.

    Args:
        scheduler: The scheduler after running.
        ticks: Ticks run by ``scheduler.run``.

    Returns:
        A multi-line report of timing, interrupts, and completions.

    """
    counts: dict[str, int] = {}
    for record in scheduler.interrupt_log:
        counts[str(record.interrupt)] = counts.get(str(record.interrupt), 0) + 1
    rule = "-" * _RULE_WIDTH
    lines = [
        rule,
        f"ticks run:        {ticks}",
        f"simulated time:   {scheduler.clock}",
        f"finished:         {len(scheduler.finished)}",
        f"still queued:     {'no' if scheduler.all_queues_empty() else 'yes'}",
        rule,
    ]
    lines.extend(f"{kind:<18}{count}" for kind, count in sorted(counts.items()))
    if scheduler.finished:
        lines.append(rule)
        lines.extend(
            f"pid {p.pid:<5} cpu={p.cpu_time_used:<5} io={p.blocking_time_used:<4} "
            f"done at t={p.completed_at}"
            for p in scheduler.finished
        )
    return "\n".join(lines)


def main(argv: Sequence[str] | None = None) -> int:
    """Parse *argv*, run the simulation, and print the summary.

    Invalid settings exit with status 2, like any argparse error.

    Returns:
        Process exit code.

    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = SchedulerConfig(
            priority_levels=args.levels,
            tick_length=args.tick_length,
            boost_interval=args.boost_interval,
        )
        workload = build_workload(
            args.processes,
            blocking_ratio=args.blocking_ratio,
            rng=Random(args.seed),
        )
    except ValueError as e:
        parser.error(str(e))

    scheduler = MLFQScheduler(config=config)
    for process in workload:
        scheduler.add_new_process(process)
    ticks = scheduler.run(max_ticks=args.max_ticks)

    min_level = LogLevel.DEBUG if args.verbose else LogLevel.WARNING
    for entry in scheduler.logger.filter(min_level=min_level):
        print(entry)
    print(format_summary(scheduler, ticks))
    return 0

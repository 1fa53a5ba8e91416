"""Scheduler configuration — levels, quanta, and clock settings.

All tunables live in one frozen dataclass so a scheduler's shape is
fixed for its whole lifetime.  Quanta grow linearly with the level::

    quantum(level) = base_quantum + level * quantum_step

With the defaults that gives ``10, 30, 50`` for three CPU levels and a
blocking queue quantum of 50.

Values can also be read from a string mapping such as ``os.environ``,
using ``MLFQ_``-prefixed keys (``MLFQ_PRIORITY_LEVELS=4``).
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_PRIORITY_LEVELS = 3
DEFAULT_BASE_QUANTUM = 10
DEFAULT_QUANTUM_STEP = 20
DEFAULT_BLOCKING_QUANTUM = 50
DEFAULT_TICK_LENGTH = 1
DEFAULT_BOOST_INTERVAL = 0

ENV_PREFIX = "MLFQ_"


@dataclass(frozen=True)
class SchedulerConfig:
    """Immutable scheduler settings.

    Attributes:
        priority_levels: Number of CPU queues.
        base_quantum: Quantum of the top-priority queue.
        quantum_step: Quantum added per level below the top.
        blocking_quantum: Quantum of the blocking (I/O) queue.
        tick_length: Time given to a queue on each tick.
        boost_interval: Ticks between priority boosts (0 disables).

    """

    priority_levels: int = DEFAULT_PRIORITY_LEVELS
    base_quantum: int = DEFAULT_BASE_QUANTUM
    quantum_step: int = DEFAULT_QUANTUM_STEP
    blocking_quantum: int = DEFAULT_BLOCKING_QUANTUM
    tick_length: int = DEFAULT_TICK_LENGTH
    boost_interval: int = DEFAULT_BOOST_INTERVAL

    def __post_init__(self) -> None:
        """Reject settings the scheduler cannot run with.

        Raises:
            ValueError: If any setting is out of range.

        """
        positive = ("priority_levels", "base_quantum", "blocking_quantum", "tick_length")
        for name in positive:
            value = getattr(self, name)
            if value <= 0:
                msg = f"{name} must be positive, got {value}"
                raise ValueError(msg)
        for name in ("quantum_step", "boost_interval"):
            value = getattr(self, name)
            if value < 0:
                msg = f"{name} must be non-negative, got {value}"
                raise ValueError(msg)

    @property
    def quantums(self) -> tuple[int, ...]:
        """Return the quantum of every CPU level, top first."""
        return tuple(self.quantum_for(level) for level in range(self.priority_levels))

    def quantum_for(self, level: int) -> int:
        """Return the quantum for CPU queue *level*.

        Raises:
            IndexError: If the level does not exist.

        """
        if not 0 <= level < self.priority_levels:
            msg = f"No priority level {level} (have {self.priority_levels})"
            raise IndexError(msg)
        return self.base_quantum + level * self.quantum_step

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, str]) -> SchedulerConfig:
        """Build a config from ``MLFQ_*`` keys; missing keys keep defaults.

        Args:
            mapping: String key/value pairs, e.g. ``os.environ``.

        Raises:
            ValueError: If a value is not an integer or is out of range.

        """
        values: dict[str, int] = {}
        for field in fields(cls):
            key = ENV_PREFIX + field.name.upper()
            raw = mapping.get(key)
            if raw is None:
                continue
            try:
                values[field.name] = int(raw.strip())
            except ValueError:
                msg = f"{key} must be an integer, got {raw!r}"
                raise ValueError(msg) from None
        return cls(**values)

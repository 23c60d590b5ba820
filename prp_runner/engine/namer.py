"""Derive task identifiers and implementation branch names.

Branch names have the form ``<prefix>/<identifier>-<suffix>``. The suffix
generator is selected by :class:`~prp_runner.enums.BranchIdStrategy`:

    timestamp   Unix seconds. Two resolutions of the same PRP within one
                second produce the same branch name.
    monotonic   Nanosecond clock, forced strictly increasing within the
                process. Still all digits.
    uuid        12 random hex characters.
"""

import threading
import time
import uuid
from collections.abc import Callable

from prp_runner.enums import BranchIdStrategy
from prp_runner.models.domain import TaskReference


class MonotonicIdGenerator:
    """Nanosecond timestamps that never repeat or go backwards in one process."""

    def __init__(self, clock: Callable[[], int] = time.time_ns) -> None:
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def __call__(self) -> str:
        with self._lock:
            value = max(self._clock(), self._last + 1)
            self._last = value
            return str(value)


def timestamp_id(clock: Callable[[], float] = time.time) -> str:
    return str(int(clock()))


def uuid_id() -> str:
    return uuid.uuid4().hex[:12]


_monotonic = MonotonicIdGenerator()


class BranchNamer:
    """Builds branch names for PRP implementations.

    Example:
        >>> namer = BranchNamer(prefix="implement", strategy=BranchIdStrategy.TIMESTAMP)
        >>> namer.branch_name(TaskReference("PRPs/test-feature.md"))
        'implement/test-feature-1718000000'
    """

    def __init__(
        self,
        prefix: str = "implement",
        strategy: BranchIdStrategy = BranchIdStrategy.MONOTONIC,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        """Initialize the namer.

        Args:
            prefix: Leading path segment of every branch name
            strategy: Suffix generator to use when id_factory is not given
            id_factory: Explicit suffix generator, mainly for tests
        """
        self.prefix = prefix.strip("/")
        self.strategy = strategy
        self._next_id = id_factory or self._factory_for(strategy)

    @staticmethod
    def _factory_for(strategy: BranchIdStrategy) -> Callable[[], str]:
        if strategy == BranchIdStrategy.TIMESTAMP:
            return timestamp_id
        if strategy == BranchIdStrategy.UUID:
            return uuid_id
        return _monotonic

    @staticmethod
    def identifier(reference: TaskReference) -> str:
        return reference.identifier

    def branch_name(self, reference: TaskReference) -> str:
        return f"{self.prefix}/{reference.identifier}-{self._next_id()}"

"""Coordination of concurrent reads and writes on the resources of a node."""

from __future__ import annotations

import itertools
import threading
from collections import Counter, deque
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

INTERESTED = "interested"
PREPARED = "prepared"
ABORTED = "aborted"


@dataclass
class _Reader:
    working_set: frozenset[str]
    status: str = INTERESTED
    blocking: bool = False


@dataclass
class _Writer:
    optimistic: bool
    working_set: frozenset[str] = field(default_factory=frozenset)
    awaiting: int = 0


@dataclass(eq=False)
class _Ticket:
    reading: bool


class Coordinator:
    """Lets remote transactions read resources while local updates write them.

    At most one write is in progress at any time. Reads are keyed by small
    positive integers. A write announces its working set through
    fix_working_set_write: a pessimistic write waits for the readers of those
    resources to leave, an optimistic one aborts the readers that have not
    yet been confirmed and waits only for the prepared ones.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._readers: Counter[str] = Counter()
        self._reading: dict[int, _Reader] = {}
        self._writing: _Writer | None = None
        self._queue: deque[_Ticket] = deque()

    def _can_read(self, working_set: frozenset[str]) -> bool:
        return self._writing is None or working_set.isdisjoint(self._writing.working_set)

    def _has_turn(self, ticket: _Ticket) -> bool:
        # Queued readers keep their place; queued writers let later requests pass.
        for other in self._queue:
            if other is ticket:
                return True
            if other.reading:
                return False
        return True

    def _wait_turn(self, ticket: _Ticket, ready: Callable[[], bool]) -> None:
        self._queue.append(ticket)
        try:
            self._cond.wait_for(lambda: self._has_turn(ticket) and ready())
        finally:
            self._queue.remove(ticket)
            self._cond.notify_all()

    def _current_writer(self) -> _Writer:
        if self._writing is None:
            raise RuntimeError("no write in progress")
        return self._writing

    def request_read(self, working_set: Iterable[str]) -> int:
        """Start a read on the given resources and return its key."""
        ws = frozenset(working_set)
        with self._cond:
            if not self._can_read(ws):
                self._wait_turn(_Ticket(reading=True), lambda: self._can_read(ws))
            for resource in ws:
                self._readers[resource] += 1
            key = next(k for k in itertools.count(1) if k not in self._reading)
            self._reading[key] = _Reader(ws)
            return key

    def confirm_read(self, key: int) -> bool:
        """Mark the read as prepared; False if it is unknown or was aborted."""
        with self._cond:
            reader = self._reading.get(key)
            if reader is None or reader.status == ABORTED:
                return False
            reader.status = PREPARED
            return True

    def close_read(self, key: int) -> None:
        """Terminate the read with the given key, if it exists."""
        with self._cond:
            reader = self._reading.pop(key, None)
            if reader is None:
                return
            for resource in reader.working_set:
                self._readers[resource] -= 1
                if self._readers[resource] <= 0:
                    del self._readers[resource]
            if reader.blocking and self._writing is not None:
                self._writing.awaiting -= 1
            self._cond.notify_all()

    def request_write(self, optimistic: bool) -> None:
        """Wait until no other write is in progress and start a new one."""
        with self._cond:
            if self._writing is not None:
                self._wait_turn(_Ticket(reading=False), lambda: self._writing is None)
            self._writing = _Writer(optimistic=bool(optimistic))

    def fix_working_set_write(self, working_set: Iterable[str]) -> None:
        """Declare the resources the current write modifies, waiting as needed."""
        ws = frozenset(working_set)
        with self._cond:
            writer = self._current_writer()
            if writer.optimistic:
                self._start_optimistic(writer, ws)
            else:
                self._cond.wait_for(lambda: all(self._readers[r] == 0 for r in ws))
                writer.working_set = ws
            self._cond.notify_all()

    def _start_optimistic(self, writer: _Writer, ws: frozenset[str]) -> None:
        conflicting = {r for r in ws if self._readers[r] > 0}
        writer.working_set = ws
        for reader in self._reading.values():
            if reader.working_set.isdisjoint(conflicting):
                continue
            if reader.status != PREPARED:
                reader.status = ABORTED
            else:
                reader.blocking = True
                writer.awaiting += 1
        self._cond.wait_for(lambda: writer.awaiting <= 0)

    def confirm_write(self) -> None:
        """Release the resources of the current write, which stays in progress."""
        with self._cond:
            self._current_writer().working_set = frozenset()
            self._cond.notify_all()

    def close_write(self) -> None:
        """Terminate the current write."""
        with self._cond:
            self._writing = None
            self._cond.notify_all()
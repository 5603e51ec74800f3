import threading
from batchcodes.core.errors import CounterConflict
from batchcodes.modules.sequences.types import CounterKey, SequenceCounter, CounterFilter
from batchcodes.platform.ports.counter_store import SequenceCounterStore

class InMemorySequenceCounterStore(SequenceCounterStore):
    """Process-local counter rows.

    One lock guards the dict, but it is only held for a single get/insert/swap,
    never across an allocator's read-modify-write, so keys do not wait on each
    other beyond that.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._rows: dict[CounterKey, SequenceCounter] = {}

    async def get(self, key: CounterKey) -> SequenceCounter | None:
        with self._lock:
            return self._rows.get(key)

    async def create(self, counter: SequenceCounter) -> SequenceCounter:
        with self._lock:
            if counter.key in self._rows:
                raise CounterConflict(str(counter.key))
            self._rows[counter.key] = counter
            return counter

    async def compare_and_set(self, counter: SequenceCounter, expected_version: int) -> bool:
        with self._lock:
            stored = self._rows.get(counter.key)
            if stored is None or stored.version != expected_version:
                return False
            self._rows[counter.key] = counter
            return True

    async def list(self, flt: CounterFilter) -> list[SequenceCounter]:
        with self._lock:
            rows = [c for c in self._rows.values() if flt.matches(c)]
        rows.sort(key=lambda c: (c.key.period, c.key.combination.as_tuple()))
        rows = rows[flt.offset:]
        return rows[:flt.limit] if flt.limit is not None else rows

from typing import Protocol, runtime_checkable
from batchcodes.modules.sequences.types import CounterKey, SequenceCounter, CounterFilter

@runtime_checkable
class SequenceCounterStore(Protocol):
    """Storage of sequence counters, one row per (period, combination).

    Writes are conditional: ``create`` fails if the row exists and
    ``compare_and_set`` only applies when the stored version still equals the
    one the caller read. Neither blocks on other keys.
    """

    async def get(self, key: CounterKey) -> SequenceCounter | None: ...

    async def create(self, counter: SequenceCounter) -> SequenceCounter:
        """Insert a new row; ``CounterConflict`` if one exists for the key.

        Stores that link counters to dimension sets raise ``DimensionNotFound``
        when the combination is not registered.
        """
        ...

    async def compare_and_set(self, counter: SequenceCounter, expected_version: int) -> bool:
        """Replace the row for ``counter.key`` if its version is ``expected_version``.

        ``counter.version`` must already be the new version.
        """
        ...

    async def list(self, flt: CounterFilter) -> list[SequenceCounter]: ...

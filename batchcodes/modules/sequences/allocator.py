import asyncio
import logging
import random
from dataclasses import replace
from datetime import date, datetime
from batchcodes.core.errors import (
    AllocationFailed, CounterConflict, DimensionNotFound, SequenceExhausted, StoreContention,
)
from batchcodes.modules.codes.formatter import format_code
from batchcodes.modules.codes.types import DimensionCombination, Period
from batchcodes.modules.sequences import schemes
from batchcodes.modules.sequences.schemes import SequenceType
from batchcodes.modules.sequences.types import (
    Allocation, CounterKey, CounterStatus, CounterFilter, SequenceCounter,
)
from batchcodes.platform.ports.clock import ClockPort
from batchcodes.platform.ports.counter_store import SequenceCounterStore
from batchcodes.platform.ports.dimension_registry import DimensionRegistry

log = logging.getLogger(__name__)

class SequenceAllocator:
    """Hands out batch codes, one counter per (period, dimension combination).

    The counter update is an optimistic read-modify-write: read the row and
    its version, compute the next suffixes, write only if the version is
    unchanged, otherwise back off and try again. A creation race is settled
    by the store's unique key, the loser retrying on the update path.
    Different keys never touch the same row, so they never wait on each other.
    """

    def __init__(
        self,
        registry: DimensionRegistry,
        store: SequenceCounterStore,
        clock: ClockPort,
        *,
        overflow_policy: SequenceType = SequenceType.ALPHA_SUFFIX,
        max_retries: int = 8,
        backoff_base_ms: int = 5,
        backoff_max_ms: int = 200,
        timeout_seconds: float = 5.0,
        max_block: int = 10000,
    ):
        if overflow_policy == SequenceType.NUMERIC:
            raise ValueError("overflow policy must be alpha_suffix or alpha_prefix")
        self.registry = registry
        self.store = store
        self.clock = clock
        self.overflow_policy = SequenceType(overflow_policy)
        self.max_retries = max_retries
        self.backoff_base_ms = backoff_base_ms
        self.backoff_max_ms = backoff_max_ms
        self.timeout_seconds = timeout_seconds
        self.max_block = max_block

    def period_for(self, as_of: date | datetime | None = None) -> Period:
        if as_of is None:
            return Period.from_date(self.clock.now())
        if isinstance(as_of, datetime) and as_of.tzinfo is not None:
            as_of = as_of.astimezone(self.clock.now().tzinfo)
        return Period.from_date(as_of)

    async def allocate(self, combination: DimensionCombination, as_of: date | datetime | None = None) -> str:
        allocation = await self.allocate_block(combination, 1, as_of)
        return allocation.codes[0]

    async def allocate_block(
        self, combination: DimensionCombination, quantity: int, as_of: date | datetime | None = None
    ) -> Allocation:
        if not 1 <= quantity <= self.max_block:
            raise ValueError(f"quantity must be between 1 and {self.max_block}")
        dimension = await self.registry.lookup(combination)
        if not dimension.is_active:
            raise DimensionNotFound("dimension set is inactive", combination=combination.label())

        key = CounterKey(period=self.period_for(as_of), combination=combination)
        try:
            issued = await asyncio.wait_for(self._advance(key, quantity), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            log.error("Allocation for %s timed out after %.1fs", key, self.timeout_seconds)
            raise AllocationFailed(f"allocation timed out after {self.timeout_seconds}s", key=key)

        suffixes = [suffix for _, suffix in issued]
        codes = [format_code(combination, key.period, s) for s in suffixes]
        log.debug("Allocated %d code(s) for %s: %s..%s", quantity, key, codes[0], codes[-1])
        return Allocation(key=key, codes=codes, suffixes=suffixes, sequence_type=issued[-1][0])

    async def _advance(self, key: CounterKey, quantity: int) -> list[tuple[SequenceType, str]]:
        for attempt in range(1, self.max_retries + 1):
            current = await self.store.get(key)
            try:
                if current is None:
                    issued = schemes.advance(None, quantity, self.overflow_policy)
                    await self.store.create(SequenceCounter(
                        key=key,
                        current_sequence=issued[-1][1],
                        sequence_type=issued[-1][0],
                        total_generated=quantity,
                        last_generated_at=self.clock.now(),
                        version=1,
                    ))
                    log.info("Started counter %s at %s", key, issued[0][1])
                    return issued

                issued = await self._next(current, quantity)
                updated = replace(
                    current,
                    current_sequence=issued[-1][1],
                    sequence_type=issued[-1][0],
                    total_generated=current.total_generated + quantity,
                    last_generated_at=self.clock.now(),
                    version=current.version + 1,
                )
                if await self.store.compare_and_set(updated, current.version):
                    if updated.sequence_type != current.sequence_type:
                        log.warning("Counter %s promoted %s -> %s at %s", key, current.sequence_type.value,
                                    updated.sequence_type.value, updated.current_sequence)
                    return issued
                log.warning("Counter %s changed concurrently (attempt %d/%d)", key, attempt, self.max_retries)
            except CounterConflict:
                log.warning("Counter %s created concurrently (attempt %d/%d)", key, attempt, self.max_retries)
            except StoreContention:
                log.warning("Counter store busy for %s (attempt %d/%d)", key, attempt, self.max_retries)
            if attempt < self.max_retries:
                await asyncio.sleep(self._backoff(attempt))

        log.error("Allocation for %s gave up after %d attempts", key, self.max_retries)
        raise AllocationFailed(f"counter contention: gave up after {self.max_retries} attempts", key=key)

    async def _next(self, current: SequenceCounter, quantity: int) -> list[tuple[SequenceType, str]]:
        if current.status == CounterStatus.EXHAUSTED:
            raise SequenceExhausted("sequence exhausted for this period and combination", key=current.key)
        try:
            return schemes.advance(current.current_sequence, quantity, self.overflow_policy)
        except SequenceExhausted:
            left = schemes.remaining(current.current_sequence)
            log.error("Counter %s cannot issue %d more (%d left)", current.key, quantity, left)
            if left == 0:
                # a lost race here only means another writer flagged it first
                exhausted = replace(current, status=CounterStatus.EXHAUSTED, version=current.version + 1)
                try:
                    await self.store.compare_and_set(exhausted, current.version)
                except StoreContention:
                    log.warning("Could not flag counter %s as exhausted", current.key)
            raise

    def _backoff(self, attempt: int) -> float:
        ceiling = min(self.backoff_max_ms, self.backoff_base_ms * 2 ** (attempt - 1))
        return ceiling * random.uniform(0.5, 1.0) / 1000

    async def get_counter(self, period: Period, combination: DimensionCombination) -> SequenceCounter | None:
        return await self.store.get(CounterKey(period=period, combination=combination))

    async def list_counters(self, flt: CounterFilter) -> list[SequenceCounter]:
        return await self.store.list(flt)

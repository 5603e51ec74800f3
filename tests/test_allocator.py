import asyncio
import threading
from datetime import date, datetime, timezone
import pytest

from batchcodes.core.errors import AllocationFailed, DimensionNotFound, SequenceExhausted
from batchcodes.modules.codes.formatter import parse_code
from batchcodes.modules.codes.types import DimensionCombination, Period
from batchcodes.modules.sequences.schemes import SequenceType
from batchcodes.modules.sequences.types import CounterFilter, CounterKey, CounterStatus, SequenceCounter
from batchcodes.platform.adapters.counters_memory import InMemorySequenceCounterStore

from conftest import BPZ, BPZ_BULK


class YieldingStore(InMemorySequenceCounterStore):
    """Gives other tasks a chance to run between read and write."""

    async def get(self, key):
        row = await super().get(key)
        await asyncio.sleep(0)
        return row


class RejectingStore(InMemorySequenceCounterStore):
    async def compare_and_set(self, counter, expected_version):
        return False


class SlowStore(InMemorySequenceCounterStore):
    async def get(self, key):
        await asyncio.sleep(1)
        return await super().get(key)


def test_first_code_of_the_period(allocator):
    assert asyncio.run(allocator.allocate(BPZ)) == "2501AIBPZM0001"
    assert asyncio.run(allocator.allocate(BPZ)) == "2501AIBPZM0002"


def test_package_type_is_marked_in_the_code(allocator):
    assert asyncio.run(allocator.allocate(BPZ_BULK)) == "2501AIBPZM-B0001"


def test_numeric_range_rolls_over_to_alpha_suffix(allocator, store):
    async def run():
        return [await allocator.allocate(BPZ) for _ in range(10000)]

    codes = asyncio.run(run())
    assert codes[0] == "2501AIBPZM0001"
    assert codes[9998] == "2501AIBPZM9999"
    assert codes[9999] == "2501AIBPZM0001A"
    assert len(set(codes)) == 10000

    counter = asyncio.run(store.get(CounterKey(Period.parse("2501"), BPZ)))
    assert counter.current_sequence == "0001A"
    assert counter.sequence_type == SequenceType.ALPHA_SUFFIX
    assert counter.total_generated == 10000


def test_alpha_prefix_policy(make_allocator, registered):
    allocator = make_allocator(overflow_policy=SequenceType.ALPHA_PREFIX)
    block = asyncio.run(allocator.allocate_block(BPZ, 9999))
    assert block.codes[-1] == "2501AIBPZM9999"
    assert asyncio.run(allocator.allocate(BPZ)) == "2501AIBPZMA0001"


def test_promoted_counter_keeps_its_scheme(make_allocator, registered, store):
    asyncio.run(make_allocator(overflow_policy=SequenceType.ALPHA_PREFIX).allocate_block(BPZ, 10000))
    # the policy changed afterwards; the counter stays in alpha_prefix
    allocator = make_allocator(overflow_policy=SequenceType.ALPHA_SUFFIX)
    assert asyncio.run(allocator.allocate(BPZ)) == "2501AIBPZMA0002"


def test_codes_are_strictly_increasing(allocator):
    async def run():
        return [await allocator.allocate(BPZ) for _ in range(50)]

    suffixes = [parse_code(c).suffix for c in asyncio.run(run())]
    assert suffixes == sorted(suffixes)
    assert len(set(suffixes)) == 50


def test_concurrent_tasks_get_distinct_codes(make_allocator, registered):
    allocator = make_allocator(store=YieldingStore(), max_retries=200)

    async def run():
        return await asyncio.gather(*[allocator.allocate(BPZ) for _ in range(40)])

    codes = asyncio.run(run())
    assert len(set(codes)) == 40
    assert sorted(parse_code(c).suffix for c in codes) == [f"{i:04d}" for i in range(1, 41)]


def test_concurrent_threads_get_distinct_codes(make_allocator, registered, store):
    allocator = make_allocator(max_retries=200)
    results: list[str] = []
    lock = threading.Lock()

    def worker():
        async def run():
            return [await allocator.allocate(BPZ) for _ in range(25)]
        codes = asyncio.run(run())
        with lock:
            results.extend(codes)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(results) == 200
    assert len(set(results)) == 200
    counter = asyncio.run(store.get(CounterKey(Period.parse("2501"), BPZ)))
    assert counter.current_sequence == "0200"
    assert counter.total_generated == 200


def test_counters_are_independent(allocator, clock):
    assert asyncio.run(allocator.allocate(BPZ)) == "2501AIBPZM0001"
    assert asyncio.run(allocator.allocate(BPZ_BULK)) == "2501AIBPZM-B0001"
    clock.set(datetime(2025, 2, 1, 0, 5))
    assert asyncio.run(allocator.allocate(BPZ)) == "2502AIBPZM0001"
    assert asyncio.run(allocator.allocate(BPZ, as_of=date(2025, 1, 20))) == "2501AIBPZM0002"


def test_period_follows_the_configured_timezone(allocator):
    # 20:00 UTC on Jan 31 is already February in Jakarta
    late = datetime(2025, 1, 31, 20, 0, tzinfo=timezone.utc)
    assert allocator.period_for(late) == Period.parse("2502")
    assert allocator.period_for(date(2024, 12, 31)) == Period.parse("2412")
    assert allocator.period_for() == Period.parse("2501")


def test_unregistered_combination_touches_no_counter(allocator, store):
    unknown = DimensionCombination("Z", "Z", "ZZZ", "Z")
    with pytest.raises(DimensionNotFound):
        asyncio.run(allocator.allocate(unknown))
    assert asyncio.run(store.list(CounterFilter())) == []


def test_inactive_combination_is_refused(allocator, registered, store):
    obj = asyncio.run(registered.lookup(BPZ))
    asyncio.run(registered.deactivate(obj.id))
    with pytest.raises(DimensionNotFound):
        asyncio.run(allocator.allocate(BPZ))
    assert asyncio.run(store.list(CounterFilter())) == []


def test_block_allocation(allocator, store):
    block = asyncio.run(allocator.allocate_block(BPZ, 3))
    assert block.codes == ["2501AIBPZM0001", "2501AIBPZM0002", "2501AIBPZM0003"]
    assert block.suffixes == ["0001", "0002", "0003"]
    assert block.sequence_type == SequenceType.NUMERIC
    assert str(block.key) == "2501:A/I/BPZ/M/-"
    assert asyncio.run(allocator.allocate(BPZ)) == "2501AIBPZM0004"


@pytest.mark.parametrize("quantity", [0, -1, 10001])
def test_block_quantity_is_bounded(allocator, quantity):
    with pytest.raises(ValueError):
        asyncio.run(allocator.allocate_block(BPZ, quantity))


def test_block_that_does_not_fit_issues_nothing(allocator, store):
    key = CounterKey(Period.parse("2501"), BPZ)
    asyncio.run(store.create(SequenceCounter(key, "9998Z", SequenceType.ALPHA_SUFFIX)))
    with pytest.raises(SequenceExhausted):
        asyncio.run(allocator.allocate_block(BPZ, 2))
    assert asyncio.run(store.get(key)).current_sequence == "9998Z"
    assert asyncio.run(allocator.allocate(BPZ)) == "2501AIBPZM9999Z"


def test_exhausted_counter_is_flagged(allocator, store):
    key = CounterKey(Period.parse("2501"), BPZ)
    asyncio.run(store.create(SequenceCounter(key, "9999Z", SequenceType.ALPHA_SUFFIX)))
    with pytest.raises(SequenceExhausted):
        asyncio.run(allocator.allocate(BPZ))
    counter = asyncio.run(store.get(key))
    assert counter.status == CounterStatus.EXHAUSTED
    assert counter.current_sequence == "9999Z"
    with pytest.raises(SequenceExhausted):
        asyncio.run(allocator.allocate(BPZ))
    # other periods are unaffected
    assert asyncio.run(allocator.allocate(BPZ, as_of=date(2025, 2, 1))) == "2502AIBPZM0001"


def test_gives_up_after_max_retries(make_allocator, registered):
    store = RejectingStore()
    key = CounterKey(Period.parse("2501"), BPZ)
    asyncio.run(store.create(SequenceCounter(key, "0001")))
    allocator = make_allocator(store=store, max_retries=3)
    with pytest.raises(AllocationFailed):
        asyncio.run(allocator.allocate(BPZ))
    assert asyncio.run(store.get(key)).current_sequence == "0001"


def test_times_out(make_allocator, registered):
    allocator = make_allocator(store=SlowStore(), timeout_seconds=0.05)
    with pytest.raises(AllocationFailed):
        asyncio.run(allocator.allocate(BPZ))


def test_numeric_overflow_policy_is_rejected(make_allocator):
    with pytest.raises(ValueError):
        make_allocator(overflow_policy=SequenceType.NUMERIC)


def test_list_and_get_counters(allocator, clock):
    asyncio.run(allocator.allocate(BPZ))
    asyncio.run(allocator.allocate_block(BPZ_BULK, 5))
    asyncio.run(allocator.allocate(BPZ, as_of=date(2025, 3, 1)))

    jan = asyncio.run(allocator.list_counters(CounterFilter(period=Period.parse("2501"))))
    assert [c.key.combination for c in jan] == [BPZ, BPZ_BULK]
    bulk = asyncio.run(allocator.list_counters(CounterFilter(package_type="B")))
    assert [c.current_sequence for c in bulk] == ["0005"]
    counter = asyncio.run(allocator.get_counter(Period.parse("2503"), BPZ))
    assert counter.current_sequence == "0001"
    assert counter.last_generated_at == clock.now()
    assert asyncio.run(allocator.get_counter(Period.parse("2504"), BPZ)) is None

from batchcodes.core.config import settings
from batchcodes.modules.codes.service import CodeService
from batchcodes.modules.dimensions.service import DimensionService
from batchcodes.modules.sequences.allocator import SequenceAllocator
from batchcodes.modules.sequences.schemes import SequenceType
from batchcodes.platform.ports.clock import ClockPort
from batchcodes.platform.ports.counter_store import SequenceCounterStore
from batchcodes.platform.ports.dimension_registry import DimensionRegistry
from batchcodes.platform.adapters.clock_fixed import FixedClock
from batchcodes.platform.adapters.clock_system import SystemClock
from batchcodes.platform.adapters.counters_memory import InMemorySequenceCounterStore
from batchcodes.platform.adapters.registry_memory import InMemoryDimensionRegistry

class ProviderRegistry:
    _clock: ClockPort | None = None
    _dimension_registry: DimensionRegistry | None = None
    _counter_store: SequenceCounterStore | None = None

    @classmethod
    def clock(cls) -> ClockPort:
        if cls._clock is None:
            if settings.CLOCK_FIXED_AT is not None:
                cls._clock = FixedClock(settings.CLOCK_FIXED_AT)
            else:
                cls._clock = SystemClock(settings.TIMEZONE)
        return cls._clock

    @classmethod
    def dimension_registry(cls) -> DimensionRegistry:
        if cls._dimension_registry is None:
            if settings.STORAGE_PROVIDER == "sql":
                from batchcodes.core.db import SessionLocal
                from batchcodes.modules.dimensions.repository import SqlDimensionRegistry
                cls._dimension_registry = SqlDimensionRegistry(SessionLocal)
            else:
                cls._dimension_registry = InMemoryDimensionRegistry()
        return cls._dimension_registry

    @classmethod
    def counter_store(cls) -> SequenceCounterStore:
        if cls._counter_store is None:
            if settings.STORAGE_PROVIDER == "sql":
                from batchcodes.core.db import SessionLocal
                from batchcodes.modules.sequences.repository import SqlSequenceCounterStore
                cls._counter_store = SqlSequenceCounterStore(SessionLocal)
            else:
                cls._counter_store = InMemorySequenceCounterStore()
        return cls._counter_store

    @classmethod
    def allocator(cls) -> SequenceAllocator:
        return SequenceAllocator(
            cls.dimension_registry(),
            cls.counter_store(),
            cls.clock(),
            overflow_policy=SequenceType(settings.SEQUENCE_OVERFLOW_POLICY),
            max_retries=settings.ALLOCATION_MAX_RETRIES,
            backoff_base_ms=settings.ALLOCATION_BACKOFF_BASE_MS,
            backoff_max_ms=settings.ALLOCATION_BACKOFF_MAX_MS,
            timeout_seconds=settings.ALLOCATION_TIMEOUT_SECONDS,
            max_block=settings.ALLOCATION_MAX_BLOCK,
        )

    @classmethod
    def dimensions(cls) -> DimensionService:
        return DimensionService(cls.dimension_registry())

    @classmethod
    def codes(cls) -> CodeService:
        return CodeService(cls.dimension_registry(), cls.clock(), settings.CODE_YEAR_WARNING_WINDOW)

    @classmethod
    def override(cls, *, clock: ClockPort | None = None, dimension_registry: DimensionRegistry | None = None,
                 counter_store: SequenceCounterStore | None = None) -> None:
        """Swap adapters in (tests, scripts). ``None`` resets to the configured default."""
        cls._clock = clock
        cls._dimension_registry = dimension_registry
        cls._counter_store = counter_store

providers = ProviderRegistry()

"""
Shared fixtures: in-memory adapters, a pinned clock and one registered combination.
"""
import os

os.environ.setdefault("STORAGE_PROVIDER", "memory")
os.environ.setdefault("ENV", "local")

import asyncio
from datetime import datetime
import pytest

from batchcodes.modules.codes.types import DimensionCombination
from batchcodes.modules.dimensions.service import DimensionService
from batchcodes.modules.dimensions.types import NewDimensionSet
from batchcodes.modules.sequences.allocator import SequenceAllocator
from batchcodes.modules.sequences.schemes import SequenceType
from batchcodes.platform.adapters.clock_fixed import FixedClock
from batchcodes.platform.adapters.counters_memory import InMemorySequenceCounterStore
from batchcodes.platform.adapters.registry_memory import InMemoryDimensionRegistry
from batchcodes.platform.provider_registry import providers

BPZ = DimensionCombination("A", "I", "BPZ", "M", "")
BPZ_BULK = DimensionCombination("A", "I", "BPZ", "M", "B")

def new_set(combination: DimensionCombination, **overrides) -> NewDimensionSet:
    data = dict(
        combination=combination,
        funding_source_name="APBD",
        medicine_type_name="Insektisida",
        active_ingredient_name="Buprofezin",
        producer_name="Maju Tani",
        package_type_name="Botol" if combination.package_type else "",
        created_by="tester",
    )
    data.update(overrides)
    return NewDimensionSet(**data)

@pytest.fixture
def clock():
    return FixedClock(datetime(2025, 1, 15, 9, 30), tz="Asia/Jakarta")

@pytest.fixture
def registry():
    return InMemoryDimensionRegistry()

@pytest.fixture
def store():
    return InMemorySequenceCounterStore()

@pytest.fixture
def dimensions(registry):
    return DimensionService(registry)

@pytest.fixture
def registered(dimensions):
    """Registers BPZ and BPZ_BULK and returns the dimension service."""
    asyncio.run(dimensions.register(new_set(BPZ)))
    asyncio.run(dimensions.register(new_set(BPZ_BULK)))
    return dimensions

@pytest.fixture
def make_allocator(registry, store, clock):
    def make(**kwargs):
        kwargs.setdefault("overflow_policy", SequenceType.ALPHA_SUFFIX)
        kwargs.setdefault("backoff_base_ms", 1)
        kwargs.setdefault("backoff_max_ms", 5)
        return SequenceAllocator(registry, kwargs.pop("store", store), clock, **kwargs)
    return make

@pytest.fixture
def allocator(make_allocator, registered):
    return make_allocator()

@pytest.fixture(autouse=True)
def reset_providers():
    yield
    providers.override()

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from batchcodes.modules.codes.types import DimensionCombination, Period
from batchcodes.modules.sequences.schemes import SequenceType

class CounterStatus(str, Enum):
    ACTIVE = "active"
    EXHAUSTED = "exhausted"

@dataclass(frozen=True)
class CounterKey:
    period: Period
    combination: DimensionCombination

    def __str__(self) -> str:
        return f"{self.period}:{self.combination.label()}"

@dataclass(frozen=True)
class SequenceCounter:
    key: CounterKey
    current_sequence: str
    sequence_type: SequenceType = SequenceType.NUMERIC
    status: CounterStatus = CounterStatus.ACTIVE
    total_generated: int = 0
    last_generated_at: datetime | None = None
    version: int = 1

@dataclass(frozen=True)
class CounterFilter:
    period: Period | None = None
    funding_source: str | None = None
    medicine_type: str | None = None
    active_ingredient: str | None = None
    producer: str | None = None
    package_type: str | None = None
    status: CounterStatus | None = None
    limit: int | None = None
    offset: int = 0

    def matches(self, c: SequenceCounter) -> bool:
        if self.period is not None and c.key.period != self.period:
            return False
        if self.status is not None and c.status != self.status:
            return False
        for name in ("funding_source", "medicine_type", "active_ingredient", "producer", "package_type"):
            wanted = getattr(self, name)
            if wanted is not None and getattr(c.key.combination, name) != wanted:
                return False
        return True

@dataclass(frozen=True)
class Allocation:
    """The outcome of one allocator call: codes in issue order."""
    key: CounterKey
    codes: list[str]
    suffixes: list[str]
    sequence_type: SequenceType

from datetime import date, datetime
from pydantic import BaseModel, Field
from batchcodes.modules.codes.types import DimensionCombination
from batchcodes.modules.sequences.schemes import SequenceType
from batchcodes.modules.sequences.types import CounterStatus, SequenceCounter, Allocation

class CombinationIn(BaseModel):
    funding_source: str = Field(..., max_length=1)
    medicine_type: str = Field(..., max_length=1)
    active_ingredient: str = Field(..., max_length=3)
    producer: str = Field(..., max_length=1)
    package_type: str = Field(default="", max_length=1)

    def to_combination(self) -> DimensionCombination:
        return DimensionCombination(self.funding_source, self.medicine_type, self.active_ingredient, self.producer, self.package_type)

    @classmethod
    def of(cls, c: DimensionCombination) -> "CombinationIn":
        return cls(funding_source=c.funding_source, medicine_type=c.medicine_type,
                   active_ingredient=c.active_ingredient, producer=c.producer, package_type=c.package_type)

class AllocationRequest(BaseModel):
    combination: CombinationIn
    # datetime first so an offset in the value is kept
    batch_date: datetime | date | None = Field(default=None, union_mode="left_to_right")
    quantity: int = Field(default=1, ge=1)

class AllocationOut(BaseModel):
    codes: list[str]
    period: str
    combination: CombinationIn
    sequence_type: SequenceType

    @classmethod
    def of(cls, a: Allocation) -> "AllocationOut":
        return cls(codes=a.codes, period=str(a.key.period), combination=CombinationIn.of(a.key.combination), sequence_type=a.sequence_type)

class CounterOut(BaseModel):
    period: str
    combination: CombinationIn
    current_sequence: str
    sequence_type: SequenceType
    status: CounterStatus
    total_generated: int
    last_generated_at: datetime | None
    version: int

    @classmethod
    def of(cls, c: SequenceCounter) -> "CounterOut":
        return cls(
            period=str(c.key.period),
            combination=CombinationIn.of(c.key.combination),
            current_sequence=c.current_sequence,
            sequence_type=c.sequence_type,
            status=c.status,
            total_generated=c.total_generated,
            last_generated_at=c.last_generated_at,
            version=c.version,
        )

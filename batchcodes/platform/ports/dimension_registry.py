from typing import Protocol, runtime_checkable
from batchcodes.modules.codes.types import DimensionCombination
from batchcodes.modules.dimensions.types import DimensionSet, NewDimensionSet, DimensionFilter, DimensionChanges

@runtime_checkable
class DimensionRegistry(Protocol):
    """Storage of dimension sets; unique on the 5-code tuple, never deleted."""

    async def create(self, new: NewDimensionSet) -> DimensionSet:
        """Insert a set; ``DimensionConflict`` if its 5-code tuple exists."""
        ...

    async def lookup(self, combination: DimensionCombination) -> DimensionSet:
        """``DimensionNotFound`` if no set has this tuple (inactive sets are returned)."""
        ...

    async def get(self, dimension_id: str) -> DimensionSet: ...

    async def list(self, flt: DimensionFilter) -> list[DimensionSet]: ...

    async def update(self, dimension_id: str, changes: DimensionChanges) -> DimensionSet: ...

import threading
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from batchcodes.core.errors import DimensionConflict, DimensionNotFound
from batchcodes.modules.codes.types import DimensionCombination
from batchcodes.modules.dimensions.types import (
    DimensionSet, NewDimensionSet, DimensionFilter, DimensionChanges, CODE_FIELDS,
)
from batchcodes.platform.ports.dimension_registry import DimensionRegistry

class InMemoryDimensionRegistry(DimensionRegistry):
    """Process-local registry; entries are frozen dataclasses so reads are safe copies."""

    def __init__(self):
        self._lock = threading.Lock()
        self._by_id: dict[str, DimensionSet] = {}
        self._by_key: dict[tuple[str, ...], str] = {}

    async def create(self, new: NewDimensionSet) -> DimensionSet:
        key = new.combination.as_tuple()
        now = datetime.now(timezone.utc)
        codes = {f"{c}_code": v for c, v in zip(CODE_FIELDS, key)}
        with self._lock:
            if key in self._by_key:
                raise DimensionConflict("dimension set already registered", combination=new.combination.label())
            obj = DimensionSet(
                id=str(uuid.uuid4()),
                funding_source_name=new.funding_source_name,
                medicine_type_name=new.medicine_type_name,
                active_ingredient_name=new.active_ingredient_name,
                producer_name=new.producer_name,
                package_type_name=new.package_type_name or "",
                created_by=new.created_by,
                created_at=now,
                updated_at=now,
                **codes,
            )
            self._by_id[obj.id] = obj
            self._by_key[key] = obj.id
            return obj

    async def lookup(self, combination: DimensionCombination) -> DimensionSet:
        with self._lock:
            dimension_id = self._by_key.get(combination.as_tuple())
            if dimension_id is None:
                raise DimensionNotFound("dimension set not registered", combination=combination.label())
            return self._by_id[dimension_id]

    async def get(self, dimension_id: str) -> DimensionSet:
        with self._lock:
            obj = self._by_id.get(dimension_id)
        if obj is None:
            raise DimensionNotFound("dimension set not found", id=dimension_id)
        return obj

    async def list(self, flt: DimensionFilter) -> list[DimensionSet]:
        with self._lock:
            rows = [d for d in self._by_id.values() if flt.matches(d)]
        rows.sort(key=lambda d: d.combination.as_tuple())
        rows = rows[flt.offset:]
        return rows[:flt.limit] if flt.limit is not None else rows

    async def update(self, dimension_id: str, changes: DimensionChanges) -> DimensionSet:
        with self._lock:
            obj = self._by_id.get(dimension_id)
            if obj is None:
                raise DimensionNotFound("dimension set not found", id=dimension_id)
            fields = dict(changes.names)
            if changes.status is not None:
                fields["status"] = changes.status
            obj = replace(obj, updated_by=changes.updated_by, updated_at=datetime.now(timezone.utc), **fields)
            self._by_id[dimension_id] = obj
            return obj

import uuid
from sqlalchemy import select, and_, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from batchcodes.core.errors import DimensionConflict, DimensionNotFound
from batchcodes.modules.codes.types import DimensionCombination
from batchcodes.modules.dimensions.models import DimensionSetRow
from batchcodes.modules.dimensions.types import (
    DimensionSet, DimensionStatus, NewDimensionSet, DimensionFilter, DimensionChanges, CODE_FIELDS, NAME_FIELDS,
)
from batchcodes.platform.ports.dimension_registry import DimensionRegistry

def _to_entity(row: DimensionSetRow) -> DimensionSet:
    return DimensionSet(
        id=str(row.id),
        status=DimensionStatus(row.status),
        created_by=row.created_by,
        updated_by=row.updated_by,
        created_at=row.created_at,
        updated_at=row.updated_at,
        **{f"{c}_code": getattr(row, f"{c}_code") or "" for c in CODE_FIELDS},
        **{n: getattr(row, n) or "" for n in NAME_FIELDS},
    )

def _key_conditions(combination: DimensionCombination) -> list:
    return [getattr(DimensionSetRow, f"{c}_code") == v for c, v in zip(CODE_FIELDS, combination.as_tuple())]

class SqlDimensionRegistry(DimensionRegistry):
    def __init__(self, sessions: async_sessionmaker[AsyncSession]):
        self.sessions = sessions

    async def create(self, new: NewDimensionSet) -> DimensionSet:
        obj = DimensionSetRow(
            funding_source_name=new.funding_source_name,
            medicine_type_name=new.medicine_type_name,
            active_ingredient_name=new.active_ingredient_name,
            producer_name=new.producer_name,
            package_type_name=new.package_type_name or "",
            status=DimensionStatus.ACTIVE.value,
            created_by=new.created_by,
            **{f"{c}_code": v for c, v in zip(CODE_FIELDS, new.combination.as_tuple())},
        )
        async with self.sessions() as s:
            s.add(obj)
            try:
                await s.commit()
            except IntegrityError as e:
                await s.rollback()
                raise DimensionConflict("dimension set already registered", combination=new.combination.label()) from e
            await s.refresh(obj)
            return _to_entity(obj)

    async def lookup(self, combination: DimensionCombination) -> DimensionSet:
        async with self.sessions() as s:
            res = await s.execute(select(DimensionSetRow).where(and_(*_key_conditions(combination))))
            row = res.scalar_one_or_none()
        if row is None:
            raise DimensionNotFound("dimension set not registered", combination=combination.label())
        return _to_entity(row)

    async def get(self, dimension_id: str) -> DimensionSet:
        try:
            pk = uuid.UUID(str(dimension_id))
        except ValueError:
            raise DimensionNotFound("dimension set not found", id=dimension_id)
        async with self.sessions() as s:
            row = await s.get(DimensionSetRow, pk)
        if row is None:
            raise DimensionNotFound("dimension set not found", id=dimension_id)
        return _to_entity(row)

    async def list(self, flt: DimensionFilter) -> list[DimensionSet]:
        conditions = [getattr(DimensionSetRow, f"{c}_code") == v for c, v in flt.code_filters().items()]
        if flt.status is not None:
            conditions.append(DimensionSetRow.status == flt.status.value)
        if flt.search:
            like = f"%{flt.search}%"
            conditions.append(or_(*[getattr(DimensionSetRow, n).ilike(like) for n in NAME_FIELDS]))
        q = (
            select(DimensionSetRow)
            .where(*conditions)
            .order_by(*[getattr(DimensionSetRow, f"{c}_code") for c in CODE_FIELDS])
            .offset(flt.offset)
        )
        if flt.limit is not None:
            q = q.limit(flt.limit)
        async with self.sessions() as s:
            res = await s.execute(q)
            return [_to_entity(r) for r in res.scalars().all()]

    async def update(self, dimension_id: str, changes: DimensionChanges) -> DimensionSet:
        try:
            pk = uuid.UUID(str(dimension_id))
        except ValueError:
            raise DimensionNotFound("dimension set not found", id=dimension_id)
        async with self.sessions() as s:
            row = await s.get(DimensionSetRow, pk)
            if row is None:
                raise DimensionNotFound("dimension set not found", id=dimension_id)
            for k, v in changes.names.items():
                setattr(row, k, v)
            if changes.status is not None:
                row.status = changes.status.value
            row.updated_by = changes.updated_by
            row.version = (row.version or 1) + 1
            await s.commit()
            await s.refresh(row)
            return _to_entity(row)

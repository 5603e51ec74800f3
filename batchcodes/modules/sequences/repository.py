from sqlalchemy import select, update, and_
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from batchcodes.core.errors import CounterConflict, DimensionNotFound, StoreContention
from batchcodes.modules.codes.types import DimensionCombination, Period
from batchcodes.modules.sequences.models import SequenceCounterRow
from batchcodes.modules.sequences.schemes import SequenceType
from batchcodes.modules.sequences.types import CounterKey, CounterStatus, SequenceCounter, CounterFilter
from batchcodes.platform.ports.counter_store import SequenceCounterStore

_CODE_COLUMNS = ("funding_source", "medicine_type", "active_ingredient", "producer", "package_type")

def _to_entity(row: SequenceCounterRow) -> SequenceCounter:
    key = CounterKey(
        period=Period(row.year, row.month),
        combination=DimensionCombination(*(getattr(row, f"{c}_code") or "" for c in _CODE_COLUMNS)),
    )
    return SequenceCounter(
        key=key,
        current_sequence=row.current_sequence,
        sequence_type=SequenceType(row.sequence_type),
        status=CounterStatus(row.status),
        total_generated=row.total_generated,
        last_generated_at=row.last_generated_at,
        version=row.version,
    )

def _key_conditions(key: CounterKey) -> list:
    conds = [SequenceCounterRow.year == key.period.year, SequenceCounterRow.month == key.period.month]
    conds += [getattr(SequenceCounterRow, f"{c}_code") == v for c, v in zip(_CODE_COLUMNS, key.combination.as_tuple())]
    return conds

def _state_values(counter: SequenceCounter) -> dict:
    return {
        "current_sequence": counter.current_sequence,
        "sequence_type": counter.sequence_type.value,
        "status": counter.status.value,
        "total_generated": counter.total_generated,
        "last_generated_at": counter.last_generated_at,
        "version": counter.version,
    }

class SqlSequenceCounterStore(SequenceCounterStore):
    """Counter rows in the ``sequencecounter`` table.

    Every call is its own short transaction; the conditional UPDATE is the
    compare-and-swap, so no row lock is held between the allocator's read and
    its write.
    """

    def __init__(self, sessions: async_sessionmaker[AsyncSession]):
        self.sessions = sessions

    async def get(self, key: CounterKey) -> SequenceCounter | None:
        async with self.sessions() as s:
            res = await s.execute(select(SequenceCounterRow).where(and_(*_key_conditions(key))))
            row = res.scalar_one_or_none()
        return _to_entity(row) if row is not None else None

    async def create(self, counter: SequenceCounter) -> SequenceCounter:
        key = counter.key
        row = SequenceCounterRow(
            year=key.period.year,
            month=key.period.month,
            **{f"{c}_code": v for c, v in zip(_CODE_COLUMNS, key.combination.as_tuple())},
            **_state_values(counter),
        )
        async with self.sessions() as s:
            s.add(row)
            try:
                await s.commit()
            except IntegrityError as e:
                await s.rollback()
                exists = await s.execute(select(SequenceCounterRow.id).where(and_(*_key_conditions(key))))
                if exists.first() is None:
                    # not the unique key: the foreign key to dimensionset failed
                    raise DimensionNotFound("dimension set not registered", combination=key.combination.label()) from e
                raise CounterConflict(str(key)) from e
            except OperationalError as e:
                await s.rollback()
                raise StoreContention(str(key)) from e
        return counter

    async def compare_and_set(self, counter: SequenceCounter, expected_version: int) -> bool:
        q = (
            update(SequenceCounterRow)
            .where(and_(*_key_conditions(counter.key), SequenceCounterRow.version == expected_version))
            .values(**_state_values(counter))
            .execution_options(synchronize_session=False)
        )
        async with self.sessions() as s:
            try:
                res = await s.execute(q)
                await s.commit()
            except OperationalError as e:
                await s.rollback()
                raise StoreContention(str(counter.key)) from e
        return res.rowcount == 1

    async def list(self, flt: CounterFilter) -> list[SequenceCounter]:
        conditions = []
        if flt.period is not None:
            conditions += [SequenceCounterRow.year == flt.period.year, SequenceCounterRow.month == flt.period.month]
        if flt.status is not None:
            conditions.append(SequenceCounterRow.status == flt.status.value)
        for c in _CODE_COLUMNS:
            wanted = getattr(flt, c)
            if wanted is not None:
                conditions.append(getattr(SequenceCounterRow, f"{c}_code") == wanted)
        q = (
            select(SequenceCounterRow)
            .where(*conditions)
            .order_by(SequenceCounterRow.year, SequenceCounterRow.month, *[getattr(SequenceCounterRow, f"{c}_code") for c in _CODE_COLUMNS])
            .offset(flt.offset)
        )
        if flt.limit is not None:
            q = q.limit(flt.limit)
        async with self.sessions() as s:
            res = await s.execute(q)
            return [_to_entity(r) for r in res.scalars().all()]

from fastapi import APIRouter, Depends, HTTPException, Query
from batchcodes.core.security import require_scopes
from batchcodes.modules.codes.types import DimensionCombination, Period
from batchcodes.modules.sequences.allocator import SequenceAllocator
from batchcodes.modules.sequences.schemas import AllocationRequest, AllocationOut, CounterOut
from batchcodes.modules.sequences.types import CounterFilter, CounterStatus
from batchcodes.platform.provider_registry import providers

router = APIRouter()

def svc() -> SequenceAllocator:
    return providers.allocator()

def _period(value: str | None) -> Period | None:
    if value is None:
        return None
    try:
        return Period.parse(value)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

@router.post("/allocations", response_model=AllocationOut, status_code=201, dependencies=[Depends(require_scopes("codes:allocate"))])
async def allocate_codes(payload: AllocationRequest, allocator: SequenceAllocator = Depends(svc)):
    try:
        allocation = await allocator.allocate_block(payload.combination.to_combination(), payload.quantity, payload.batch_date)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return AllocationOut.of(allocation)

@router.get("/counters", response_model=list[CounterOut], dependencies=[Depends(require_scopes("codes:read"))])
async def list_counters(
    period: str | None = Query(default=None, description="YYMM"),
    funding_source: str | None = None,
    medicine_type: str | None = None,
    active_ingredient: str | None = None,
    producer: str | None = None,
    package_type: str | None = None,
    status: CounterStatus | None = None,
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    allocator: SequenceAllocator = Depends(svc),
):
    rows = await allocator.list_counters(CounterFilter(
        period=_period(period), funding_source=funding_source, medicine_type=medicine_type,
        active_ingredient=active_ingredient, producer=producer, package_type=package_type,
        status=status, limit=limit, offset=offset,
    ))
    return [CounterOut.of(c) for c in rows]

@router.get("/counters/{period}", response_model=CounterOut, dependencies=[Depends(require_scopes("codes:read"))])
async def get_counter(
    period: str,
    funding_source: str,
    medicine_type: str,
    active_ingredient: str,
    producer: str,
    package_type: str = "",
    allocator: SequenceAllocator = Depends(svc),
):
    counter = await allocator.get_counter(
        _period(period), DimensionCombination(funding_source, medicine_type, active_ingredient, producer, package_type)
    )
    if counter is None:
        raise HTTPException(status_code=404, detail="Counter not found")
    return CounterOut.of(counter)

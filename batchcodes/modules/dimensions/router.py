from fastapi import APIRouter, Depends, Query
from batchcodes.core.security import get_principal, require_scopes, Principal
from batchcodes.modules.codes.types import DimensionCombination
from batchcodes.modules.dimensions.schemas import DimensionSetCreate, DimensionSetUpdate, DimensionSetOut
from batchcodes.modules.dimensions.service import DimensionService
from batchcodes.modules.dimensions.types import DimensionFilter, DimensionStatus, NewDimensionSet
from batchcodes.platform.provider_registry import providers

router = APIRouter()

def svc() -> DimensionService:
    return providers.dimensions()

@router.post("/dimensions", response_model=DimensionSetOut, status_code=201, dependencies=[Depends(require_scopes("dimensions:write"))])
async def register_dimension_set(
    payload: DimensionSetCreate,
    principal: Principal = Depends(get_principal),
    service: DimensionService = Depends(svc),
):
    combination = DimensionCombination(
        payload.funding_source_code, payload.medicine_type_code, payload.active_ingredient_code,
        payload.producer_code, payload.package_type_code,
    )
    return await service.register(NewDimensionSet(
        combination=combination,
        funding_source_name=payload.funding_source_name,
        medicine_type_name=payload.medicine_type_name,
        active_ingredient_name=payload.active_ingredient_name,
        producer_name=payload.producer_name,
        package_type_name=payload.package_type_name,
        created_by=principal.user_id,
    ))

@router.get("/dimensions", response_model=list[DimensionSetOut], dependencies=[Depends(require_scopes("dimensions:read"))])
async def list_dimension_sets(
    funding_source: str | None = None,
    medicine_type: str | None = None,
    active_ingredient: str | None = None,
    producer: str | None = None,
    package_type: str | None = None,
    status: DimensionStatus | None = None,
    search: str | None = Query(default=None, max_length=200),
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    service: DimensionService = Depends(svc),
):
    return await service.list(DimensionFilter(
        funding_source=funding_source, medicine_type=medicine_type, active_ingredient=active_ingredient,
        producer=producer, package_type=package_type, status=status, search=search, limit=limit, offset=offset,
    ))

@router.get("/dimensions/lookup", response_model=DimensionSetOut, dependencies=[Depends(require_scopes("dimensions:read"))])
async def lookup_dimension_set(
    funding_source: str,
    medicine_type: str,
    active_ingredient: str,
    producer: str,
    package_type: str = "",
    service: DimensionService = Depends(svc),
):
    return await service.lookup(DimensionCombination(funding_source, medicine_type, active_ingredient, producer, package_type))

@router.get("/dimensions/{dimension_id}", response_model=DimensionSetOut, dependencies=[Depends(require_scopes("dimensions:read"))])
async def get_dimension_set(dimension_id: str, service: DimensionService = Depends(svc)):
    return await service.get(dimension_id)

@router.patch("/dimensions/{dimension_id}", response_model=DimensionSetOut, dependencies=[Depends(require_scopes("dimensions:write"))])
async def update_dimension_set(
    dimension_id: str,
    payload: DimensionSetUpdate,
    principal: Principal = Depends(get_principal),
    service: DimensionService = Depends(svc),
):
    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    status = data.pop("status", None)
    obj = None
    if data:
        obj = await service.rename(dimension_id, data, updated_by=principal.user_id)
    if status == DimensionStatus.INACTIVE:
        obj = await service.deactivate(dimension_id, updated_by=principal.user_id)
    elif status == DimensionStatus.ACTIVE:
        obj = await service.activate(dimension_id, updated_by=principal.user_id)
    return obj or await service.get(dimension_id)

import logging
from batchcodes.core.errors import InvalidCode
from batchcodes.modules.codes.formatter import validate_combination
from batchcodes.modules.codes.types import DimensionCombination
from batchcodes.modules.dimensions.types import (
    DimensionSet, DimensionStatus, NewDimensionSet, DimensionFilter, DimensionChanges, NAME_FIELDS,
)
from batchcodes.platform.ports.dimension_registry import DimensionRegistry

log = logging.getLogger(__name__)

NAME_MAX_LENGTH = 255

def _check_name(field: str, value: str) -> None:
    if not value or not value.strip() or len(value) > NAME_MAX_LENGTH:
        raise InvalidCode(f"{field} must be 1..{NAME_MAX_LENGTH} characters", field=field)

class DimensionService:
    """The classification vocabulary: registration, lookup and (de)activation.

    Codes are fixed once registered; only names and status change. Sets are
    never deleted so historical codes can still be decoded.
    """

    def __init__(self, registry: DimensionRegistry):
        self.registry = registry

    async def register(self, new: NewDimensionSet) -> DimensionSet:
        combination = new.combination
        validate_combination(combination)
        for field in NAME_FIELDS:
            if field == "package_type_name":
                continue
            _check_name(field, getattr(new, field))
        if bool(combination.package_type) != bool(new.package_type_name):
            raise InvalidCode("package type code and name must be provided together", field="package_type")
        if combination.package_type:
            _check_name("package_type_name", new.package_type_name)

        obj = await self.registry.create(NewDimensionSet(
            combination=combination,
            funding_source_name=new.funding_source_name.strip(),
            medicine_type_name=new.medicine_type_name.strip(),
            active_ingredient_name=new.active_ingredient_name.strip(),
            producer_name=new.producer_name.strip(),
            package_type_name=(new.package_type_name or "").strip(),
            created_by=new.created_by,
        ))
        log.info("Registered dimension set %s (%s) by %s", combination.label(), obj.id, new.created_by)
        return obj

    async def lookup(self, combination: DimensionCombination) -> DimensionSet:
        return await self.registry.lookup(combination)

    async def get(self, dimension_id: str) -> DimensionSet:
        return await self.registry.get(dimension_id)

    async def list(self, flt: DimensionFilter | None = None) -> list[DimensionSet]:
        return await self.registry.list(flt or DimensionFilter())

    async def rename(self, dimension_id: str, names: dict[str, str], updated_by: str | None = None) -> DimensionSet:
        unknown = set(names) - set(NAME_FIELDS)
        if unknown:
            raise InvalidCode(f"unknown name field(s): {', '.join(sorted(unknown))}")
        current = await self.registry.get(dimension_id)
        for field, value in names.items():
            if field == "package_type_name" and not current.package_type_code:
                raise InvalidCode("dimension set has no package type to name", field=field)
            _check_name(field, value)
        return await self.registry.update(
            dimension_id, DimensionChanges(names={k: v.strip() for k, v in names.items()}, updated_by=updated_by)
        )

    async def deactivate(self, dimension_id: str, updated_by: str | None = None) -> DimensionSet:
        return await self._set_status(dimension_id, DimensionStatus.INACTIVE, updated_by)

    async def activate(self, dimension_id: str, updated_by: str | None = None) -> DimensionSet:
        return await self._set_status(dimension_id, DimensionStatus.ACTIVE, updated_by)

    async def _set_status(self, dimension_id: str, status: DimensionStatus, updated_by: str | None) -> DimensionSet:
        obj = await self.registry.update(dimension_id, DimensionChanges(status=status, updated_by=updated_by))
        log.info("Dimension set %s (%s) is now %s", obj.combination.label(), obj.id, status.value)
        return obj

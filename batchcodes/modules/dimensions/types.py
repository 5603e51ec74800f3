from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from batchcodes.modules.codes.types import DimensionCombination

CODE_FIELDS = ("funding_source", "medicine_type", "active_ingredient", "producer", "package_type")
NAME_FIELDS = tuple(f"{c}_name" for c in CODE_FIELDS)

class DimensionStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"

@dataclass(frozen=True)
class DimensionSet:
    id: str
    funding_source_code: str
    funding_source_name: str
    medicine_type_code: str
    medicine_type_name: str
    active_ingredient_code: str
    active_ingredient_name: str
    producer_code: str
    producer_name: str
    package_type_code: str = ""
    package_type_name: str = ""
    status: DimensionStatus = DimensionStatus.ACTIVE
    created_by: str | None = None
    updated_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def combination(self) -> DimensionCombination:
        return DimensionCombination(*(getattr(self, f"{c}_code") for c in CODE_FIELDS))

    @property
    def is_active(self) -> bool:
        return self.status == DimensionStatus.ACTIVE

@dataclass(frozen=True)
class NewDimensionSet:
    combination: DimensionCombination
    funding_source_name: str
    medicine_type_name: str
    active_ingredient_name: str
    producer_name: str
    package_type_name: str = ""
    created_by: str | None = None

@dataclass(frozen=True)
class DimensionFilter:
    funding_source: str | None = None
    medicine_type: str | None = None
    active_ingredient: str | None = None
    producer: str | None = None
    package_type: str | None = None  # "" selects sets without a package type
    status: DimensionStatus | None = None
    search: str | None = None
    limit: int | None = None
    offset: int = 0

    def code_filters(self) -> dict[str, str]:
        return {c: getattr(self, c) for c in CODE_FIELDS if getattr(self, c) is not None}

    def matches(self, d: DimensionSet) -> bool:
        for c, v in self.code_filters().items():
            if getattr(d, f"{c}_code") != v:
                return False
        if self.status is not None and d.status != self.status:
            return False
        if self.search:
            needle = self.search.lower()
            if not any(needle in (getattr(d, n) or "").lower() for n in NAME_FIELDS):
                return False
        return True

@dataclass(frozen=True)
class DimensionChanges:
    names: dict[str, str] = field(default_factory=dict)
    status: DimensionStatus | None = None
    updated_by: str | None = None

from dataclasses import dataclass
from datetime import date, datetime

@dataclass(frozen=True)
class DimensionCombination:
    """The 5-code classification key shared by dimension sets, counters and codes."""
    funding_source: str
    medicine_type: str
    active_ingredient: str
    producer: str
    package_type: str = ""

    def __post_init__(self):
        # a missing package type is always the empty string, never None
        if self.package_type is None:
            object.__setattr__(self, "package_type", "")

    def as_tuple(self) -> tuple[str, str, str, str, str]:
        return (self.funding_source, self.medicine_type, self.active_ingredient, self.producer, self.package_type)

    def label(self) -> str:
        return "/".join(c or "-" for c in self.as_tuple())

@dataclass(frozen=True, order=True)
class Period:
    year: str   # 2 digits
    month: str  # 2 digits

    @classmethod
    def from_date(cls, d: date | datetime) -> "Period":
        return cls(year=f"{d.year % 100:02d}", month=f"{d.month:02d}")

    @classmethod
    def parse(cls, value: str) -> "Period":
        if len(value) != 4 or not value.isdigit() or not 1 <= int(value[2:]) <= 12:
            raise ValueError(f"period must be YYMM, got {value!r}")
        return cls(year=value[:2], month=value[2:])

    def __str__(self) -> str:
        return self.year + self.month

@dataclass(frozen=True)
class ParsedCode:
    combination: DimensionCombination
    period: Period
    suffix: str

from dataclasses import dataclass, field
from batchcodes.core.errors import DimensionNotFound, MalformedCode
from batchcodes.modules.codes.formatter import parse_code
from batchcodes.modules.codes.types import ParsedCode
from batchcodes.modules.dimensions.types import DimensionSet
from batchcodes.modules.sequences import schemes
from batchcodes.modules.sequences.schemes import SequenceType
from batchcodes.platform.ports.clock import ClockPort
from batchcodes.platform.ports.dimension_registry import DimensionRegistry

@dataclass
class CodeInspection:
    code: str
    valid: bool = False
    parsed: ParsedCode | None = None
    sequence_type: SequenceType | None = None
    dimension: DimensionSet | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

class CodeService:
    """Decodes printed codes back to their classification (scanner side)."""

    def __init__(self, registry: DimensionRegistry, clock: ClockPort, year_warning_window: int = 5):
        self.registry = registry
        self.clock = clock
        self.year_warning_window = year_warning_window

    async def inspect(self, code: str) -> CodeInspection:
        result = CodeInspection(code=code)
        try:
            parsed = parse_code(code)
        except MalformedCode as e:
            result.errors.append(e.message)
            return result
        result.parsed = parsed
        result.sequence_type = schemes.classify(parsed.suffix)

        current_year = self.clock.now().year % 100
        # two-digit years wrap at the century; compare on the short circle
        distance = abs(int(parsed.period.year) - current_year)
        if min(distance, 100 - distance) > self.year_warning_window:
            result.warnings.append(f"code year {parsed.period.year} is unusual")

        try:
            result.dimension = await self.registry.lookup(parsed.combination)
        except DimensionNotFound:
            result.errors.append("dimension combination is not registered")
            return result
        if not result.dimension.is_active:
            result.warnings.append("dimension set is inactive")
        result.valid = not result.errors
        return result

from pydantic import BaseModel
from batchcodes.modules.codes.service import CodeInspection
from batchcodes.modules.dimensions.schemas import DimensionSetOut
from batchcodes.modules.sequences.schemas import CombinationIn
from batchcodes.modules.sequences.schemes import SequenceType

class CodeInspectionOut(BaseModel):
    code: str
    valid: bool
    period: str | None = None
    combination: CombinationIn | None = None
    suffix: str | None = None
    sequence_type: SequenceType | None = None
    dimension: DimensionSetOut | None = None
    errors: list[str] = []
    warnings: list[str] = []

    @classmethod
    def of(cls, r: CodeInspection) -> "CodeInspectionOut":
        out = cls(code=r.code, valid=r.valid, sequence_type=r.sequence_type, errors=r.errors, warnings=r.warnings)
        if r.parsed is not None:
            out.period = str(r.parsed.period)
            out.combination = CombinationIn.of(r.parsed.combination)
            out.suffix = r.parsed.suffix
        if r.dimension is not None:
            out.dimension = DimensionSetOut.model_validate(r.dimension)
        return out

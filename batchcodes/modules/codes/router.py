from fastapi import APIRouter, Depends
from batchcodes.core.security import require_scopes
from batchcodes.modules.codes.schemas import CodeInspectionOut
from batchcodes.modules.codes.service import CodeService
from batchcodes.platform.provider_registry import providers

router = APIRouter()

def svc() -> CodeService:
    return providers.codes()

@router.get("/codes/{code}", response_model=CodeInspectionOut, dependencies=[Depends(require_scopes("codes:read"))])
async def inspect_code(code: str, service: CodeService = Depends(svc)):
    return CodeInspectionOut.of(await service.inspect(code))

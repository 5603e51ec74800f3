from fastapi import APIRouter
from batchcodes.modules.dimensions.router import router as dimensions_router
from batchcodes.modules.sequences.router import router as sequences_router
from batchcodes.modules.codes.router import router as codes_router

api_router = APIRouter()
api_router.include_router(dimensions_router, tags=["dimensions"])
api_router.include_router(sequences_router, tags=["allocations"])
api_router.include_router(codes_router, tags=["codes"])

@api_router.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}

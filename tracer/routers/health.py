from fastapi import APIRouter

from tracer.middleware.tracing import current_trace_id

router = APIRouter()


@router.get("/health")
async def health():
    return {"status": "ok", "trace_id": current_trace_id()}

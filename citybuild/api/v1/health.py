# citybuild/api/v1/health.py
from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health(request: Request):
    rid = getattr(request.state, "request_id", None)
    store = getattr(request.app.state, "store", None)
    storage_ok = bool(store and store.manager.is_available)
    return {"status": "ok", "storage": "ok" if storage_ok else "unavailable", "request_id": rid}

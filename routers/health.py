# routers/health.py

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from core.config import settings
from core.supabase_client import check_authorization_store

router = APIRouter(
    prefix="/health",
    tags=["Health"],
)


@router.get("", summary="Authorization store health")
def store_health():
    """
    503 unless every table the gate reads is answering. No auth required.
    """
    report = check_authorization_store()
    healthy = report["status"] == "ok"

    return JSONResponse(
        status_code=200 if healthy else 503,
        content={"success": healthy, "service": settings.PROJECT_NAME, **report},
    )


@router.get("/live", summary="Process liveness")
def liveness():
    return {"success": True, "service": settings.PROJECT_NAME}

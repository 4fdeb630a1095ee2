from time import perf_counter

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from src.dependencies import get_database
from src.shared.database import Database
from src.shared.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health():
    return {"status": "ok"}


@router.get("/_health/db", status_code=status.HTTP_200_OK)
async def health_db(db: Database = Depends(get_database)):
    t0 = perf_counter()
    try:
        await db.ping()
        dt_ms = int((perf_counter() - t0) * 1000)
        return {"ok": True, "checks": {"db_select_1_ms": dt_ms}}
    except Exception as e:
        logger.warning("db_health_failed", error=str(e))
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "ok": False,
                "checks": {"db": "SELECT 1 failed"},
                "error": type(e).__name__,
                "detail": str(e),
            },
        )

"""Health check endpoint."""
import logging

from fastapi import APIRouter, Request

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health(request: Request):
    checks = {"app": "ok"}

    # Check the store root is writable
    root = request.app.state.store.root
    try:
        root.mkdir(parents=True, exist_ok=True)
        test_file = root / ".health_check"
        test_file.write_text("ok")
        test_file.unlink()
        checks["storage"] = "ok"
    except OSError as e:
        logger.warning("storage health check failed: %s", e)
        checks["storage"] = "error"
        return {"status": "unhealthy", "checks": checks}

    return {"status": "ok", "checks": checks}

# checkout_recs/api/v1/routers/health.py
import time
import subprocess
from fastapi import APIRouter, Request
from checkout_recs.core.config import get_settings

router = APIRouter()
START_TIME = time.time()


def _git_sha(short: bool = True) -> str:
    try:
        cmd = ["git", "rev-parse", "--short" if short else "HEAD"]
        return subprocess.check_output(cmd, stderr=subprocess.DEVNULL).decode().strip()
    except (OSError, subprocess.CalledProcessError):
        return "unknown"


@router.get("/health")
async def health(request: Request):
    """
    Lightweight health check:
    - Storefront credentials present (no network call)
    - number of open recommendation panels
    """
    settings = get_settings()
    checks: dict[str, object] = {
        "app_name": settings.APP_NAME,
        "env": settings.APP_ENV,
        "debug": settings.DEBUG,
        "version": settings.GIT_SHA if settings.GIT_SHA != "unknown" else _git_sha(),
        "uptime_seconds": int(time.time() - START_TIME),
        "recommendation_source": settings.RECOMMENDATION_SOURCE,
    }

    checks["storefront_configured"] = settings.storefront_configured

    registry = getattr(request.app.state, "registry", None)
    checks["open_panels"] = len(registry) if registry is not None else 0

    status = "ok" if settings.storefront_configured else "degraded"
    return {"status": status, "checks": checks, "timestamp": int(time.time())}

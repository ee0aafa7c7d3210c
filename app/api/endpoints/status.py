from typing import Any

from fastapi import APIRouter, Depends

from app.api.deps import get_settings
from app.core.clock import process_uptime, utc_now_iso
from app.core.config import PROJECT_NAME, VERSION, Settings
from app.schemas.common import HealthStatus, ServiceInfo

router = APIRouter()


@router.get("/", response_model=ServiceInfo)
async def root(settings: Settings = Depends(get_settings)) -> Any:
    return ServiceInfo(
        message=PROJECT_NAME,
        version=VERSION,
        timestamp=utc_now_iso(),
        environment=settings.ENVIRONMENT,
    )


@router.get("/health", response_model=HealthStatus)
async def health_check() -> Any:
    """Liveness check. No dependency checks."""
    return HealthStatus(
        status="healthy",
        uptime=process_uptime(),
        timestamp=utc_now_iso(),
    )

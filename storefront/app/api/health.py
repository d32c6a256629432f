from fastapi import APIRouter, Depends, status

from storefront.common import ServiceSettings

from ..dependencies import get_app_settings

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", status_code=status.HTTP_200_OK)
async def healthcheck(settings: ServiceSettings = Depends(get_app_settings)) -> dict[str, str]:
    """Liveness probe, returned without the response envelope."""

    return {"status": "ok", "service": settings.app_name, "environment": settings.environment}

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from tree_api.dependencies import BuildSettings
from tree_api.services import healthService


router = APIRouter(prefix="/health", tags=["health"])


class HealthResponse(BaseModel):
    status: str
    data_dir: str


@router.get("", response_model=HealthResponse)
async def health_check(build_settings: BuildSettings) -> HealthResponse:
    """Return API liveness and whether the data directory exists."""
    try:
        data_status = await healthService.health_check(build_settings)
    except Exception as exc:
        raise HTTPException(status_code=503, detail=f"Data directory unavailable: {exc}") from exc
    return HealthResponse(status="ok", data_dir=data_status)

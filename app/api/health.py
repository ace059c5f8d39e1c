from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.models.schemas import HealthReport
from app.services.health_service import LIVE_TAG, HealthCheckRegistry, get_health_registry, tagged

router = APIRouter(tags=["health"])


def _to_response(report: HealthReport) -> JSONResponse:
    status_code = 503 if report.status == "unhealthy" else 200
    return JSONResponse(status_code=status_code, content=report.model_dump(mode="json"))


@router.get("/health", response_model=HealthReport)
async def health(registry: HealthCheckRegistry = Depends(get_health_registry)) -> JSONResponse:
    return _to_response(await registry.run())


@router.get("/alive", response_model=HealthReport)
async def alive(registry: HealthCheckRegistry = Depends(get_health_registry)) -> JSONResponse:
    return _to_response(await registry.run(tagged(LIVE_TAG)))

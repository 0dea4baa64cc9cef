"""
Health check endpoints.

Provides liveness and readiness probes with a master data check.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from sekaideck.models.failure import KnownError
from sekaideck.services.data_provider import DataProvider, get_data_provider

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    master_data: str | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """
    Liveness probe.

    Returns healthy if the service is running.
    Does not check dependencies.
    """
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(
    response: Response,
    provider: Annotated[DataProvider, Depends(get_data_provider)],
) -> HealthResponse:
    """
    Readiness probe.

    Returns ready if the card master table can be read. Returns 503 otherwise.
    """
    try:
        await provider.get_master_data("cards")
        return HealthResponse(status="ready", master_data="available")
    except KnownError as e:
        logger.warning("Master data unavailable: %s", e.message)
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="not ready", master_data="unavailable")

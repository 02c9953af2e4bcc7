"""
Health Check Endpoints

Provides health status of the API and its sandbox pool.
"""
from fastapi import APIRouter
from datetime import datetime

from app.api.schemas import HealthCheckResponse
from app.config import settings
from app.core.sandbox import get_sandbox

router = APIRouter()


@router.get("/health", response_model=HealthCheckResponse)
async def health_check():
    """
    Health check endpoint

    Returns the current health status of the API.
    """
    return HealthCheckResponse(
        status="healthy",
        version=settings.API_VERSION,
        timestamp=datetime.utcnow(),
        pool_id="0x" + get_sandbox().pool_id.hex()
    )

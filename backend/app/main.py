"""
FastAPI Main Application

Sandbox API for time-weighted liquidity points and reward streams.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from datetime import datetime

from liquidity_points.errors import InvariantViolation, LiquidityPointsError

from app.config import settings
from app.api.v1 import health, pools, streams, points
from app.core.sandbox import get_sandbox

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.API_TITLE,
    description=settings.API_DESCRIPTION,
    version=settings.API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Include routers
app.include_router(health.router, prefix="/api/v1", tags=["Health"])
app.include_router(pools.router, prefix="/api/v1", tags=["Pool"])
app.include_router(streams.router, prefix="/api/v1", tags=["Streams"])
app.include_router(points.router, prefix="/api/v1", tags=["Points"])


@app.exception_handler(LiquidityPointsError)
async def liquidity_points_error_handler(request: Request, exc: LiquidityPointsError):
    """Map accounting errors to their HTTP status with a stable error code"""
    if isinstance(exc, InvariantViolation):
        logger.error("Invariant violation on %s: %s", request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.http_status,
        content={
            "status": "error",
            "code": exc.code,
            "message": exc.message
        }
    )


@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "name": settings.API_TITLE,
        "version": settings.API_VERSION,
        "description": settings.API_DESCRIPTION,
        "docs": "/docs",
        "health": "/api/v1/health",
        "timestamp": datetime.utcnow().isoformat()
    }


@app.on_event("startup")
async def startup_event():
    """Actions to perform on application startup"""
    sandbox = get_sandbox()
    print(f"🚀 Starting {settings.API_TITLE} v{settings.API_VERSION}")
    print(f"💧 Sandbox pool: 0x{sandbox.pool_id.hex()}")
    print(f"   fee {settings.SANDBOX_LP_FEE} pips, spacing {settings.SANDBOX_TICK_SPACING}, "
          f"tick {settings.SANDBOX_INITIAL_TICK}")
    print(f"⏱️  Sandbox clock starts at {sandbox.clock()}")


@app.on_event("shutdown")
async def shutdown_event():
    """Actions to perform on application shutdown"""
    print("👋 Shutting down Liquidity Points Sandbox API")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )
